"""
Analytics service for user dashboards, subject drill-downs and the admin overview
"""
import logging
import uuid
from datetime import datetime, timedelta
from typing import Dict, List, Any, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from collections import defaultdict

from app.exceptions import NotFoundError
from app.models import Question, Subject, SubjectProgress, QuizAttempt, Topic, User
from app.services.leaderboard_service import overall_score
from app.services.performance_service import DIFFICULTIES
from app.services.readiness_service import readiness_service, history_accuracies
from app.utils.clock import utcnow
from app.utils.rounding import round_half_up

logger = logging.getLogger(__name__)


class AnalyticsService:
    """Service for generating performance analytics"""

    def _completed_attempts(self, db: Session, user_id, subject_id=None) -> List[QuizAttempt]:
        """Completed attempts, newest first"""
        query = db.query(QuizAttempt).filter(
            QuizAttempt.user_id == user_id,
            QuizAttempt.status == QuizAttempt.STATUS_COMPLETED,
        )
        if subject_id is not None:
            query = query.filter(QuizAttempt.subject_id == subject_id)
        return query.order_by(QuizAttempt.completed_at.desc()).all()

    def get_user_stats(self, db: Session, user: User) -> Dict[str, Any]:
        """
        Stats summary for a user

        Average accuracy and time cover the 10 most recent quizzes.
        """
        attempts = self._completed_attempts(db, user.id)
        recent = attempts[:10]

        avg_accuracy = sum(a.accuracy for a in recent) / len(recent) if recent else 0.0
        total_time = sum((a.results or {}).get("total_time_spent", 0) for a in recent)

        progress_records = user.subject_progress

        return {
            "total_quizzes": len(attempts),
            "current_streak": user.current_streak or 0,
            "longest_streak": user.longest_streak or 0,
            "average_accuracy": round_half_up(avg_accuracy, 2),
            "total_time_spent": total_time // 60,
            "total_questions_attempted": user.total_questions_attempted or 0,
            "total_correct_answers": user.total_correct_answers or 0,
            "subjects_started": len(progress_records),
            "certificates_earned": sum(1 for p in progress_records if p.certificate_earned),
        }

    def get_history(self, db: Session, user: User, limit: int = 5) -> List[Dict[str, Any]]:
        """Most recent completed attempts"""
        attempts = self._completed_attempts(db, user.id)[:limit]
        return [
            {
                "attempt_id": a.id,
                "subject_id": a.subject_id,
                "subject_name": a.subject.name if a.subject else "",
                "completed_at": a.completed_at,
                "accuracy": a.accuracy,
                "marks_obtained": (a.results or {}).get("marks_obtained", 0),
                "total_marks": (a.results or {}).get("total_marks", 0),
            }
            for a in attempts
        ]

    def get_dashboard(self, db: Session, user: User) -> Dict[str, Any]:
        """
        Get comprehensive analytics for a user

        Returns:
            Overall stats, trend of the last 10 quizzes, subject-wise
            performance, time analysis and difficulty distribution
        """
        attempts = self._completed_attempts(db, user.id)

        attempted = user.total_questions_attempted or 0
        correct = user.total_correct_answers or 0
        overall_stats = {
            "total_quizzes": user.total_quizzes_taken or 0,
            "total_questions": attempted,
            "correct_answers": correct,
            "overall_accuracy": round_half_up(correct / attempted * 100, 2) if attempted > 0 else 0.0,
            "current_streak": user.current_streak or 0,
            "longest_streak": user.longest_streak or 0,
        }

        # Oldest to newest for charting
        performance_trend = [
            {
                "date": a.completed_at,
                "accuracy": a.accuracy,
                "score": (a.results or {}).get("marks_obtained", 0),
                "subject": a.subject.name if a.subject else "",
            }
            for a in reversed(attempts[:10])
        ]

        subject_performance = []
        for progress in user.subject_progress:
            subject = progress.subject
            subject_performance.append({
                "subject_id": subject.id,
                "subject": subject.name,
                "slug": subject.slug,
                "category": subject.category,
                "quizzes_completed": progress.quizzes_completed,
                "average_accuracy": progress.average_accuracy,
                "interview_readiness": progress.interview_readiness_score,
                "strength_topics": len(progress.strength_topics or []),
                "weak_topics": len(progress.weak_topics or []),
                "certificate_earned": progress.certificate_earned,
            })

        total_time = sum((a.results or {}).get("total_time_spent", 0) for a in attempts)
        time_analysis = {
            "total_time_spent": total_time,
            "avg_time_per_quiz": round_half_up(total_time / len(attempts)) if attempts else 0,
        }

        difficulty_performance = {d: {"total": 0, "correct": 0} for d in DIFFICULTIES}
        for attempt in attempts:
            buckets = (attempt.performance or {}).get("difficulty_wise_score", {})
            for difficulty, stats in buckets.items():
                if difficulty in difficulty_performance:
                    difficulty_performance[difficulty]["total"] += stats.get("total", 0)
                    difficulty_performance[difficulty]["correct"] += stats.get("correct", 0)

        return {
            "overall_stats": overall_stats,
            "performance_trend": performance_trend,
            "subject_performance": subject_performance,
            "time_analysis": time_analysis,
            "difficulty_performance": difficulty_performance,
        }

    def get_subject_analytics(self, db: Session, user: User, subject_id) -> Dict[str, Any]:
        """
        Get analytics for one subject of a user

        Raises:
            NotFoundError: subject missing, or no progress recorded yet
        """
        subject = db.get(Subject, subject_id)
        if not subject:
            raise NotFoundError("Subject not found")

        progress = (
            db.query(SubjectProgress)
            .filter(SubjectProgress.user_id == user.id, SubjectProgress.subject_id == subject.id)
            .first()
        )
        if not progress:
            raise NotFoundError("No progress found for this subject")

        attempts = self._completed_attempts(db, user.id, subject.id)

        topic_analysis = self._topic_analysis(db, attempts)

        chronological = list(reversed(attempts))
        progress_timeline = [
            {
                "attempt": index + 1,
                "date": a.completed_at,
                "accuracy": a.accuracy,
                "score": (a.results or {}).get("marks_obtained", 0),
                "time_spent": round_half_up((a.results or {}).get("total_time_spent", 0) / 60),
            }
            for index, a in enumerate(chronological)
        ]
        speed_data = [
            {
                "date": a.completed_at,
                "avg_time_per_question": (a.results or {}).get("average_time_per_question", 0),
                "accuracy": a.accuracy,
            }
            for a in chronological
        ]

        components = readiness_service.breakdown(
            quizzes_completed=progress.quizzes_completed,
            average_accuracy=progress.average_accuracy,
            strength_topic_count=len(progress.strength_topics or []),
            history=history_accuracies(attempts),
        )

        return {
            "subject_id": subject.id,
            "subject": subject.name,
            "summary": {
                "quizzes_completed": progress.quizzes_completed,
                "average_accuracy": progress.average_accuracy,
                "interview_readiness": progress.interview_readiness_score,
                "time_spent": round_half_up(progress.time_spent / 60),
                "certificate_earned": progress.certificate_earned,
            },
            "topic_analysis": topic_analysis,
            "progress_timeline": progress_timeline,
            "speed_data": speed_data,
            "readiness_breakdown": {
                "overall": progress.interview_readiness_score,
                "components": {k: round_half_up(v, 2) for k, v in components.items()},
                "recommendation": readiness_service.recommendation(progress.interview_readiness_score),
            },
        }

    def _topic_analysis(self, db: Session, attempts: List[QuizAttempt]) -> List[Dict[str, Any]]:
        """Topic accuracy summed over every attempt of the subject"""

        topic_totals = defaultdict(lambda: {"total": 0, "correct": 0})
        for attempt in attempts:
            for score in (attempt.performance or {}).get("topic_wise_score", []):
                topic_totals[score["topic"]]["total"] += score["total"]
                topic_totals[score["topic"]]["correct"] += score["correct"]

        topic_ids = [uuid.UUID(t) for t in topic_totals]
        names = {
            str(t.id): t.name
            for t in db.query(Topic).filter(Topic.id.in_(topic_ids)).all()
        } if topic_ids else {}

        analysis = []
        for topic_id, stats in topic_totals.items():
            ratio = stats["correct"] / stats["total"] if stats["total"] else 0
            if ratio >= 0.75:
                status = "Strong"
            elif ratio >= 0.5:
                status = "Average"
            else:
                status = "Needs Improvement"

            analysis.append({
                "topic_id": topic_id,
                "topic": names.get(topic_id, "Unknown"),
                "accuracy": round_half_up(ratio * 100, 2),
                "questions_attempted": stats["total"],
                "status": status,
            })

        analysis.sort(key=lambda x: x["accuracy"], reverse=True)
        return analysis

    def get_platform_analytics(self, db: Session, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Platform-wide usage for the admin dashboard

        Active users are those with quiz activity in the last 30 days; top
        users rank by lifetime accuracy among users who answered anything.
        """
        now = now or utcnow()
        learners = db.query(User).filter(User.role == "user")

        total_users = learners.count()
        active_users = learners.filter(User.last_activity_date >= now - timedelta(days=30)).count()
        total_quizzes = (
            db.query(func.count(QuizAttempt.id))
            .filter(QuizAttempt.status == QuizAttempt.STATUS_COMPLETED)
            .scalar() or 0
        )

        subjects = db.query(Subject).filter(Subject.is_active.is_(True)).all()

        overview = {
            "total_users": total_users,
            "active_users": active_users,
            "total_quizzes": total_quizzes,
            "avg_quizzes_per_user": round_half_up(total_quizzes / total_users, 2) if total_users else 0.0,
            "total_questions": sum(s.total_questions or 0 for s in subjects),
            "total_subjects": len(subjects),
        }

        subject_stats = [
            {
                "subject_id": s.id,
                "subject": s.name,
                "total_attempts": s.total_attempts or 0,
                "average_score": round_half_up(s.average_score or 0, 2),
                "total_questions": s.total_questions or 0,
            }
            for s in sorted(subjects, key=lambda s: (-(s.total_attempts or 0), s.name))
        ]

        difficulty_stats = {d: 0 for d in DIFFICULTIES}
        for difficulty, count in (
            db.query(Question.difficulty, func.count(Question.id))
            .filter(Question.is_active.is_(True))
            .group_by(Question.difficulty)
            .all()
        ):
            difficulty_stats[difficulty] = count

        score = overall_score().label("overall_score")
        top_users = [
            {
                "user_id": u.id,
                "name": u.name,
                "quizzes_taken": u.total_quizzes_taken or 0,
                "accuracy": round_half_up(float(accuracy or 0), 2),
            }
            for u, accuracy in (
                db.query(User, score)
                .filter(User.total_questions_attempted > 0)
                .order_by(score.desc(), User.total_quizzes_taken.desc(), User.created_at.asc())
                .limit(10)
                .all()
            )
        ]

        recent = (
            db.query(QuizAttempt)
            .filter(QuizAttempt.status == QuizAttempt.STATUS_COMPLETED)
            .order_by(QuizAttempt.completed_at.desc())
            .limit(10)
            .all()
        )
        recent_activity = [
            {
                "attempt_id": a.id,
                "user": a.user.name if a.user else "",
                "subject": a.subject.name if a.subject else "",
                "accuracy": a.accuracy,
                "completed_at": a.completed_at,
            }
            for a in recent
        ]

        return {
            "overview": overview,
            "subject_stats": subject_stats,
            "difficulty_stats": difficulty_stats,
            "top_users": top_users,
            "recent_activity": recent_activity,
        }


# Global instance
analytics_service = AnalyticsService()
