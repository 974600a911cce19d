"""
Leaderboards: global accuracy ranking, per-subject ranking and caller rank
"""
import logging
import math
from typing import Dict, Any

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from app.exceptions import NotFoundError
from app.models import Subject, SubjectProgress, User
from app.utils.cache import cache_service
from app.utils.rounding import round_half_up

logger = logging.getLogger(__name__)


def overall_score():
    """Lifetime accuracy as a SQL expression, 0 for users with no answers"""
    return case(
        (
            User.total_questions_attempted > 0,
            User.total_correct_answers * 100.0 / User.total_questions_attempted,
        ),
        else_=0.0,
    )


class LeaderboardService:
    """Ranking queries, cached in Redis when available"""

    def global_leaderboard(self, db: Session, page: int = 1, limit: int = 50) -> Dict[str, Any]:
        cache_key = cache_service.leaderboard_key("global", page, limit)
        cached = cache_service.get(cache_key)
        if cached:
            return cached

        score = overall_score().label("overall_score")
        rows = (
            db.query(User, score)
            .order_by(score.desc(), User.total_quizzes_taken.desc(), User.created_at.asc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        total = db.query(func.count(User.id)).scalar() or 0

        entries = [
            {
                "rank": (page - 1) * limit + index + 1,
                "user_id": str(user.id),
                "name": user.name,
                "quizzes_taken": user.total_quizzes_taken or 0,
                "accuracy": round_half_up(float(overall_score or 0), 2),
                "current_streak": user.current_streak or 0,
            }
            for index, (user, overall_score) in enumerate(rows)
        ]

        response = {
            "entries": entries,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit) if limit else 0,
            },
        }
        cache_service.set(cache_key, response)
        return response

    def subject_leaderboard(self, db: Session, subject_id, page: int = 1, limit: int = 50) -> Dict[str, Any]:
        subject = db.get(Subject, subject_id)
        if not subject:
            raise NotFoundError("Subject not found")

        cache_key = cache_service.leaderboard_key(str(subject.id), page, limit)
        cached = cache_service.get(cache_key)
        if cached:
            return cached

        base = db.query(SubjectProgress, User).join(User, SubjectProgress.user_id == User.id).filter(
            SubjectProgress.subject_id == subject.id
        )
        rows = (
            base.order_by(
                SubjectProgress.total_score.desc(),
                SubjectProgress.average_accuracy.desc(),
            )
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        total = base.count()

        entries = [
            {
                "rank": (page - 1) * limit + index + 1,
                "user_id": str(user.id),
                "name": user.name,
                "quizzes_completed": progress.quizzes_completed,
                "accuracy": round_half_up(progress.average_accuracy or 0, 2),
                "interview_readiness": progress.interview_readiness_score,
                "total_score": progress.total_score,
            }
            for index, (progress, user) in enumerate(rows)
        ]

        response = {
            "subject_id": str(subject.id),
            "entries": entries,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit) if limit else 0,
            },
        }
        cache_service.set(cache_key, response)
        return response

    def my_rank(self, db: Session, user: User) -> Dict[str, Any]:
        """Caller's position in the global ranking (1 = best)"""
        score = overall_score().label("overall_score")
        ranked = (
            db.query(User.id, score)
            .order_by(score.desc(), User.total_quizzes_taken.desc(), User.created_at.asc())
            .all()
        )

        total_users = len(ranked)
        rank = next((i + 1 for i, row in enumerate(ranked) if row.id == user.id), 0)
        percentile = round_half_up((1 - rank / total_users) * 100, 2) if total_users and rank else 0.0

        logger.info(f"Rank lookup: user={user.id}, rank={rank}/{total_users}")
        return {"global_rank": rank, "total_users": total_users, "percentile": percentile}


# Global instance
leaderboard_service = LeaderboardService()
