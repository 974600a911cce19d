"""
Progress mutation after a completed quiz
Lifetime counters, streaks, subject progress and certificate eligibility
"""
import logging
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from app.config import settings
from app.models import QuizAttempt, Subject, SubjectProgress, User
from app.services.performance_service import performance_service
from app.services.readiness_service import readiness_service, history_accuracies
from app.utils.clock import utcnow
from app.utils.locks import progress_locks
from app.utils.rounding import round_half_up

logger = logging.getLogger(__name__)


def recompute_average_accuracy(accuracies: Sequence[float]) -> float:
    """Mean accuracy over the full attempt history, rounded to 2 decimals"""
    if not accuracies:
        return 0.0
    return round_half_up(sum(accuracies) / len(accuracies), 2)


def running_average(previous_average: float, previous_count: int, new_value: float) -> float:
    """Incremental mean; must agree with recompute_average_accuracy up to rounding"""
    return (previous_average * previous_count + new_value) / (previous_count + 1)


class ProgressService:
    """
    Applies a completed attempt to the owner's persistent progress.

    SubjectProgress states: absent -> active -> certified (terminal).
    Nothing here commits; the caller owns the transaction.
    """

    def update_streak(self, user: User, now: datetime) -> None:
        """
        Advance, keep or reset the daily streak

        Same calendar day keeps it, the next day extends it, any later day
        restarts it at 1. Activity older than the last recorded one (a
        replayed attempt) leaves the streak alone.
        """
        if user.last_activity_date is None:
            user.current_streak = 1
        else:
            if now < user.last_activity_date:
                return
            day_diff = (now.date() - user.last_activity_date.date()).days
            if day_diff == 1:
                user.current_streak = (user.current_streak or 0) + 1
            elif day_diff > 1:
                user.current_streak = 1

        user.longest_streak = max(user.longest_streak or 0, user.current_streak or 0)
        user.last_activity_date = now

    def get_or_create_progress(self, db: Session, user: User, subject_id) -> SubjectProgress:
        progress = (
            db.query(SubjectProgress)
            .filter(
                SubjectProgress.user_id == user.id,
                SubjectProgress.subject_id == subject_id,
            )
            .first()
        )
        if progress is None:
            progress = SubjectProgress(
                user_id=user.id,
                subject_id=subject_id,
                quizzes_completed=0,
                total_score=0,
                average_accuracy=0.0,
                time_spent=0,
                interview_readiness_score=0,
                strength_topics=[],
                weak_topics=[],
                certificate_earned=False,
            )
            db.add(progress)
            logger.info(f"Created subject progress for user {user.id}, subject {subject_id}")
        return progress

    def completed_history(self, db: Session, user_id, subject_id) -> List[QuizAttempt]:
        """All completed attempts of a subject, newest first"""
        return (
            db.query(QuizAttempt)
            .filter(
                QuizAttempt.user_id == user_id,
                QuizAttempt.subject_id == subject_id,
                QuizAttempt.status == QuizAttempt.STATUS_COMPLETED,
            )
            .order_by(QuizAttempt.completed_at.desc(), QuizAttempt.started_at.desc())
            .all()
        )

    def apply_attempt(
        self,
        db: Session,
        user: User,
        subject: Subject,
        attempt: QuizAttempt,
        now: Optional[datetime] = None,
    ) -> SubjectProgress:
        """
        Apply one completed attempt to the user's progress

        Args:
            db: Database session (not committed here)
            user: Attempt owner
            subject: Attempt subject (certificate thresholds)
            attempt: Completed attempt with results and performance set

        Returns:
            The updated SubjectProgress
        """
        now = now or utcnow()
        results = attempt.results or {}
        performance = attempt.performance or {}

        # 1. Lifetime counters
        user.total_quizzes_taken = (user.total_quizzes_taken or 0) + 1
        user.total_questions_attempted = (
            (user.total_questions_attempted or 0) + results.get("attempted_questions", 0)
        )
        user.total_correct_answers = (
            (user.total_correct_answers or 0) + results.get("correct_answers", 0)
        )

        # 2. Streak
        self.update_streak(user, now)

        # 3. Subject counters
        progress = self.get_or_create_progress(db, user, subject.id)
        progress.quizzes_completed = (progress.quizzes_completed or 0) + 1
        progress.total_score = (progress.total_score or 0) + results.get("marks_obtained", 0)
        progress.time_spent = (progress.time_spent or 0) + results.get("total_time_spent", 0)
        if progress.last_attempt_date is None or now > progress.last_attempt_date:
            progress.last_attempt_date = now

        # 4. Average accuracy from the full history
        db.flush()
        history = self.completed_history(db, user.id, subject.id)
        accuracies = history_accuracies(history)
        progress.average_accuracy = recompute_average_accuracy(accuracies)

        # 6 before 5: coverage reads the strength topics of this attempt
        topics = performance_service.classify_topics(
            performance.get("topic_wise_score", []),
            settings.STRENGTH_THRESHOLD,
            settings.WEAKNESS_THRESHOLD,
        )
        progress.strength_topics = topics["strength"]
        progress.weak_topics = topics["weak"]

        # 5. Readiness
        progress.interview_readiness_score = readiness_service.calculate_readiness(
            quizzes_completed=progress.quizzes_completed,
            average_accuracy=progress.average_accuracy,
            strength_topic_count=len(progress.strength_topics),
            history=accuracies,
        )

        # 7. Certificate eligibility
        self.evaluate_certificate(progress, subject, now)

        logger.info(
            f"Progress updated: user={user.id}, subject={subject.id}, "
            f"quizzes={progress.quizzes_completed}, avg_accuracy={progress.average_accuracy}, "
            f"readiness={progress.interview_readiness_score}, streak={user.current_streak}"
        )

        return progress

    def evaluate_certificate(
        self,
        progress: SubjectProgress,
        subject: Subject,
        now: datetime,
    ) -> bool:
        """
        Flip certificate_earned once thresholds are met

        Returns True only on the transition; never resets an earned certificate.
        """
        if progress.certificate_earned:
            return False

        if (
            progress.quizzes_completed >= subject.minimum_quizzes
            and progress.average_accuracy >= subject.minimum_accuracy
        ):
            progress.certificate_earned = True
            progress.certificate_date = now
            logger.info(
                f"Certificate earned: user={progress.user_id}, subject={subject.id}"
            )
            return True

        return False

    def reconcile_pending(self, db: Session) -> int:
        """
        Replay progress for completed attempts whose progress update failed

        Each replay holds the (user, subject) progress lock and is applied
        at the attempt's own completion time.

        Returns:
            Number of attempts reconciled
        """
        pending = (
            db.query(QuizAttempt)
            .filter(
                QuizAttempt.status == QuizAttempt.STATUS_COMPLETED,
                QuizAttempt.progress_pending.is_(True),
            )
            .order_by(QuizAttempt.completed_at.asc())
            .all()
        )

        reconciled = 0
        for attempt in pending:
            user = db.get(User, attempt.user_id)
            subject = db.get(Subject, attempt.subject_id)
            if user is None or subject is None:
                logger.warning(f"Skipping pending attempt {attempt.id}: owner or subject missing")
                continue

            try:
                with progress_locks.hold(attempt.user_id, attempt.subject_id):
                    db.refresh(attempt)
                    if not attempt.progress_pending:
                        continue
                    self.apply_attempt(db, user, subject, attempt, attempt.completed_at)
                    attempt.progress_pending = False
                    db.commit()
                reconciled += 1
            except Exception as e:
                db.rollback()
                logger.error(f"Reconciliation failed for attempt {attempt.id}: {str(e)}", exc_info=True)

        logger.info(f"Reconciled {reconciled}/{len(pending)} pending attempts")
        return reconciled


# Global instance
progress_service = ProgressService()
