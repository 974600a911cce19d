"""
Quiz lifecycle: generation, submission and abandonment
"""
import logging
import random
import uuid
from datetime import datetime
from typing import Dict, Any, List

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.config import settings
from app.database import SessionLocal
from app.exceptions import InvalidStateError, NotFoundError
from app.models import Question, QuizAttempt, Subject, User
from app.schemas.quiz import QuizGenerateRequest
from app.services.grading_service import grading_service
from app.services.performance_service import performance_service
from app.services.progress_service import progress_service
from app.utils.cache import cache_service
from app.utils.clock import utcnow
from app.utils.locks import progress_locks

logger = logging.getLogger(__name__)


class QuizService:
    """Creates attempts from the question bank and completes them"""

    def __init__(self, rng: random.Random = None):
        self.rng = rng or random.SystemRandom()

    def generate_quiz(self, db: Session, user: User, request: QuizGenerateRequest) -> QuizAttempt:
        """
        Create an in-progress attempt from a random sample of the question pool

        Raises:
            NotFoundError: subject missing, empty pool, or short pool when
                partial quizzes are disabled
        """
        subject = db.get(Subject, request.subject_id)
        if not subject or not subject.is_active:
            raise NotFoundError("Subject not found")

        query = db.query(Question.id).filter(
            Question.subject_id == subject.id,
            Question.is_active.is_(True),
        )
        if request.difficulty != "mixed":
            query = query.filter(Question.difficulty == request.difficulty)
        if request.topics:
            query = query.filter(Question.topic_id.in_(request.topics))

        pool = [row.id for row in query.all()]
        if not pool:
            raise NotFoundError("No questions found")

        requested = min(request.question_count, settings.MAX_QUIZ_QUESTIONS)
        if len(pool) < requested:
            if not settings.ALLOW_PARTIAL_QUIZ:
                raise NotFoundError(
                    f"Only {len(pool)} questions available, {requested} requested"
                )
            logger.warning(
                f"Question pool for subject {subject.id} has {len(pool)} questions, "
                f"{requested} requested; serving a partial quiz"
            )

        chosen = self.rng.sample(pool, min(requested, len(pool)))
        questions = {q.id: q for q in db.query(Question).filter(Question.id.in_(chosen)).all()}

        time_limit = None
        if request.mode == "timed":
            time_limit = sum(questions[q_id].time_limit for q_id in chosen)

        attempt = QuizAttempt(
            user_id=user.id,
            subject_id=subject.id,
            config={
                "mode": request.mode,
                "difficulty": request.difficulty,
                "question_count": len(chosen),
                "requested_count": requested,
                "time_limit": time_limit,
                "topics": [str(t) for t in request.topics or []],
            },
            questions=[
                {
                    "question_id": str(q_id),
                    "user_answer": None,
                    "is_correct": None,
                    "time_spent": 0,
                    "marks_awarded": 0,
                    "skipped": False,
                }
                for q_id in chosen
            ],
            status=QuizAttempt.STATUS_IN_PROGRESS,
            started_at=utcnow(),
        )

        db.add(attempt)
        db.commit()
        db.refresh(attempt)

        logger.info(f"Quiz created: {attempt.id} ({len(chosen)} questions) for user {user.id}")
        return attempt

    def get_attempt(self, db: Session, user: User, attempt_id) -> QuizAttempt:
        """Attempt owned by the user, else NotFoundError"""
        attempt = (
            db.query(QuizAttempt)
            .filter(QuizAttempt.id == attempt_id, QuizAttempt.user_id == user.id)
            .first()
        )
        if not attempt:
            raise NotFoundError("Quiz not found")
        return attempt

    def load_questions(self, db: Session, attempt: QuizAttempt) -> Dict[str, Question]:
        """Question bank rows of an attempt keyed by string id"""
        ids = [uuid.UUID(q["question_id"]) for q in attempt.questions]
        rows = db.query(Question).filter(Question.id.in_(ids)).all()
        return {str(q.id): q for q in rows}

    def submit_quiz(
        self,
        db: Session,
        user: User,
        attempt_id,
        answers: List[Dict[str, Any]],
    ) -> QuizAttempt:
        """
        Grade an attempt, complete it and apply the owner's progress

        Runs under the (user, subject) progress lock. If the progress update
        fails the attempt is still completed, flagged progress_pending for
        reconciliation.

        Raises:
            NotFoundError: attempt not owned by user, or a question vanished
            InvalidStateError: attempt already completed or abandoned
        """
        attempt = self.get_attempt(db, user, attempt_id)

        with progress_locks.hold(user.id, attempt.subject_id):
            db.refresh(attempt)
            if attempt.status == QuizAttempt.STATUS_COMPLETED:
                raise InvalidStateError("Quiz already submitted")
            if attempt.status == QuizAttempt.STATUS_ABANDONED:
                raise InvalidStateError("Quiz was abandoned")

            questions = self.load_questions(db, attempt)
            missing = [q["question_id"] for q in attempt.questions if q["question_id"] not in questions]
            if missing:
                raise NotFoundError(f"Questions no longer exist: {', '.join(missing)}")

            grading_input = [
                {
                    "question_id": q["question_id"],
                    "correct_answer": questions[q["question_id"]].correct_answer,
                    "marks": questions[q["question_id"]].marks,
                }
                for q in attempt.questions
            ]
            outcomes, results = grading_service.grade_quiz(grading_input, answers)

            question_meta = {
                q_id: {"topic": str(q.topic_id), "difficulty": q.difficulty}
                for q_id, q in questions.items()
            }
            performance = performance_service.aggregate(outcomes, question_meta)

            now = utcnow()
            self._complete(attempt, outcomes, results, performance, now)

            try:
                progress_service.apply_attempt(db, user, attempt.subject, attempt, now)
                db.commit()
            except Exception as e:
                db.rollback()
                logger.error(
                    f"Progress update failed for attempt {attempt_id}; "
                    f"completing without progress: {str(e)}",
                    exc_info=True
                )
                attempt = self.get_attempt(db, user, attempt_id)
                self._complete(attempt, outcomes, results, performance, now)
                attempt.progress_pending = True
                db.commit()

            db.refresh(attempt)

        cache_service.clear_leaderboards()
        logger.info(
            f"Quiz attempt submitted: {attempt.id}, "
            f"marks: {results['marks_obtained']}/{results['total_marks']}"
        )
        return attempt

    @staticmethod
    def _complete(attempt: QuizAttempt, outcomes, results, performance, now: datetime) -> None:
        attempt.questions = outcomes
        attempt.results = results
        attempt.performance = performance
        attempt.status = QuizAttempt.STATUS_COMPLETED
        attempt.completed_at = now
        attempt.progress_pending = False

    def abandon_quiz(self, db: Session, user: User, attempt_id) -> QuizAttempt:
        """Move an in-progress attempt to abandoned"""
        attempt = self.get_attempt(db, user, attempt_id)
        if attempt.status != QuizAttempt.STATUS_IN_PROGRESS:
            raise InvalidStateError(f"Quiz is already {attempt.status}")

        attempt.status = QuizAttempt.STATUS_ABANDONED
        db.commit()
        db.refresh(attempt)

        logger.info(f"Quiz abandoned: {attempt.id}")
        return attempt

    def record_question_stats(self, subject_id, outcomes: List[Dict[str, Any]], accuracy: float) -> None:
        """
        Bump question bank and subject counters after a submission

        Runs as a background task with its own session. Atomic SQL
        increments; any failure is logged and dropped.
        """
        db = SessionLocal()
        try:
            for outcome in outcomes:
                if outcome["skipped"]:
                    continue
                db.execute(
                    update(Question)
                    .where(Question.id == uuid.UUID(outcome["question_id"]))
                    .values(
                        total_attempts=Question.total_attempts + 1,
                        correct_attempts=Question.correct_attempts + int(bool(outcome["is_correct"])),
                    )
                )

            # right-hand sides read pre-update values
            db.execute(
                update(Subject)
                .where(Subject.id == subject_id)
                .values(
                    total_attempts=Subject.total_attempts + 1,
                    average_score=(Subject.average_score * Subject.total_attempts + accuracy)
                    / (Subject.total_attempts + 1),
                )
            )
            db.commit()
        except Exception as e:
            db.rollback()
            logger.warning(f"Failed to record question stats for subject {subject_id}: {str(e)}")
        finally:
            db.close()


# Global instance
quiz_service = QuizService()
