"""
Quiz generation, retrieval, submission and abandonment endpoints
"""

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session
from typing import Dict
from uuid import UUID
import logging

from app.database import get_db
from app.dependencies import get_current_user
from app.models import Question, QuizAttempt, User
from app.schemas.quiz import (
    QuizGenerateRequest,
    QuizSubmission,
    QuizAttemptResponse,
)
from app.services.quiz_service import quiz_service


router = APIRouter(prefix="/api/quizzes", tags=["quizzes"])
logger = logging.getLogger(__name__)


def _attempt_response(attempt: QuizAttempt, questions: Dict[str, Question]) -> QuizAttemptResponse:
    """Attempt with question views; answers are revealed only once completed"""
    completed = attempt.status == QuizAttempt.STATUS_COMPLETED

    views = []
    outcomes = []
    for outcome in attempt.questions:
        question = questions.get(outcome["question_id"])
        if question is None:
            continue

        views.append({
            "question_id": outcome["question_id"],
            "question_text": question.question_text,
            "question_type": question.question_type,
            "options": [o.get("text", "") for o in question.options or []],
            "topic_id": str(question.topic_id),
            "difficulty": question.difficulty,
            "marks": question.marks,
            "time_limit": question.time_limit,
        })

        item = dict(outcome)
        if completed:
            item["correct_answer"] = question.correct_answer
            item["explanation"] = question.explanation
        outcomes.append(item)

    return QuizAttemptResponse(
        id=attempt.id,
        user_id=attempt.user_id,
        subject_id=attempt.subject_id,
        config=attempt.config,
        status=attempt.status,
        questions=views,
        outcomes=outcomes,
        results=attempt.results,
        performance=attempt.performance,
        progress_pending=attempt.progress_pending,
        started_at=attempt.started_at,
        completed_at=attempt.completed_at,
    )


@router.post("/generate", response_model=QuizAttemptResponse, status_code=201)
async def generate_quiz(
    request: QuizGenerateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Generate a quiz from the question bank

    - Filters active questions by subject, difficulty ("mixed" = any) and topics
    - Samples question_count questions uniformly without replacement
    - A short pool yields a smaller quiz (config.requested_count shows the ask)
      unless partial quizzes are disabled, in which case it is a 404
    """
    logger.info(
        f"Generating quiz for user {current_user.id}: subject={request.subject_id}, "
        f"difficulty={request.difficulty}, count={request.question_count}"
    )

    attempt = quiz_service.generate_quiz(db, current_user, request)
    questions = quiz_service.load_questions(db, attempt)

    return _attempt_response(attempt, questions)


@router.get("/{attempt_id}", response_model=QuizAttemptResponse)
async def get_quiz(
    attempt_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Fetch one of the caller's attempts"""
    attempt = quiz_service.get_attempt(db, current_user, attempt_id)
    questions = quiz_service.load_questions(db, attempt)
    return _attempt_response(attempt, questions)


@router.put("/{attempt_id}/submit", response_model=QuizAttemptResponse)
def submit_quiz(
    attempt_id: UUID,
    submission: QuizSubmission,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Submit and grade a quiz

    Grading: exact, case-sensitive match; empty or missing answers are skipped.

    Plain def so the progress-lock wait runs in the threadpool, not the event loop.

    Returns:
    - Per-question outcomes with correct answers
    - Results summary and topic/difficulty performance
    - progress_pending=true if the progress update has to be reconciled later
    """
    logger.info(f"Grading quiz {attempt_id} for user {current_user.id}")

    attempt = quiz_service.submit_quiz(
        db,
        current_user,
        attempt_id,
        [answer.model_dump() for answer in submission.answers],
    )

    background_tasks.add_task(
        quiz_service.record_question_stats,
        attempt.subject_id,
        attempt.questions,
        attempt.accuracy,
    )

    questions = quiz_service.load_questions(db, attempt)
    return _attempt_response(attempt, questions)


@router.post("/{attempt_id}/abandon", response_model=QuizAttemptResponse)
async def abandon_quiz(
    attempt_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Give up on an in-progress quiz"""
    attempt = quiz_service.abandon_quiz(db, current_user, attempt_id)
    questions = quiz_service.load_questions(db, attempt)
    return _attempt_response(attempt, questions)
