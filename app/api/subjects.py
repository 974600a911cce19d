"""
Subject catalog and question bank endpoints
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
import logging

from app.database import get_db
from app.dependencies import get_current_user, require_admin
from app.models import Subject, User
from app.schemas.subject import (
    SubjectCreate, SubjectUpdate, SubjectResponse,
    TopicCreate, TopicUpdate, TopicResponse,
    QuestionCreate, QuestionBulkCreate, QuestionUpdate, QuestionResponse,
    QuestionPage, QuestionStats
)
from app.services.catalog_service import catalog_service

router = APIRouter(prefix="/api/subjects", tags=["subjects"])
logger = logging.getLogger(__name__)


@router.post("", response_model=SubjectResponse, status_code=201)
async def create_subject(
    payload: SubjectCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Create a subject with its certificate criteria (admin only)"""
    return catalog_service.create_subject(db, payload, admin)


@router.get("", response_model=List[SubjectResponse])
async def list_subjects(db: Session = Depends(get_db)):
    """Active subjects"""
    return db.query(Subject).filter(Subject.is_active.is_(True)).order_by(Subject.name).all()


@router.get("/{subject_id}", response_model=SubjectResponse)
async def get_subject(subject_id: UUID, db: Session = Depends(get_db)):
    return catalog_service.get_subject(db, subject_id)


@router.put("/{subject_id}", response_model=SubjectResponse)
async def update_subject(
    subject_id: UUID,
    payload: SubjectUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Change catalog fields or certificate criteria (admin only)"""
    return catalog_service.update_subject(db, subject_id, payload, admin)


@router.delete("/{subject_id}", response_model=SubjectResponse)
async def delete_subject(
    subject_id: UUID,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """
    Deactivate a subject (admin only)

    Progress, attempts and certificates are kept; the subject leaves the
    catalog and no new quizzes can be generated for it.
    """
    return catalog_service.deactivate_subject(db, subject_id, admin)


@router.post("/{subject_id}/topics", response_model=TopicResponse, status_code=201)
async def create_topic(
    subject_id: UUID,
    payload: TopicCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return catalog_service.create_topic(db, subject_id, payload)


@router.get("/{subject_id}/topics", response_model=List[TopicResponse])
async def list_topics(subject_id: UUID, db: Session = Depends(get_db)):
    return catalog_service.list_topics(db, subject_id)


@router.put("/{subject_id}/topics/{topic_id}", response_model=TopicResponse)
async def update_topic(
    subject_id: UUID,
    topic_id: UUID,
    payload: TopicUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return catalog_service.update_topic(db, subject_id, topic_id, payload)


@router.delete("/{subject_id}/topics/{topic_id}", response_model=TopicResponse)
async def delete_topic(
    subject_id: UUID,
    topic_id: UUID,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Deactivate a topic and its questions (admin only)"""
    return catalog_service.deactivate_topic(db, subject_id, topic_id)


@router.post("/{subject_id}/questions", response_model=QuestionResponse, status_code=201)
async def create_question(
    subject_id: UUID,
    payload: QuestionCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """
    Add a question to the bank (admin only)

    Topic and subject question counts are bumped with atomic updates.
    """
    questions = catalog_service.add_questions(db, subject_id, [payload], admin)
    return questions[0]


@router.post("/{subject_id}/questions/bulk", response_model=List[QuestionResponse], status_code=201)
async def create_questions_bulk(
    subject_id: UUID,
    payload: QuestionBulkCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Add up to 200 questions at once; one bad topic rejects the whole batch"""
    return catalog_service.add_questions(db, subject_id, payload.questions, admin)


@router.get("/{subject_id}/questions", response_model=QuestionPage)
async def list_questions(
    subject_id: UUID,
    topic_id: Optional[UUID] = None,
    difficulty: Optional[str] = Query(None, pattern="^(easy|medium|hard)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Active questions with answers (admin only)"""
    return catalog_service.list_questions(db, subject_id, topic_id, difficulty, page, limit)


@router.get("/{subject_id}/questions/stats", response_model=QuestionStats)
async def question_stats(
    subject_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Question counts by difficulty and topic, with attempt and correct-rate averages"""
    return catalog_service.question_stats(db, subject_id)


@router.put("/{subject_id}/questions/{question_id}", response_model=QuestionResponse)
async def update_question(
    subject_id: UUID,
    question_id: UUID,
    payload: QuestionUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return catalog_service.update_question(db, subject_id, question_id, payload)


@router.delete("/{subject_id}/questions/{question_id}", response_model=QuestionResponse)
async def delete_question(
    subject_id: UUID,
    question_id: UUID,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Retire a question; quizzes already taken keep showing it"""
    return catalog_service.deactivate_question(db, subject_id, question_id)
