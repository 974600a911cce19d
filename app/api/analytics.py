"""
Performance analytics API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from uuid import UUID
import logging

from app.database import get_db
from app.dependencies import get_current_user
from app.models import User
from app.schemas.analytics import DashboardAnalytics, SubjectAnalytics
from app.services.analytics_service import analytics_service

router = APIRouter(prefix="/api/analytics", tags=["analytics"])
logger = logging.getLogger(__name__)


@router.get("/dashboard", response_model=DashboardAnalytics)
async def get_dashboard(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Get comprehensive analytics for the caller

    Returns:
    - Overall statistics and streaks
    - Accuracy trend of the last 10 quizzes
    - Subject-wise progress
    - Time analysis and difficulty distribution
    """
    logger.info(f"Fetching dashboard analytics for user {current_user.id}")
    return DashboardAnalytics(**analytics_service.get_dashboard(db, current_user))


@router.get("/subjects/{subject_id}", response_model=SubjectAnalytics)
async def get_subject_analytics(
    subject_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Get analytics for one subject

    Returns:
    - Summary of the subject progress
    - Topic analysis (Strong / Average / Needs Improvement)
    - Progress timeline and speed data
    - Readiness breakdown with a recommendation
    """
    logger.info(f"Fetching analytics for subject {subject_id}, user {current_user.id}")
    return SubjectAnalytics(**analytics_service.get_subject_analytics(db, current_user, subject_id))
