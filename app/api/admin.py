"""
Maintenance and platform analytics endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from app.database import get_db
from app.dependencies import require_admin
from app.models import User
from app.schemas.analytics import PlatformAnalytics
from app.services.analytics_service import analytics_service
from app.services.progress_service import progress_service

router = APIRouter(prefix="/api/admin", tags=["admin"])
logger = logging.getLogger(__name__)


@router.post("/reconcile-progress")
def reconcile_progress(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Replay progress for completed quizzes whose progress update failed"""
    logger.info(f"Progress reconciliation requested by {admin.id}")
    reconciled = progress_service.reconcile_pending(db)
    return {"reconciled": reconciled}


@router.get("/analytics", response_model=PlatformAnalytics)
async def platform_analytics(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """
    Platform-wide analytics (admin only)

    Returns:
    - Overview: learners, active learners, completed quizzes, catalog size
    - Per-subject attempts and average score
    - Active questions per difficulty
    - Top 10 learners by lifetime accuracy and the 10 latest quizzes
    """
    return analytics_service.get_platform_analytics(db)
