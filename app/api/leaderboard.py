"""
Leaderboard endpoints
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from uuid import UUID

from app.database import get_db
from app.dependencies import get_current_user
from app.models import User
from app.schemas.leaderboard import GlobalLeaderboard, SubjectLeaderboard, MyRank
from app.services.leaderboard_service import leaderboard_service

router = APIRouter(prefix="/api/leaderboard", tags=["leaderboard"])


@router.get("/global", response_model=GlobalLeaderboard)
async def global_leaderboard(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """Users ranked by lifetime accuracy, then quizzes taken"""
    return leaderboard_service.global_leaderboard(db, page, limit)


@router.get("/subject/{subject_id}", response_model=SubjectLeaderboard)
async def subject_leaderboard(
    subject_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """Users ranked by total subject score, then average accuracy"""
    return leaderboard_service.subject_leaderboard(db, subject_id, page, limit)


@router.get("/me", response_model=MyRank)
async def my_rank(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return leaderboard_service.my_rank(db, current_user)
