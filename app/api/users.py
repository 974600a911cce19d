"""
User profile, stats and history endpoints
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List
import logging

from app.database import get_db
from app.dependencies import get_current_user
from app.exceptions import InvalidInputError
from app.models import User
from app.schemas.user import UserCreate, UserResponse, UserStats, QuizHistoryItem
from app.services.analytics_service import analytics_service

router = APIRouter(prefix="/api/users", tags=["users"])
logger = logging.getLogger(__name__)


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    """
    Register a user profile

    Credentials are handled by the auth provider; this only stores the
    profile the progress engine writes to.
    """
    email = payload.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise InvalidInputError("A user with this email already exists")

    user = User(name=payload.name.strip(), email=email, role=payload.role)
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"User created: {user.id}")
    return user


@router.get("/me", response_model=UserResponse)
async def get_profile(current_user: User = Depends(get_current_user)):
    """Caller profile with streak, lifetime counters and subject progress"""
    return current_user


@router.get("/me/stats", response_model=UserStats)
async def get_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return UserStats(**analytics_service.get_user_stats(db, current_user))


@router.get("/me/history", response_model=List[QuizHistoryItem])
async def get_history(
    limit: int = Query(5, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Most recent completed quizzes, newest first"""
    return [QuizHistoryItem(**item) for item in analytics_service.get_history(db, current_user, limit)]
