"""
Pydantic schemas for user profile and progress endpoints
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from uuid import UUID
from datetime import datetime


class UserCreate(BaseModel):
    """Schema for creating a user profile"""
    name: str = Field(..., min_length=1, max_length=120)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    role: str = Field("user", pattern="^(user|admin)$")


class SubjectProgressResponse(BaseModel):
    subject_id: UUID
    quizzes_completed: int
    total_score: int
    average_accuracy: float
    time_spent: int
    last_attempt_date: Optional[datetime] = None
    interview_readiness_score: int
    strength_topics: List[str]
    weak_topics: List[str]
    certificate_earned: bool
    certificate_date: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserResponse(BaseModel):
    """User profile with streak, lifetime counters and subject progress"""
    id: UUID
    name: str
    email: str
    role: str
    current_streak: int
    longest_streak: int
    last_activity_date: Optional[datetime] = None
    total_quizzes_taken: int
    total_questions_attempted: int
    total_correct_answers: int
    subject_progress: List[SubjectProgressResponse] = []

    class Config:
        from_attributes = True


class UserStats(BaseModel):
    """Stats summary for the caller"""
    total_quizzes: int
    current_streak: int
    longest_streak: int
    average_accuracy: float  # last 10 completed quizzes
    total_time_spent: int  # minutes, last 10 completed quizzes
    total_questions_attempted: int
    total_correct_answers: int
    subjects_started: int
    certificates_earned: int


class QuizHistoryItem(BaseModel):
    attempt_id: UUID
    subject_id: UUID
    subject_name: str
    completed_at: Optional[datetime] = None
    accuracy: float
    marks_obtained: int
    total_marks: int
