"""
Pydantic schemas for leaderboard endpoints
"""
from pydantic import BaseModel
from typing import List
from uuid import UUID


class GlobalLeaderboardEntry(BaseModel):
    rank: int
    user_id: UUID
    name: str
    quizzes_taken: int
    accuracy: float
    current_streak: int


class SubjectLeaderboardEntry(BaseModel):
    rank: int
    user_id: UUID
    name: str
    quizzes_completed: int
    accuracy: float
    interview_readiness: int
    total_score: int


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class GlobalLeaderboard(BaseModel):
    entries: List[GlobalLeaderboardEntry]
    pagination: Pagination


class SubjectLeaderboard(BaseModel):
    subject_id: UUID
    entries: List[SubjectLeaderboardEntry]
    pagination: Pagination


class MyRank(BaseModel):
    global_rank: int
    total_users: int
    percentile: float
