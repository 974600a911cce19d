"""
Pydantic schemas for the subject catalog and question bank
"""
from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional
from uuid import UUID

from app.schemas.leaderboard import Pagination


class SubjectCreate(BaseModel):
    name: str = Field(..., max_length=120)
    slug: str = Field(..., pattern="^[a-z0-9-]+$", max_length=120)
    description: Optional[str] = None
    category: str = Field(..., max_length=80)
    minimum_quizzes: int = Field(5, ge=1)
    minimum_accuracy: float = Field(70.0, ge=0.0, le=100.0)


class SubjectUpdate(BaseModel):
    """Partial subject update; only fields present are changed"""
    name: Optional[str] = Field(None, max_length=120)
    slug: Optional[str] = Field(None, pattern="^[a-z0-9-]+$", max_length=120)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=80)
    is_active: Optional[bool] = None
    minimum_quizzes: Optional[int] = Field(None, ge=1)
    minimum_accuracy: Optional[float] = Field(None, ge=0.0, le=100.0)


class SubjectResponse(BaseModel):
    id: UUID
    name: str
    slug: str
    description: Optional[str] = None
    category: str
    is_active: bool
    total_questions: int
    minimum_quizzes: int
    minimum_accuracy: float
    total_attempts: int

    class Config:
        from_attributes = True


class TopicCreate(BaseModel):
    name: str = Field(..., max_length=120)
    description: Optional[str] = None
    difficulty: Optional[str] = Field(None, pattern="^(easy|medium|hard)$")


class TopicUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=120)
    description: Optional[str] = None
    difficulty: Optional[str] = Field(None, pattern="^(easy|medium|hard)$")


class TopicResponse(BaseModel):
    id: UUID
    subject_id: UUID
    name: str
    description: Optional[str] = None
    difficulty: Optional[str] = None
    question_count: int

    class Config:
        from_attributes = True


class QuestionOption(BaseModel):
    text: str
    is_correct: bool = False


class QuestionCreate(BaseModel):
    """Schema for adding a question to the bank"""
    topic_id: UUID
    question_text: str = Field(..., min_length=1)
    question_type: str = Field("mcq", pattern="^(mcq|aptitude|conceptual)$")
    options: List[QuestionOption] = []
    correct_answer: str = Field(..., min_length=1)
    explanation: Optional[str] = None
    difficulty: str = Field(..., pattern="^(easy|medium|hard)$")
    marks: int = Field(1, ge=1)
    time_limit: int = Field(60, ge=1)
    tags: List[str] = []


class QuestionBulkCreate(BaseModel):
    questions: List[QuestionCreate] = Field(..., min_length=1, max_length=200)


class QuestionUpdate(BaseModel):
    """Partial question update; only fields present are changed"""
    topic_id: Optional[UUID] = None
    question_text: Optional[str] = Field(None, min_length=1)
    question_type: Optional[str] = Field(None, pattern="^(mcq|aptitude|conceptual)$")
    options: Optional[List[QuestionOption]] = None
    correct_answer: Optional[str] = Field(None, min_length=1)
    explanation: Optional[str] = None
    difficulty: Optional[str] = Field(None, pattern="^(easy|medium|hard)$")
    marks: Optional[int] = Field(None, ge=1)
    time_limit: Optional[int] = Field(None, ge=1)
    tags: Optional[List[str]] = None


class QuestionResponse(BaseModel):
    """Question bank row as seen by admins"""
    id: UUID
    subject_id: UUID
    topic_id: UUID
    question_text: str
    question_type: str
    options: List[QuestionOption] = []
    correct_answer: str
    explanation: Optional[str] = None
    difficulty: str
    marks: int
    time_limit: int
    tags: List[str] = []
    is_active: bool
    total_attempts: int
    correct_attempts: int

    class Config:
        from_attributes = True

    @field_validator("options", "tags", mode="before")
    @classmethod
    def empty_when_null(cls, value):
        return value or []


class QuestionPage(BaseModel):
    items: List[QuestionResponse]
    pagination: Pagination


class TopicQuestionCount(BaseModel):
    topic_id: UUID
    topic: str
    count: int


class QuestionStats(BaseModel):
    """Active question counts and how the bank has been answered"""
    total: int
    by_difficulty: Dict[str, int]
    avg_attempts: float
    avg_correct_rate: float  # percent; unattempted questions count as 0
    by_topic: List[TopicQuestionCount]
