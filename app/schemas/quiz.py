"""
Pydantic schemas for quiz-related requests and responses
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Dict, Any, Optional
from uuid import UUID
from datetime import datetime


class QuizGenerateRequest(BaseModel):
    """Request schema for quiz generation"""
    subject_id: UUID
    difficulty: str = Field("mixed", pattern="^(easy|medium|hard|mixed)$", description="Difficulty filter")
    mode: str = Field("non-timed", pattern="^(timed|non-timed)$", description="Quiz mode")
    question_count: int = Field(10, ge=1, le=50, description="Number of questions requested")
    topics: Optional[List[UUID]] = Field(None, description="Restrict the pool to these topics")


class AnswerSubmission(BaseModel):
    """A single answer; time_spent below zero is clamped rather than rejected"""
    question_id: str
    user_answer: Optional[str] = None
    time_spent: int = 0

    @field_validator("time_spent", mode="before")
    @classmethod
    def clamp_time_spent(cls, value):
        if value is None:
            return 0
        try:
            return max(int(value), 0)
        except (TypeError, ValueError):
            return 0


class QuizSubmission(BaseModel):
    """Schema for quiz submission"""
    answers: List[AnswerSubmission]


class QuizQuestionView(BaseModel):
    """Question as shown to the quiz taker"""
    question_id: str
    question_text: str
    question_type: str
    options: List[str]
    topic_id: str
    difficulty: str
    marks: int
    time_limit: int


class QuestionOutcome(BaseModel):
    """Grading details for a single question"""
    question_id: str
    user_answer: Optional[str] = None
    is_correct: Optional[bool] = None
    time_spent: int = 0
    marks_awarded: int = 0
    skipped: bool = False
    correct_answer: Optional[str] = None
    explanation: Optional[str] = None


class QuizResults(BaseModel):
    total_questions: int
    attempted_questions: int
    correct_answers: int
    incorrect_answers: int
    skipped_questions: int
    total_marks: int
    marks_obtained: int
    accuracy: float
    total_time_spent: int
    average_time_per_question: int


class TopicScore(BaseModel):
    topic: str
    total: int
    correct: int
    accuracy: float


class DifficultyScore(BaseModel):
    total: int
    correct: int
    accuracy: float


class QuizPerformance(BaseModel):
    topic_wise_score: List[TopicScore]
    difficulty_wise_score: Dict[str, DifficultyScore]


class QuizAttemptResponse(BaseModel):
    """Attempt with its questions, and results once completed"""
    id: UUID
    user_id: UUID
    subject_id: UUID
    config: Dict[str, Any]
    status: str
    questions: List[QuizQuestionView]
    outcomes: List[QuestionOutcome]
    results: Optional[QuizResults] = None
    performance: Optional[QuizPerformance] = None
    progress_pending: bool = False
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
