"""
Pydantic schemas for analytics endpoints
"""
from pydantic import BaseModel
from typing import List, Dict, Optional
from uuid import UUID
from datetime import datetime


class OverallStats(BaseModel):
    total_quizzes: int
    total_questions: int
    correct_answers: int
    overall_accuracy: float
    current_streak: int
    longest_streak: int


class TrendPoint(BaseModel):
    date: Optional[datetime] = None
    accuracy: float
    score: int
    subject: str


class SubjectPerformance(BaseModel):
    subject_id: UUID
    subject: str
    slug: str
    category: str
    quizzes_completed: int
    average_accuracy: float
    interview_readiness: int
    strength_topics: int
    weak_topics: int
    certificate_earned: bool


class TimeAnalysis(BaseModel):
    total_time_spent: int  # seconds
    avg_time_per_quiz: int


class BucketStats(BaseModel):
    total: int
    correct: int


class DashboardAnalytics(BaseModel):
    """Overall analytics for the caller"""
    overall_stats: OverallStats
    performance_trend: List[TrendPoint]
    subject_performance: List[SubjectPerformance]
    time_analysis: TimeAnalysis
    difficulty_performance: Dict[str, BucketStats]


class SubjectSummary(BaseModel):
    quizzes_completed: int
    average_accuracy: float
    interview_readiness: int
    time_spent: int  # minutes
    certificate_earned: bool


class TopicAnalysis(BaseModel):
    topic_id: str
    topic: str
    accuracy: float
    questions_attempted: int
    status: str  # Strong | Average | Needs Improvement


class TimelinePoint(BaseModel):
    attempt: int
    date: Optional[datetime] = None
    accuracy: float
    score: int
    time_spent: int  # minutes


class SpeedPoint(BaseModel):
    date: Optional[datetime] = None
    avg_time_per_question: int
    accuracy: float


class ReadinessRecommendation(BaseModel):
    level: str
    message: str
    suggestions: List[str]


class ReadinessBreakdown(BaseModel):
    overall: int
    components: Dict[str, float]
    recommendation: ReadinessRecommendation


class SubjectAnalytics(BaseModel):
    """Analytics for one subject of the caller"""
    subject_id: UUID
    subject: str
    summary: SubjectSummary
    topic_analysis: List[TopicAnalysis]
    progress_timeline: List[TimelinePoint]
    speed_data: List[SpeedPoint]
    readiness_breakdown: ReadinessBreakdown


class PlatformOverview(BaseModel):
    total_users: int
    active_users: int  # activity within the last 30 days
    total_quizzes: int
    avg_quizzes_per_user: float
    total_questions: int
    total_subjects: int


class SubjectUsage(BaseModel):
    subject_id: UUID
    subject: str
    total_attempts: int
    average_score: float
    total_questions: int


class TopUser(BaseModel):
    user_id: UUID
    name: str
    quizzes_taken: int
    accuracy: float


class RecentActivity(BaseModel):
    attempt_id: UUID
    user: str
    subject: str
    accuracy: float
    completed_at: Optional[datetime] = None


class PlatformAnalytics(BaseModel):
    """Platform-wide usage for admins"""
    overview: PlatformOverview
    subject_stats: List[SubjectUsage]
    difficulty_stats: Dict[str, int]
    top_users: List[TopUser]
    recent_activity: List[RecentActivity]
