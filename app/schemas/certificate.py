"""
Pydantic schemas for certificate endpoints
"""
from pydantic import BaseModel
from typing import Optional
from uuid import UUID
from datetime import datetime


class CertificatePerformance(BaseModel):
    total_quizzes: int
    average_accuracy: float
    total_questions_attempted: int
    overall_score: int
    topics_covered: int


class CertificateResponse(BaseModel):
    certificate_id: str
    user_id: UUID
    subject_id: UUID
    performance_data: CertificatePerformance
    issued_date: datetime
    is_verified: bool
    verification_url: Optional[str] = None

    class Config:
        from_attributes = True


class CertificateVerification(BaseModel):
    """Public verification view"""
    is_valid: bool
    holder_name: str
    subject: str
    category: str
    issued_date: datetime
    performance_data: CertificatePerformance
