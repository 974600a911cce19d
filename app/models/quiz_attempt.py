"""
QuizAttempt model - one user taking one generated quiz
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship
from app.database import Base, JSONType
from app.utils.clock import utcnow
import uuid


class QuizAttempt(Base):
    """
    Quiz attempts table - outcomes, results and performance are stored as
    JSON documents on the row
    """
    __tablename__ = "quiz_attempts"
    __table_args__ = (
        Index("ix_attempts_user_subject_status", "user_id", "subject_id", "status"),
    )

    STATUS_IN_PROGRESS = "in-progress"
    STATUS_COMPLETED = "completed"
    STATUS_ABANDONED = "abandoned"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    subject_id = Column(Uuid, ForeignKey("subjects.id"), nullable=False)

    config = Column(JSONType, nullable=False)  # mode, difficulty, question_count, ...
    questions = Column(JSONType, nullable=False)  # ordered question outcomes
    results = Column(JSONType)
    performance = Column(JSONType)

    status = Column(String(20), default=STATUS_IN_PROGRESS, nullable=False, index=True)
    progress_pending = Column(Boolean, default=False, nullable=False)

    started_at = Column(DateTime, default=utcnow)
    completed_at = Column(DateTime)

    subject = relationship("Subject")
    user = relationship("User")

    @property
    def accuracy(self) -> float:
        return float((self.results or {}).get("accuracy", 0) or 0)

    def __repr__(self):
        return f"<QuizAttempt(id={self.id}, user_id={self.user_id}, status={self.status})>"
