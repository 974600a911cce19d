"""
SubjectProgress model - per user, per subject scoring state
"""
from sqlalchemy import Column, Integer, Float, Boolean, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from app.database import Base, JSONType
import uuid


class SubjectProgress(Base):
    """
    Subject progress table - created on the first completed quiz of a subject.

    certificate_earned only ever moves from False to True.
    """
    __tablename__ = "subject_progress"
    __table_args__ = (UniqueConstraint("user_id", "subject_id", name="uq_progress_user_subject"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    subject_id = Column(Uuid, ForeignKey("subjects.id"), nullable=False, index=True)

    quizzes_completed = Column(Integer, default=0, nullable=False)
    total_score = Column(Integer, default=0, nullable=False)
    average_accuracy = Column(Float, default=0.0, nullable=False)
    time_spent = Column(Integer, default=0, nullable=False)  # seconds
    last_attempt_date = Column(DateTime)
    interview_readiness_score = Column(Integer, default=0, nullable=False)  # 0-100
    strength_topics = Column(JSONType, default=list)  # topic ids as strings
    weak_topics = Column(JSONType, default=list)
    certificate_earned = Column(Boolean, default=False, nullable=False)
    certificate_date = Column(DateTime)

    user = relationship("User", back_populates="subject_progress")
    subject = relationship("Subject")

    def __repr__(self):
        return (
            f"<SubjectProgress(user_id={self.user_id}, subject_id={self.subject_id}, "
            f"quizzes={self.quizzes_completed}, certified={self.certificate_earned})>"
        )
