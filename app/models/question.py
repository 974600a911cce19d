"""
Question model - question bank entry with running attempt counters
"""
from sqlalchemy import Column, String, Integer, Boolean, Text, DateTime, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship
from app.database import Base, JSONType
from app.utils.clock import utcnow
import uuid


class Question(Base):
    """
    Questions table - correct_answer is compared verbatim at grading time
    """
    __tablename__ = "questions"
    __table_args__ = (Index("ix_questions_subject_difficulty", "subject_id", "difficulty"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    subject_id = Column(Uuid, ForeignKey("subjects.id"), nullable=False)
    topic_id = Column(Uuid, ForeignKey("topics.id"), nullable=False, index=True)

    question_text = Column(Text, nullable=False)
    question_type = Column(String(20), default="mcq", nullable=False)
    options = Column(JSONType)  # [{"text": "...", "is_correct": false}]
    correct_answer = Column(Text, nullable=False)
    explanation = Column(Text)

    difficulty = Column(String(10), nullable=False)  # easy | medium | hard
    marks = Column(Integer, default=1, nullable=False)
    time_limit = Column(Integer, default=60, nullable=False)  # seconds
    tags = Column(JSONType)

    # Stats (atomic increments only)
    total_attempts = Column(Integer, default=0, nullable=False)
    correct_attempts = Column(Integer, default=0, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    created_by = Column(Uuid, ForeignKey("users.id"))
    created_at = Column(DateTime, default=utcnow)

    topic = relationship("Topic")

    def __repr__(self):
        return f"<Question(id={self.id}, difficulty={self.difficulty})>"
