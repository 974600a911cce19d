"""
Subject model - catalog entry with certificate criteria and running stats
"""
from sqlalchemy import Column, String, Integer, Float, Boolean, Text, DateTime, Uuid
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.clock import utcnow
import uuid


class Subject(Base):
    """
    Subjects table - quiz scope, certificate thresholds and aggregate counters
    """
    __tablename__ = "subjects"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(120), unique=True, nullable=False)
    slug = Column(String(120), unique=True, nullable=False, index=True)
    description = Column(Text)
    category = Column(String(80), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    total_questions = Column(Integer, default=0, nullable=False)

    # Certificate criteria
    minimum_quizzes = Column(Integer, default=5, nullable=False)
    minimum_accuracy = Column(Float, default=70.0, nullable=False)  # percentage

    # Stats (atomic increments only)
    total_attempts = Column(Integer, default=0, nullable=False)
    average_score = Column(Float, default=0.0, nullable=False)

    created_at = Column(DateTime, default=utcnow)

    topics = relationship("Topic", back_populates="subject", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Subject(id={self.id}, slug={self.slug})>"
