"""
Topic model - grouping key inside a subject
"""
from sqlalchemy import Column, String, Integer, Boolean, Text, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.clock import utcnow
import uuid


class Topic(Base):
    """
    Topics table - name is unique within its subject
    """
    __tablename__ = "topics"
    __table_args__ = (UniqueConstraint("subject_id", "name", name="uq_topic_subject_name"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    subject_id = Column(Uuid, ForeignKey("subjects.id"), nullable=False, index=True)
    name = Column(String(120), nullable=False)
    description = Column(Text)
    difficulty = Column(String(10))
    is_active = Column(Boolean, default=True, nullable=False)
    question_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    subject = relationship("Subject", back_populates="topics")

    def __repr__(self):
        return f"<Topic(id={self.id}, name={self.name})>"
