"""
User model - identity, streak and lifetime counters
"""
from sqlalchemy import Column, String, Integer, DateTime, Uuid
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.clock import utcnow
import uuid


class User(Base):
    """
    Users table - credentials live with the auth collaborator, not here
    """
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(120), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    role = Column(String(10), default="user", nullable=False)  # user | admin

    # Streak
    current_streak = Column(Integer, default=0, nullable=False)
    longest_streak = Column(Integer, default=0, nullable=False)
    last_activity_date = Column(DateTime)

    # Lifetime counters
    total_quizzes_taken = Column(Integer, default=0, nullable=False)
    total_questions_attempted = Column(Integer, default=0, nullable=False)
    total_correct_answers = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=utcnow)

    subject_progress = relationship(
        "SubjectProgress", back_populates="user", cascade="all, delete-orphan"
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"
