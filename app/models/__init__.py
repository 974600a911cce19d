"""
Database models package
"""
from app.models.subject import Subject
from app.models.topic import Topic
from app.models.question import Question
from app.models.user import User
from app.models.subject_progress import SubjectProgress
from app.models.quiz_attempt import QuizAttempt
from app.models.certificate import Certificate

__all__ = [
    "Subject",
    "Topic",
    "Question",
    "User",
    "SubjectProgress",
    "QuizAttempt",
    "Certificate",
]
