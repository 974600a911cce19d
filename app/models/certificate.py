"""
Certificate model - issued once per user and subject
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from app.database import Base, JSONType
from app.utils.clock import utcnow
import uuid


class Certificate(Base):
    """
    Certificates table - (user_id, subject_id) is unique
    """
    __tablename__ = "certificates"
    __table_args__ = (UniqueConstraint("user_id", "subject_id", name="uq_certificate_user_subject"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    certificate_id = Column(String(64), unique=True, nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    subject_id = Column(Uuid, ForeignKey("subjects.id"), nullable=False)

    performance_data = Column(JSONType)  # snapshot at issue time
    issued_date = Column(DateTime, default=utcnow)
    is_verified = Column(Boolean, default=True, nullable=False)
    verification_url = Column(String(512))

    user = relationship("User")
    subject = relationship("Subject")

    def __repr__(self):
        return f"<Certificate(certificate_id={self.certificate_id}, user_id={self.user_id})>"
