"""
Certificate issuance and verification
"""
import logging
import secrets
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import InvalidStateError, NotFoundError
from app.models import Certificate, Subject, SubjectProgress, User

logger = logging.getLogger(__name__)


class CertificateService:
    """Issues one certificate per (user, subject) once progress earns it"""

    def generate_certificate_id(self, subject: Subject) -> str:
        return f"PREP-{subject.slug.upper()}-{secrets.token_hex(4).upper()}"

    def issue_certificate(self, db: Session, user: User, subject_id) -> Certificate:
        """
        Issue a certificate for a subject

        Raises:
            NotFoundError: subject does not exist
            InvalidStateError: already issued, or not yet earned
        """
        subject = db.get(Subject, subject_id)
        if not subject:
            raise NotFoundError("Subject not found")

        existing = (
            db.query(Certificate)
            .filter(Certificate.user_id == user.id, Certificate.subject_id == subject.id)
            .first()
        )
        if existing:
            raise InvalidStateError("Certificate already generated for this subject")

        progress = (
            db.query(SubjectProgress)
            .filter(SubjectProgress.user_id == user.id, SubjectProgress.subject_id == subject.id)
            .first()
        )
        if not progress or not progress.certificate_earned:
            raise InvalidStateError("You have not met the criteria for this certificate")

        certificate_id = self.generate_certificate_id(subject)
        certificate = Certificate(
            certificate_id=certificate_id,
            user_id=user.id,
            subject_id=subject.id,
            performance_data={
                "total_quizzes": progress.quizzes_completed,
                "average_accuracy": progress.average_accuracy,
                "total_questions_attempted": user.total_questions_attempted,
                "overall_score": progress.total_score,
                "topics_covered": len(progress.strength_topics or []),
            },
            is_verified=True,
            verification_url=f"{settings.CLIENT_URL.rstrip('/')}/verify/{certificate_id}",
        )

        db.add(certificate)
        try:
            db.commit()
        except IntegrityError as e:
            # concurrent issuance for the same pair
            db.rollback()
            logger.warning(f"Duplicate certificate issuance rejected: {str(e.orig)}")
            raise InvalidStateError("Certificate already generated for this subject") from e
        db.refresh(certificate)

        logger.info(f"Certificate issued: {certificate_id} for user {user.id}")
        return certificate

    def list_certificates(self, db: Session, user: User) -> List[Certificate]:
        return (
            db.query(Certificate)
            .filter(Certificate.user_id == user.id)
            .order_by(Certificate.issued_date.desc())
            .all()
        )

    def verify_certificate(self, db: Session, certificate_id: str) -> Certificate:
        certificate = (
            db.query(Certificate)
            .filter(Certificate.certificate_id == certificate_id)
            .first()
        )
        if not certificate:
            raise NotFoundError("Certificate not found")
        return certificate


# Global instance
certificate_service = CertificateService()
