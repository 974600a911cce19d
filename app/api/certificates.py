"""
Certificate endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
import logging

from app.database import get_db
from app.dependencies import get_current_user
from app.models import User
from app.schemas.certificate import CertificateResponse, CertificateVerification
from app.services.certificate_service import certificate_service

router = APIRouter(prefix="/api/certificates", tags=["certificates"])
logger = logging.getLogger(__name__)


@router.post("/generate/{subject_id}", response_model=CertificateResponse, status_code=201)
async def generate_certificate(
    subject_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Issue the caller's certificate for a subject

    Requires certificate_earned on the subject progress; a second request
    for the same subject is rejected with 409.
    """
    return certificate_service.issue_certificate(db, current_user, subject_id)


@router.get("/mine", response_model=List[CertificateResponse])
async def my_certificates(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return certificate_service.list_certificates(db, current_user)


@router.get("/verify/{certificate_id}", response_model=CertificateVerification)
async def verify_certificate(certificate_id: str, db: Session = Depends(get_db)):
    """Public certificate authenticity check"""
    certificate = certificate_service.verify_certificate(db, certificate_id)

    return CertificateVerification(
        is_valid=certificate.is_verified,
        holder_name=certificate.user.name,
        subject=certificate.subject.name,
        category=certificate.subject.category,
        issued_date=certificate.issued_date,
        performance_data=certificate.performance_data,
    )
