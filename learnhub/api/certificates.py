"""Certificate issuance (student) and public verification (no auth)."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from learnhub.api.dependencies import Learner
from learnhub.api.stores import certificate_service

router = APIRouter(tags=["certificates"])


class CertificateIssuedOut(BaseModel):
    certificate_id: str
    course_id: str
    issued_at: datetime
    validation_url: str
    newly_issued: bool


class CertificateOut(BaseModel):
    certificate_id: str
    student_name: str
    course_title: str
    instructor_name: str
    issued_at: datetime
    workload_hours: int
    is_valid: bool


@router.post(
    "/student/courses/{course_id}/certificate",
    response_model=CertificateIssuedOut,
    status_code=status.HTTP_201_CREATED,
)
def generate_certificate(
    course_id: UUID, principal: Learner, response: Response
) -> CertificateIssuedOut:
    enrollment, newly_issued = certificate_service.issue_for(
        UUID(principal.user_id), course_id
    )
    if not newly_issued:
        response.status_code = status.HTTP_200_OK
    return CertificateIssuedOut(
        certificate_id=enrollment.certificate_id,
        course_id=str(course_id),
        issued_at=enrollment.certificate_issued_at,
        validation_url=certificate_service.validation_url(enrollment.certificate_id),
        newly_issued=newly_issued,
    )


@router.get("/certificates/{certificate_id}", response_model=CertificateOut)
def verify_certificate(certificate_id: str) -> CertificateOut:
    view = certificate_service.lookup(certificate_id)
    return CertificateOut(
        certificate_id=view.certificate_id,
        student_name=view.student_name,
        course_title=view.course_title,
        instructor_name=view.instructor_name,
        issued_at=view.issued_at,
        workload_hours=view.workload_hours,
        is_valid=view.is_valid,
    )
