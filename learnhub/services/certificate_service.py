"""Certificate issuance and public verification.

A certificate is an opaque identifier stored on the enrollment the first
time the student reaches 100% progress.  The identifier is 128 random
bits, base32-encoded (lower case, no padding), so it cannot be guessed or
derived from the enrollment.  Once issued it is never changed or revoked.
"""

from __future__ import annotations

import base64
import logging
import secrets
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from uuid import UUID

from learnhub.core.errors import (
    CourseNotCompleteError,
    DuplicateKeyError,
    NotEnrolledError,
    NotFoundError,
)
from learnhub.core.metrics import CERTIFICATES_ISSUED
from learnhub.models.enrollment import Enrollment
from learnhub.repos.course_repo import CourseRepo
from learnhub.repos.enrollment_repo import EnrollmentRepo
from learnhub.repos.user_repo import UserRepo
from learnhub.services.progress_math import course_progress

logger = logging.getLogger(__name__)

_MAX_ID_ATTEMPTS = 5
HOURS_PER_LESSON = 1


def new_certificate_id() -> str:
    raw = base64.b32encode(secrets.token_bytes(16)).decode("ascii")
    return raw.rstrip("=").lower()


@dataclass(frozen=True, slots=True)
class CertificateView:
    """What the public verification page shows."""

    certificate_id: str
    student_name: str
    course_title: str
    instructor_name: str
    issued_at: datetime
    workload_hours: int
    is_valid: bool = True


class CertificateService:
    def __init__(
        self,
        courses: CourseRepo,
        enrollments: EnrollmentRepo,
        users: UserRepo,
        *,
        public_base_url: str,
    ) -> None:
        self._courses = courses
        self._enrollments = enrollments
        self._users = users
        self._public_base_url = public_base_url.rstrip("/")

    def validation_url(self, certificate_id: str) -> str:
        return f"{self._public_base_url}/certificates/{certificate_id}"

    def issue(self, enrollment: Enrollment) -> tuple[Enrollment, bool]:
        """Issue a certificate for a completed enrollment.

        Returns the (possibly updated) enrollment and whether a new
        identifier was minted.  Progress is recomputed from completion
        markers first, so a stale stored value never decides eligibility.
        """
        if enrollment.has_certificate:
            return enrollment, False

        progress = course_progress(
            self._courses,
            self._enrollments,
            enrollment.student_id,
            enrollment.course_id,
        )
        if not progress.is_complete:
            raise CourseNotCompleteError()

        issued_at = datetime.now(UTC)
        for _ in range(_MAX_ID_ATTEMPTS):
            updated = replace(
                enrollment,
                progress=100,
                certificate_id=new_certificate_id(),
                certificate_issued_at=issued_at,
            )
            try:
                self._enrollments.update(updated)
            except DuplicateKeyError:
                logger.warning("Certificate id collision, regenerating")
                continue
            break
        else:
            raise RuntimeError("could not allocate a unique certificate id")

        stored = self._enrollments.get(updated.student_id, updated.course_id)
        if stored is not None and stored.certificate_id != updated.certificate_id:
            # A concurrent request issued first; its id stands
            return stored, False

        CERTIFICATES_ISSUED.inc()
        logger.info(
            "Certificate issued enrollment=%s student=%s course=%s",
            updated.id,
            updated.student_id,
            updated.course_id,
        )
        return updated, True

    def issue_for(self, student_id: UUID, course_id: UUID) -> tuple[Enrollment, bool]:
        if self._courses.get(course_id) is None:
            raise NotFoundError("Course not found")
        enrollment = self._enrollments.get(student_id, course_id)
        if enrollment is None:
            raise NotEnrolledError()
        return self.issue(enrollment)

    def lookup(self, certificate_id: str) -> CertificateView:
        certificate_id = certificate_id.strip().lower()
        enrollment = self._enrollments.get_by_certificate(certificate_id)
        if enrollment is None or enrollment.certificate_issued_at is None:
            raise NotFoundError("Certificate not found")

        course = self._courses.get(enrollment.course_id)
        if course is None:
            raise NotFoundError("Certificate not found")
        student = self._users.get_by_id(enrollment.student_id)
        instructor = self._users.get_by_id(course.instructor_id)

        lessons = len(self._courses.list_course_classes(course.id))
        return CertificateView(
            certificate_id=certificate_id,
            student_name=student.name if student else "Unknown student",
            course_title=course.title,
            instructor_name=instructor.name if instructor else "Unknown instructor",
            issued_at=enrollment.certificate_issued_at,
            workload_hours=lessons * HOURS_PER_LESSON,
        )
