"""Turning purchase intent into enrollments.

Checkout policy:
  * Lines for courses the student is already enrolled in, or that have
    since been deactivated or deleted, are skipped but still cleared.
  * The remaining enrollments are inserted as one all-or-nothing batch.
    A uniqueness conflict at insert time (a concurrent enrollment)
    rejects the whole checkout; cart and ledger stay as they were.
  * Only the lines read at the start are removed, so a course added to
    the cart while checkout runs stays there.
  * If clearing the cart fails after the insert, the new enrollments are
    removed again before the error propagates.

No payment is taken.
"""

from __future__ import annotations

import logging
from uuid import UUID

from learnhub.core.errors import (
    AlreadyEnrolledError,
    DuplicateKeyError,
    EmptyCartError,
    NotFoundError,
)
from learnhub.core.metrics import CHECKOUTS, ENROLLMENTS_CREATED
from learnhub.models.enrollment import Enrollment
from learnhub.repos.cart_repo import CartRepo
from learnhub.repos.course_repo import CourseRepo
from learnhub.repos.enrollment_repo import EnrollmentRepo

logger = logging.getLogger(__name__)


class CheckoutService:
    def __init__(
        self, carts: CartRepo, courses: CourseRepo, enrollments: EnrollmentRepo
    ) -> None:
        self._carts = carts
        self._courses = courses
        self._enrollments = enrollments

    def checkout(self, student_id: UUID) -> list[Enrollment]:
        lines = self._carts.list_by_student(student_id)
        if not lines:
            CHECKOUTS.labels(result="empty").inc()
            raise EmptyCartError()

        new: list[Enrollment] = []
        for line in lines:
            course = self._courses.get(line.course_id)
            if course is None or not course.is_active:
                logger.info("Checkout skipping unavailable course=%s", line.course_id)
                continue
            if self._enrollments.get(student_id, line.course_id) is not None:
                continue
            new.append(Enrollment.new(student_id=student_id, course_id=line.course_id))

        try:
            self._enrollments.add_many(new)
        except DuplicateKeyError:
            CHECKOUTS.labels(result="conflict").inc()
            logger.warning("Checkout conflict student=%s, nothing enrolled", student_id)
            raise AlreadyEnrolledError() from None

        try:
            self._carts.remove_many(student_id, [line.course_id for line in lines])
        except Exception:
            self._enrollments.remove_many(e.id for e in new)
            CHECKOUTS.labels(result="error").inc()
            logger.exception("Cart clear failed, rolled back %d enrollments", len(new))
            raise

        CHECKOUTS.labels(result="success").inc()
        if new:
            ENROLLMENTS_CREATED.labels(source="checkout").inc(len(new))
        logger.info(
            "Checkout student=%s lines=%d enrolled=%d",
            student_id,
            len(lines),
            len(new),
        )
        return new

    def enroll(self, student_id: UUID, course_id: UUID) -> Enrollment:
        """Enroll directly, bypassing the cart."""
        course = self._courses.get(course_id)
        if course is None or not course.is_active:
            raise NotFoundError("Course not found")
        if self._enrollments.get(student_id, course_id) is not None:
            raise AlreadyEnrolledError()

        enrollment = Enrollment.new(student_id=student_id, course_id=course_id)
        try:
            self._enrollments.add(enrollment)
        except DuplicateKeyError:
            raise AlreadyEnrolledError() from None

        self._carts.remove(student_id, course_id)
        ENROLLMENTS_CREATED.labels(source="direct").inc()
        logger.info("Enrolled student=%s course=%s", student_id, course_id)
        return enrollment
