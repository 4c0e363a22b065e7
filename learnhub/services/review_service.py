from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from learnhub.core.errors import (
    DuplicateKeyError,
    InvalidRatingError,
    NotEnrolledError,
    NotFoundError,
)
from learnhub.models.page import Page, paginate
from learnhub.models.principal import Principal
from learnhub.models.review import Review
from learnhub.repos.course_repo import CourseRepo
from learnhub.repos.enrollment_repo import EnrollmentRepo
from learnhub.repos.review_repo import ReviewRepo
from learnhub.repos.user_repo import UserRepo
from learnhub.services.access import check_owner_or_admin

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CourseReviews:
    page: Page[tuple[Review, str]]  # (review, reviewer name)
    average_rating: float
    total: int


def _validate_rating(rating: object) -> int:
    # bool is an int subclass; True must not count as a 1-star rating
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidRatingError()
    if not 1 <= rating <= 5:
        raise InvalidRatingError()
    return rating


class ReviewService:
    def __init__(
        self,
        reviews: ReviewRepo,
        courses: CourseRepo,
        enrollments: EnrollmentRepo,
        users: UserRepo,
    ) -> None:
        self._reviews = reviews
        self._courses = courses
        self._enrollments = enrollments
        self._users = users

    def upsert(
        self,
        student_id: UUID,
        course_id: UUID,
        rating: object,
        comment: str | None = None,
    ) -> tuple[Review, bool]:
        """Create or replace the student's review.  Returns (review, created)."""
        rating = _validate_rating(rating)
        if self._courses.get(course_id) is None:
            raise NotFoundError("Course not found")
        if self._enrollments.get(student_id, course_id) is None:
            raise NotEnrolledError()

        comment = (comment or "").strip() or None
        existing = self._reviews.get_by_student_and_course(student_id, course_id)
        if existing is None:
            review = Review.new(
                student_id=student_id,
                course_id=course_id,
                rating=rating,
                comment=comment,
            )
            try:
                self._reviews.add(review)
            except DuplicateKeyError:
                existing = self._reviews.get_by_student_and_course(
                    student_id, course_id
                )
                if existing is None:
                    raise
            else:
                logger.info(
                    "Review created course=%s student=%s", course_id, student_id
                )
                return review, True

        review = replace(
            existing, rating=rating, comment=comment, updated_at=datetime.now(UTC)
        )
        self._reviews.update(review)
        logger.info("Review updated course=%s student=%s", course_id, student_id)
        return review, False

    def delete(self, principal: Principal, review_id: UUID) -> None:
        review = self._reviews.get_by_id(review_id)
        if review is None:
            raise NotFoundError("Review not found")
        check_owner_or_admin(principal, review.student_id)
        self._reviews.delete(review_id)
        logger.info("Review deleted id=%s by user=%s", review_id, principal.user_id)

    def list_for_course(self, course_id: UUID, page: int, limit: int) -> CourseReviews:
        if self._courses.get(course_id) is None:
            raise NotFoundError("Course not found")

        reviews = self._reviews.list_by_course(course_id)
        if reviews:
            mean = Decimal(sum(r.rating for r in reviews)) / len(reviews)
            average = float(mean.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
        else:
            average = 0.0

        rows = [(r, self._reviewer_name(r.student_id)) for r in reviews]
        return CourseReviews(
            page=paginate(rows, page, limit), average_rating=average, total=len(reviews)
        )

    def _reviewer_name(self, user_id: UUID) -> str:
        user = self._users.get_by_id(user_id)
        return user.name if user else "Anonymous"
