from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from learnhub.core.errors import AlreadyEnrolledError, DuplicateKeyError, NotFoundError
from learnhub.models.course import Course
from learnhub.models.enrollment import CartLine
from learnhub.repos.cart_repo import CartRepo
from learnhub.repos.course_repo import CourseRepo
from learnhub.repos.enrollment_repo import EnrollmentRepo
from learnhub.repos.user_repo import UserRepo

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CartItem:
    course: Course
    instructor_name: str
    added_at: datetime


@dataclass(frozen=True, slots=True)
class CartView:
    items: list[CartItem]

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def total_price(self) -> Decimal:
        # Current catalog prices, not what the course cost when added
        return sum((i.course.price for i in self.items), Decimal("0.00"))


class CartService:
    def __init__(
        self,
        carts: CartRepo,
        courses: CourseRepo,
        enrollments: EnrollmentRepo,
        users: UserRepo,
    ) -> None:
        self._carts = carts
        self._courses = courses
        self._enrollments = enrollments
        self._users = users

    def add(self, student_id: UUID, course_id: UUID) -> bool:
        """Put a course in the cart.  Returns False when it was already there."""
        course = self._courses.get(course_id)
        if course is None or not course.is_active:
            raise NotFoundError("Course not found")
        if self._enrollments.get(student_id, course_id) is not None:
            logger.warning(
                "Cart add rejected: student=%s already enrolled in course=%s",
                student_id,
                course_id,
            )
            raise AlreadyEnrolledError()

        try:
            self._carts.add(CartLine(student_id=student_id, course_id=course_id))
        except DuplicateKeyError:
            return False
        logger.info("Cart add student=%s course=%s", student_id, course_id)
        return True

    def remove(self, student_id: UUID, course_id: UUID) -> None:
        if self._carts.remove(student_id, course_id):
            logger.info("Cart remove student=%s course=%s", student_id, course_id)

    def view(self, student_id: UUID) -> CartView:
        items: list[CartItem] = []
        for line in self._carts.list_by_student(student_id):
            course = self._courses.get(line.course_id)
            if course is None:
                continue
            instructor = self._users.get_by_id(course.instructor_id)
            items.append(
                CartItem(
                    course=course,
                    instructor_name=instructor.name if instructor else "Unknown",
                    added_at=line.added_at,
                )
            )
        return CartView(items=items)

    def clear(self, student_id: UUID) -> int:
        return self._carts.clear(student_id)
