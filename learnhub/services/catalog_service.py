"""Catalog browsing and authoring: categories, courses, modules, classes.

Authoring rules:
  * Only the course's instructor or an admin may change a course or
    anything nested under it.
  * ``order_index`` is unique within its parent; when omitted it is
    assigned after the current last sibling.
  * A course with enrollments cannot be deleted, only deactivated.
    Deleting a course without enrollments also drops its cart lines.
  * A category can be deleted only once no course, active or not, uses it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import UUID

from learnhub.core.errors import (
    CategoryInUseError,
    ConflictError,
    CourseHasEnrollmentsError,
    DuplicateKeyError,
    InvalidInputError,
    NotFoundError,
)
from learnhub.models.course import Category, Course, CourseClass, CourseModule
from learnhub.models.enrollment import Enrollment
from learnhub.models.page import Page, paginate
from learnhub.models.principal import Principal
from learnhub.models.user import User
from learnhub.repos.cart_repo import CartRepo
from learnhub.repos.category_repo import CategoryRepo
from learnhub.repos.course_repo import CourseRepo
from learnhub.repos.enrollment_repo import EnrollmentRepo
from learnhub.repos.user_repo import UserRepo
from learnhub.services.access import check_owner_or_admin

logger = logging.getLogger(__name__)

_COURSE_FIELDS = frozenset(
    {
        "title",
        "description",
        "price",
        "cover_image_url",
        "max_students",
        "category_id",
        "is_active",
    }
)
_CLASS_FIELDS = frozenset(
    {"title", "description", "video_url", "material_url", "order_index"}
)


@dataclass(frozen=True, slots=True)
class CourseFlags:
    """Per-requester annotations on a catalog entry."""

    in_cart: bool = False
    is_enrolled: bool = False


@dataclass(frozen=True, slots=True)
class EnrolledStudent:
    user: User
    enrollment: Enrollment


def _parse_price(raw: Any) -> Decimal:
    try:
        price = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        raise InvalidInputError("Price must be a number") from None
    if not price.is_finite() or price < 0:
        raise InvalidInputError("Price must be a non-negative number")
    return price.quantize(Decimal("0.01"))


def _require_text(value: str | None, field: str) -> str:
    if value is None or not value.strip():
        raise InvalidInputError(f"{field} is required")
    return value.strip()


def _check_order_index(order_index: int | None) -> None:
    if order_index is not None and order_index < 0:
        raise InvalidInputError("order_index must be non-negative")


class CatalogService:
    def __init__(
        self,
        categories: CategoryRepo,
        courses: CourseRepo,
        carts: CartRepo,
        enrollments: EnrollmentRepo,
        users: UserRepo,
    ) -> None:
        self._categories = categories
        self._courses = courses
        self._carts = carts
        self._enrollments = enrollments
        self._users = users

    # --- categories ---

    def list_categories(self) -> list[Category]:
        return self._categories.list_all()

    def create_category(self, name: str) -> Category:
        category = Category.new(name=_require_text(name, "Name"))
        try:
            self._categories.add(category)
        except DuplicateKeyError:
            raise ConflictError("Category already exists") from None
        logger.info("Category created id=%s name=%s", category.id, category.name)
        return category

    def rename_category(self, category_id: UUID, name: str) -> Category:
        category = self._categories.get_by_id(category_id)
        if category is None:
            raise NotFoundError("Category not found")
        renamed = replace(category, name=_require_text(name, "Name"))
        try:
            self._categories.update(renamed)
        except DuplicateKeyError:
            raise ConflictError("Category already exists") from None
        logger.info("Category renamed id=%s name=%s", category_id, renamed.name)
        return renamed

    def delete_category(self, category_id: UUID) -> None:
        """Delete an empty category.

        Inactive courses count too: they still point at the category.
        """
        if self._categories.get_by_id(category_id) is None:
            raise NotFoundError("Category not found")
        if self._courses.list_courses(category_id=category_id, active_only=False):
            logger.warning("Category delete refused id=%s: has courses", category_id)
            raise CategoryInUseError()
        self._categories.delete(category_id)
        logger.info("Category deleted id=%s", category_id)

    def courses_in_category(
        self, category_id: UUID, page: int, limit: int
    ) -> Page[Course]:
        if self._categories.get_by_id(category_id) is None:
            raise NotFoundError("Category not found")
        return self.list_courses(page, limit, category_id=category_id)

    # --- courses ---

    def list_courses(
        self,
        page: int,
        limit: int,
        *,
        search: str | None = None,
        category_id: UUID | None = None,
    ) -> Page[Course]:
        rows = self._courses.list_courses(search=search, category_id=category_id)
        return paginate(rows, page, limit)

    def get_course(self, course_id: UUID, principal: Principal | None = None) -> Course:
        """Inactive courses are visible only to their owner and admins."""
        course = self._courses.get(course_id)
        if course is None:
            raise NotFoundError("Course not found")
        if not course.is_active and not self._can_edit(principal, course):
            raise NotFoundError("Course not found")
        return course

    def create_course(
        self,
        principal: Principal,
        *,
        title: str,
        category_id: UUID,
        price: Any = 0,
        description: str = "",
        cover_image_url: str | None = None,
        max_students: int | None = None,
    ) -> Course:
        if self._categories.get_by_id(category_id) is None:
            raise NotFoundError("Category not found")
        if max_students is not None and max_students <= 0:
            raise InvalidInputError("max_students must be positive")

        course = Course.new(
            title=_require_text(title, "Title"),
            instructor_id=UUID(principal.user_id),
            category_id=category_id,
            price=_parse_price(price),
            description=description or "",
            cover_image_url=cover_image_url,
            max_students=max_students,
        )
        self._courses.add(course)
        logger.info("Course created id=%s instructor=%s", course.id, principal.user_id)
        return course

    def update_course(
        self, principal: Principal, course_id: UUID, changes: dict[str, Any]
    ) -> Course:
        course = self._owned_course(principal, course_id)
        unknown = set(changes) - _COURSE_FIELDS
        if unknown:
            raise InvalidInputError(f"Unknown fields: {', '.join(sorted(unknown))}")

        # Explicit nulls only clear the optional fields
        fields = {
            k: v
            for k, v in changes.items()
            if v is not None or k in ("cover_image_url", "max_students")
        }
        if "title" in fields:
            fields["title"] = _require_text(fields["title"], "Title")
        if "price" in fields:
            fields["price"] = _parse_price(fields["price"])
        if "category_id" in fields:
            if self._categories.get_by_id(fields["category_id"]) is None:
                raise NotFoundError("Category not found")
        if fields.get("max_students") is not None and fields["max_students"] <= 0:
            raise InvalidInputError("max_students must be positive")

        updated = replace(course, **fields)
        self._courses.update(updated)
        logger.info("Course updated id=%s fields=%s", course_id, sorted(fields))
        return updated

    def delete_course(self, principal: Principal, course_id: UUID) -> None:
        self._owned_course(principal, course_id)
        if self._enrollments.list_by_course(course_id):
            logger.warning("Course delete refused id=%s: has enrollments", course_id)
            raise CourseHasEnrollmentsError()

        dropped = self._carts.remove_course(course_id)
        for cls in self._courses.list_course_classes(course_id):
            self._enrollments.remove_completions_for_class(cls.id)
        self._courses.delete(course_id)
        logger.info("Course deleted id=%s cart_lines_dropped=%d", course_id, dropped)

    def list_students(
        self, principal: Principal, course_id: UUID
    ) -> list[EnrolledStudent]:
        self._owned_course(principal, course_id)
        rows: list[EnrolledStudent] = []
        for enrollment in self._enrollments.list_by_course(course_id):
            user = self._users.get_by_id(enrollment.student_id)
            if user is not None:
                rows.append(EnrolledStudent(user=user, enrollment=enrollment))
        return rows

    def course_flags(
        self, principal: Principal | None, course_ids: list[UUID]
    ) -> dict[UUID, CourseFlags]:
        """in_cart / is_enrolled for each course; all False for guests."""
        if principal is None:
            return {cid: CourseFlags() for cid in course_ids}
        student_id = UUID(principal.user_id)
        return {
            cid: CourseFlags(
                in_cart=self._carts.exists(student_id, cid),
                is_enrolled=self._enrollments.get(student_id, cid) is not None,
            )
            for cid in course_ids
        }

    def instructor_name(self, course: Course) -> str:
        user = self._users.get_by_id(course.instructor_id)
        return user.name if user else "Unknown"

    def category_name(self, course: Course) -> str | None:
        category = self._categories.get_by_id(course.category_id)
        return category.name if category else None

    # --- modules ---

    def list_modules(
        self, course_id: UUID, principal: Principal | None = None
    ) -> list[tuple[CourseModule, list[tuple[CourseClass, bool]]]]:
        """Modules in order, each with its classes and a completion flag."""
        self.get_course(course_id, principal)
        done: set[UUID] = set()
        if principal is not None:
            done = self._enrollments.completed_class_ids(
                UUID(principal.user_id),
                [c.id for c in self._courses.list_course_classes(course_id)],
            )
        return [
            (
                module,
                [(c, c.id in done) for c in self._courses.list_classes(module.id)],
            )
            for module in self._courses.list_modules(course_id)
        ]

    def create_module(
        self,
        principal: Principal,
        course_id: UUID,
        *,
        title: str,
        order_index: int | None = None,
    ) -> CourseModule:
        self._owned_course(principal, course_id)
        _check_order_index(order_index)
        if order_index is None:
            siblings = self._courses.list_modules(course_id)
            order_index = siblings[-1].order_index + 1 if siblings else 0

        module = CourseModule.new(
            course_id=course_id,
            order_index=order_index,
            title=_require_text(title, "Title"),
        )
        try:
            self._courses.add_module(module)
        except DuplicateKeyError:
            raise ConflictError("order_index already taken in this course") from None
        logger.info("Module created id=%s course=%s", module.id, course_id)
        return module

    def update_module(
        self,
        principal: Principal,
        module_id: UUID,
        *,
        title: str | None = None,
        order_index: int | None = None,
    ) -> CourseModule:
        module = self._owned_module(principal, module_id)
        _check_order_index(order_index)
        updated = replace(
            module,
            title=_require_text(title, "Title") if title is not None else module.title,
            order_index=order_index if order_index is not None else module.order_index,
        )
        try:
            self._courses.update_module(updated)
        except DuplicateKeyError:
            raise ConflictError("order_index already taken in this course") from None
        return updated

    def delete_module(self, principal: Principal, module_id: UUID) -> None:
        self._owned_module(principal, module_id)
        for cls in self._courses.list_classes(module_id):
            self._enrollments.remove_completions_for_class(cls.id)
        self._courses.delete_module(module_id)
        logger.info("Module deleted id=%s", module_id)

    # --- classes ---

    def get_class(self, class_id: UUID) -> tuple[CourseClass, CourseModule]:
        cls = self._courses.get_class(class_id)
        module = self._courses.get_module(cls.module_id) if cls else None
        if cls is None or module is None:
            raise NotFoundError("Class not found")
        return cls, module

    def create_class(
        self,
        principal: Principal,
        module_id: UUID,
        *,
        title: str,
        description: str = "",
        video_url: str | None = None,
        material_url: str | None = None,
        order_index: int | None = None,
    ) -> CourseClass:
        self._owned_module(principal, module_id)
        _check_order_index(order_index)
        if order_index is None:
            siblings = self._courses.list_classes(module_id)
            order_index = siblings[-1].order_index + 1 if siblings else 0

        cls = CourseClass.new(
            module_id=module_id,
            order_index=order_index,
            title=_require_text(title, "Title"),
            description=description or "",
            video_url=video_url,
            material_url=material_url,
        )
        try:
            self._courses.add_class(cls)
        except DuplicateKeyError:
            raise ConflictError("order_index already taken in this module") from None
        logger.info("Class created id=%s module=%s", cls.id, module_id)
        return cls

    def update_class(
        self, principal: Principal, class_id: UUID, changes: dict[str, Any]
    ) -> CourseClass:
        cls, module = self.get_class(class_id)
        self._owned_course(principal, module.course_id)
        unknown = set(changes) - _CLASS_FIELDS
        if unknown:
            raise InvalidInputError(f"Unknown fields: {', '.join(sorted(unknown))}")

        fields = {k: v for k, v in changes.items() if v is not None}
        if "title" in fields:
            fields["title"] = _require_text(fields["title"], "Title")
        _check_order_index(fields.get("order_index"))

        updated = replace(cls, **fields)
        try:
            self._courses.update_class(updated)
        except DuplicateKeyError:
            raise ConflictError("order_index already taken in this module") from None
        return updated

    def delete_class(self, principal: Principal, class_id: UUID) -> None:
        _, module = self.get_class(class_id)
        self._owned_course(principal, module.course_id)
        removed = self._enrollments.remove_completions_for_class(class_id)
        self._courses.delete_class(class_id)
        logger.info("Class deleted id=%s completions_removed=%d", class_id, removed)

    # --- helpers ---

    def _can_edit(self, principal: Principal | None, course: Course) -> bool:
        if principal is None:
            return False
        return principal.user_id == str(course.instructor_id) or principal.is_admin()

    def _owned_course(self, principal: Principal, course_id: UUID) -> Course:
        course = self._courses.get(course_id)
        if course is None:
            raise NotFoundError("Course not found")
        check_owner_or_admin(principal, course.instructor_id)
        return course

    def _owned_module(self, principal: Principal, module_id: UUID) -> CourseModule:
        module = self._courses.get_module(module_id)
        if module is None:
            raise NotFoundError("Module not found")
        self._owned_course(principal, module.course_id)
        return module
