from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID, uuid4


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class Category:
    id: UUID
    name: str

    @staticmethod
    def new(*, name: str) -> Category:
        return Category(id=uuid4(), name=name.strip())


@dataclass(frozen=True, slots=True)
class Course:
    id: UUID
    title: str
    instructor_id: UUID
    category_id: UUID
    price: Decimal = Decimal("0.00")
    description: str = ""
    cover_image_url: str | None = None
    max_students: int | None = None
    is_active: bool = True
    created_at: datetime = field(default_factory=_now)

    @staticmethod
    def new(
        *,
        title: str,
        instructor_id: UUID,
        category_id: UUID,
        price: Decimal = Decimal("0.00"),
        description: str = "",
        cover_image_url: str | None = None,
        max_students: int | None = None,
    ) -> Course:
        return Course(
            id=uuid4(),
            title=title.strip(),
            instructor_id=instructor_id,
            category_id=category_id,
            price=price.quantize(Decimal("0.01")),
            description=description,
            cover_image_url=cover_image_url,
            max_students=max_students,
        )


@dataclass(frozen=True, slots=True)
class CourseModule:
    id: UUID
    course_id: UUID
    order_index: int
    title: str

    @staticmethod
    def new(*, course_id: UUID, order_index: int, title: str) -> CourseModule:
        return CourseModule(
            id=uuid4(), course_id=course_id, order_index=order_index, title=title
        )


@dataclass(frozen=True, slots=True)
class CourseClass:
    """A single lesson inside a module."""

    id: UUID
    module_id: UUID
    order_index: int
    title: str
    description: str = ""
    video_url: str | None = None
    material_url: str | None = None

    @staticmethod
    def new(
        *,
        module_id: UUID,
        order_index: int,
        title: str,
        description: str = "",
        video_url: str | None = None,
        material_url: str | None = None,
    ) -> CourseClass:
        return CourseClass(
            id=uuid4(),
            module_id=module_id,
            order_index=order_index,
            title=title,
            description=description,
            video_url=video_url,
            material_url=material_url,
        )
