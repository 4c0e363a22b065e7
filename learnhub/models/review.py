from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class Review:
    id: UUID
    student_id: UUID
    course_id: UUID
    rating: int
    comment: str | None = None
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    @staticmethod
    def new(
        *, student_id: UUID, course_id: UUID, rating: int, comment: str | None = None
    ) -> Review:
        return Review(
            id=uuid4(),
            student_id=student_id,
            course_id=course_id,
            rating=rating,
            comment=comment,
        )
