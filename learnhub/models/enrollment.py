from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class CartLine:
    student_id: UUID
    course_id: UUID
    added_at: datetime = field(default_factory=_now)


@dataclass(frozen=True, slots=True)
class Enrollment:
    """Authoritative record that a student has access to a course.

    progress is the stored 0..100 value, recomputed by the progress
    tracker on every completion change.  certificate_id is set once and
    never cleared.
    """

    id: UUID
    student_id: UUID
    course_id: UUID
    progress: int = 0
    enrolled_at: datetime = field(default_factory=_now)
    certificate_id: str | None = None
    certificate_issued_at: datetime | None = None

    @staticmethod
    def new(*, student_id: UUID, course_id: UUID) -> Enrollment:
        return Enrollment(id=uuid4(), student_id=student_id, course_id=course_id)

    @property
    def has_certificate(self) -> bool:
        return self.certificate_id is not None


@dataclass(frozen=True, slots=True)
class ClassCompletion:
    student_id: UUID
    class_id: UUID
    completed_at: datetime = field(default_factory=_now)
