from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from learnhub.repos.course_repo import CourseRepo
from learnhub.repos.enrollment_repo import EnrollmentRepo


def progress_percent(completed: int, total: int) -> int:
    """Whole-number percentage, halves rounded up.  No lessons means 0."""
    if total <= 0:
        return 0
    return (completed * 200 + total) // (2 * total)


@dataclass(frozen=True, slots=True)
class CourseProgress:
    completed: int
    total: int
    completed_class_ids: frozenset[UUID]

    @property
    def percent(self) -> int:
        return progress_percent(self.completed, self.total)

    @property
    def is_complete(self) -> bool:
        """Every lesson done; the rounded percent can read 100 one lesson early."""
        return self.total > 0 and self.completed == self.total


def course_progress(
    courses: CourseRepo,
    enrollments: EnrollmentRepo,
    student_id: UUID,
    course_id: UUID,
) -> CourseProgress:
    """Live progress over the course's full flattened lesson list."""
    class_ids = [c.id for c in courses.list_course_classes(course_id)]
    done = enrollments.completed_class_ids(student_id, class_ids)
    return CourseProgress(
        completed=len(done), total=len(class_ids), completed_class_ids=frozenset(done)
    )
