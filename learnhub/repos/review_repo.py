from __future__ import annotations

import threading
from typing import Protocol
from uuid import UUID

from learnhub.core.errors import DuplicateKeyError
from learnhub.models.review import Review


class ReviewRepo(Protocol):
    def get_by_id(self, review_id: UUID) -> Review | None: ...
    def get_by_student_and_course(
        self, student_id: UUID, course_id: UUID
    ) -> Review | None: ...
    def add(self, review: Review) -> None: ...
    def update(self, review: Review) -> None: ...
    def delete(self, review_id: UUID) -> bool: ...
    def list_by_course(self, course_id: UUID) -> list[Review]: ...


class InMemoryReviewRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, Review] = {}
        self._lock = threading.Lock()

    def get_by_id(self, review_id: UUID) -> Review | None:
        return self._by_id.get(review_id)

    def get_by_student_and_course(
        self, student_id: UUID, course_id: UUID
    ) -> Review | None:
        return next(
            (
                r
                for r in list(self._by_id.values())
                if r.student_id == student_id and r.course_id == course_id
            ),
            None,
        )

    def add(self, review: Review) -> None:
        with self._lock:
            if self.get_by_student_and_course(review.student_id, review.course_id):
                raise DuplicateKeyError("review already exists for this course")
            self._by_id[review.id] = review

    def update(self, review: Review) -> None:
        if review.id not in self._by_id:
            raise KeyError("review not found")
        self._by_id[review.id] = review

    def delete(self, review_id: UUID) -> bool:
        return self._by_id.pop(review_id, None) is not None

    def list_by_course(self, course_id: UUID) -> list[Review]:
        """Newest first."""
        return sorted(
            (r for r in list(self._by_id.values()) if r.course_id == course_id),
            key=lambda r: r.created_at,
            reverse=True,
        )
