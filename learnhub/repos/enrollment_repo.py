"""Enrollment ledger storage: enrollments plus per-class completion markers.

Uniqueness rules mirror the relational schema in learnhub/db/tables.py:
  enrollments        UNIQUE (student_id, course_id), UNIQUE (certificate_id)
  class_completions  PRIMARY KEY (student_id, class_id)

Sync routes run in a threadpool, so every check-then-write holds ``_lock``.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import replace
from typing import Protocol
from uuid import UUID

from learnhub.core.errors import DuplicateKeyError
from learnhub.models.enrollment import ClassCompletion, Enrollment


class EnrollmentRepo(Protocol):
    def get(self, student_id: UUID, course_id: UUID) -> Enrollment | None: ...
    def get_by_certificate(self, certificate_id: str) -> Enrollment | None: ...
    def add(self, enrollment: Enrollment) -> None: ...
    def add_many(self, enrollments: list[Enrollment]) -> None: ...
    def remove_many(self, enrollment_ids: Iterable[UUID]) -> None: ...
    def update(self, enrollment: Enrollment) -> None: ...
    def list_by_student(self, student_id: UUID) -> list[Enrollment]: ...
    def list_by_course(self, course_id: UUID) -> list[Enrollment]: ...

    def add_completion(self, completion: ClassCompletion) -> bool: ...
    def remove_completion(self, student_id: UUID, class_id: UUID) -> bool: ...
    def completed_class_ids(
        self, student_id: UUID, class_ids: Iterable[UUID]
    ) -> set[UUID]: ...
    def remove_completions_for_class(self, class_id: UUID) -> int: ...


class InMemoryEnrollmentRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, Enrollment] = {}
        self._by_pair: dict[tuple[UUID, UUID], UUID] = {}
        self._completions: dict[tuple[UUID, UUID], ClassCompletion] = {}
        self._lock = threading.Lock()

    # --- enrollments ---

    def get(self, student_id: UUID, course_id: UUID) -> Enrollment | None:
        enrollment_id = self._by_pair.get((student_id, course_id))
        return self._by_id.get(enrollment_id) if enrollment_id else None

    def get_by_certificate(self, certificate_id: str) -> Enrollment | None:
        rows = list(self._by_id.values())
        return next((e for e in rows if e.certificate_id == certificate_id), None)

    def add(self, enrollment: Enrollment) -> None:
        self.add_many([enrollment])

    def add_many(self, enrollments: list[Enrollment]) -> None:
        """Insert a batch all-or-nothing.

        Every key is validated before anything is written, so a duplicate
        anywhere in the batch leaves the ledger untouched.
        """
        seen: set[tuple[UUID, UUID]] = set()
        with self._lock:
            for e in enrollments:
                key = (e.student_id, e.course_id)
                if key in self._by_pair or key in seen or e.id in self._by_id:
                    raise DuplicateKeyError(
                        f"enrollment already exists student={e.student_id} "
                        f"course={e.course_id}"
                    )
                seen.add(key)

            for e in enrollments:
                self._by_id[e.id] = e
                self._by_pair[(e.student_id, e.course_id)] = e.id

    def remove_many(self, enrollment_ids: Iterable[UUID]) -> None:
        with self._lock:
            for enrollment_id in enrollment_ids:
                e = self._by_id.pop(enrollment_id, None)
                if e is not None:
                    self._by_pair.pop((e.student_id, e.course_id), None)

    def update(self, enrollment: Enrollment) -> None:
        """Replace a stored enrollment.

        An issued certificate is permanent: a write made from a stale copy
        keeps the stored certificate instead of clearing or replacing it.
        """
        with self._lock:
            current = self._by_id.get(enrollment.id)
            if current is None:
                raise KeyError("enrollment not found")
            if current.certificate_id is not None:
                enrollment = replace(
                    enrollment,
                    certificate_id=current.certificate_id,
                    certificate_issued_at=current.certificate_issued_at,
                )
            elif enrollment.certificate_id is not None:
                holder = self.get_by_certificate(enrollment.certificate_id)
                if holder is not None and holder.id != enrollment.id:
                    raise DuplicateKeyError("certificate id already in use")
            self._by_id[enrollment.id] = enrollment

    def list_by_student(self, student_id: UUID) -> list[Enrollment]:
        return sorted(
            (e for e in list(self._by_id.values()) if e.student_id == student_id),
            key=lambda e: e.enrolled_at,
            reverse=True,
        )

    def list_by_course(self, course_id: UUID) -> list[Enrollment]:
        return sorted(
            (e for e in list(self._by_id.values()) if e.course_id == course_id),
            key=lambda e: e.enrolled_at,
        )

    # --- class completions ---

    def add_completion(self, completion: ClassCompletion) -> bool:
        """Record a completion.  Returns False if it was already recorded."""
        key = (completion.student_id, completion.class_id)
        with self._lock:
            if key in self._completions:
                return False
            self._completions[key] = completion
            return True

    def remove_completion(self, student_id: UUID, class_id: UUID) -> bool:
        with self._lock:
            return self._completions.pop((student_id, class_id), None) is not None

    def completed_class_ids(
        self, student_id: UUID, class_ids: Iterable[UUID]
    ) -> set[UUID]:
        return {cid for cid in class_ids if (student_id, cid) in self._completions}

    def remove_completions_for_class(self, class_id: UUID) -> int:
        with self._lock:
            keys = [k for k in self._completions if k[1] == class_id]
            for k in keys:
                del self._completions[k]
        return len(keys)
