from __future__ import annotations

import threading
from collections.abc import Iterable
from typing import Protocol
from uuid import UUID

from learnhub.core.errors import DuplicateKeyError
from learnhub.models.enrollment import CartLine


class CartRepo(Protocol):
    def exists(self, student_id: UUID, course_id: UUID) -> bool: ...
    def add(self, line: CartLine) -> None: ...
    def remove(self, student_id: UUID, course_id: UUID) -> bool: ...
    def list_by_student(self, student_id: UUID) -> list[CartLine]: ...
    def remove_many(self, student_id: UUID, course_ids: Iterable[UUID]) -> int: ...
    def clear(self, student_id: UUID) -> int: ...
    def remove_course(self, course_id: UUID) -> int: ...


class InMemoryCartRepo:
    def __init__(self) -> None:
        # (student_id, course_id) is the primary key, like the cart_lines table
        self._store: dict[tuple[UUID, UUID], CartLine] = {}
        self._lock = threading.Lock()

    def exists(self, student_id: UUID, course_id: UUID) -> bool:
        return (student_id, course_id) in self._store

    def add(self, line: CartLine) -> None:
        key = (line.student_id, line.course_id)
        with self._lock:
            if key in self._store:
                raise DuplicateKeyError("cart line already exists")
            self._store[key] = line

    def remove(self, student_id: UUID, course_id: UUID) -> bool:
        return self._store.pop((student_id, course_id), None) is not None

    def list_by_student(self, student_id: UUID) -> list[CartLine]:
        lines = [ln for ln in list(self._store.values()) if ln.student_id == student_id]
        return sorted(lines, key=lambda line: line.added_at)

    def remove_many(self, student_id: UUID, course_ids: Iterable[UUID]) -> int:
        """Drop the given lines only; lines added meanwhile stay."""
        with self._lock:
            keys = [(student_id, c) for c in course_ids]
            keys = [k for k in keys if k in self._store]
            for k in keys:
                del self._store[k]
        return len(keys)

    def clear(self, student_id: UUID) -> int:
        with self._lock:
            keys = [k for k in self._store if k[0] == student_id]
            for k in keys:
                del self._store[k]
        return len(keys)

    def remove_course(self, course_id: UUID) -> int:
        with self._lock:
            keys = [k for k in self._store if k[1] == course_id]
            for k in keys:
                del self._store[k]
        return len(keys)
