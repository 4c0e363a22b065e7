from __future__ import annotations

from typing import Protocol
from uuid import UUID

from learnhub.core.errors import DuplicateKeyError
from learnhub.models.course import Category


class CategoryRepo(Protocol):
    def get_by_id(self, category_id: UUID) -> Category | None: ...
    def get_by_name(self, name: str) -> Category | None: ...
    def add(self, category: Category) -> None: ...
    def update(self, category: Category) -> None: ...
    def delete(self, category_id: UUID) -> bool: ...
    def list_all(self) -> list[Category]: ...


class InMemoryCategoryRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, Category] = {}

    def get_by_id(self, category_id: UUID) -> Category | None:
        return self._by_id.get(category_id)

    def get_by_name(self, name: str) -> Category | None:
        wanted = name.strip().casefold()
        return next(
            (c for c in self._by_id.values() if c.name.casefold() == wanted), None
        )

    def add(self, category: Category) -> None:
        if self.get_by_name(category.name) is not None:
            raise DuplicateKeyError("category name already exists")
        self._by_id[category.id] = category

    def update(self, category: Category) -> None:
        if category.id not in self._by_id:
            raise KeyError("category not found")
        holder = self.get_by_name(category.name)
        if holder is not None and holder.id != category.id:
            raise DuplicateKeyError("category name already exists")
        self._by_id[category.id] = category

    def delete(self, category_id: UUID) -> bool:
        return self._by_id.pop(category_id, None) is not None

    def list_all(self) -> list[Category]:
        return sorted(self._by_id.values(), key=lambda c: c.name.casefold())
