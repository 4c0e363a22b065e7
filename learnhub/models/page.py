from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Page(Generic[T]):
    items: list[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def paginate(rows: Sequence[T], page: int, limit: int) -> Page[T]:
    """Slice an already-ordered sequence into a 1-based page."""
    start = (page - 1) * limit
    return Page(
        items=list(rows[start : start + limit]),
        total=len(rows),
        page=page,
        limit=limit,
    )
