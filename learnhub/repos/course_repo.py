"""Catalog storage: courses and their ordered modules and classes."""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from learnhub.core.errors import DuplicateKeyError
from learnhub.models.course import Course, CourseClass, CourseModule


class CourseRepo(Protocol):
    # --- courses ---
    def get(self, course_id: UUID) -> Course | None: ...
    def add(self, course: Course) -> None: ...
    def update(self, course: Course) -> None: ...
    def delete(self, course_id: UUID) -> None: ...
    def list_courses(
        self,
        *,
        search: str | None = None,
        category_id: UUID | None = None,
        active_only: bool = True,
    ) -> list[Course]: ...

    # --- modules ---
    def get_module(self, module_id: UUID) -> CourseModule | None: ...
    def add_module(self, module: CourseModule) -> None: ...
    def update_module(self, module: CourseModule) -> None: ...
    def delete_module(self, module_id: UUID) -> None: ...
    def list_modules(self, course_id: UUID) -> list[CourseModule]: ...

    # --- classes ---
    def get_class(self, class_id: UUID) -> CourseClass | None: ...
    def add_class(self, course_class: CourseClass) -> None: ...
    def update_class(self, course_class: CourseClass) -> None: ...
    def delete_class(self, class_id: UUID) -> None: ...
    def list_classes(self, module_id: UUID) -> list[CourseClass]: ...
    def list_course_classes(self, course_id: UUID) -> list[CourseClass]: ...


class InMemoryCourseRepo:
    def __init__(self) -> None:
        self._courses: dict[UUID, Course] = {}
        self._modules: dict[UUID, CourseModule] = {}
        self._classes: dict[UUID, CourseClass] = {}

    # --- courses ---

    def get(self, course_id: UUID) -> Course | None:
        return self._courses.get(course_id)

    def add(self, course: Course) -> None:
        if course.id in self._courses:
            raise DuplicateKeyError("course already exists")
        self._courses[course.id] = course

    def update(self, course: Course) -> None:
        if course.id not in self._courses:
            raise KeyError("course not found")
        self._courses[course.id] = course

    def delete(self, course_id: UUID) -> None:
        """Remove the course and everything nested under it."""
        for module in self.list_modules(course_id):
            self.delete_module(module.id)
        self._courses.pop(course_id, None)

    def list_courses(
        self,
        *,
        search: str | None = None,
        category_id: UUID | None = None,
        active_only: bool = True,
    ) -> list[Course]:
        needle = search.strip().casefold() if search else None
        rows = []
        for c in self._courses.values():
            if active_only and not c.is_active:
                continue
            if category_id is not None and c.category_id != category_id:
                continue
            if needle and needle not in (c.title + " " + c.description).casefold():
                continue
            rows.append(c)
        # Newest first, same as the catalog page shows them
        return sorted(rows, key=lambda c: c.created_at, reverse=True)

    # --- modules ---

    def get_module(self, module_id: UUID) -> CourseModule | None:
        return self._modules.get(module_id)

    def add_module(self, module: CourseModule) -> None:
        self._check_module_order(module)
        self._modules[module.id] = module

    def update_module(self, module: CourseModule) -> None:
        if module.id not in self._modules:
            raise KeyError("module not found")
        self._check_module_order(module)
        self._modules[module.id] = module

    def delete_module(self, module_id: UUID) -> None:
        for cls in self.list_classes(module_id):
            self._classes.pop(cls.id, None)
        self._modules.pop(module_id, None)

    def list_modules(self, course_id: UUID) -> list[CourseModule]:
        return sorted(
            (m for m in self._modules.values() if m.course_id == course_id),
            key=lambda m: m.order_index,
        )

    def _check_module_order(self, module: CourseModule) -> None:
        for other in self._modules.values():
            if (
                other.id != module.id
                and other.course_id == module.course_id
                and other.order_index == module.order_index
            ):
                raise DuplicateKeyError("module order_index already taken")

    # --- classes ---

    def get_class(self, class_id: UUID) -> CourseClass | None:
        return self._classes.get(class_id)

    def add_class(self, course_class: CourseClass) -> None:
        self._check_class_order(course_class)
        self._classes[course_class.id] = course_class

    def update_class(self, course_class: CourseClass) -> None:
        if course_class.id not in self._classes:
            raise KeyError("class not found")
        self._check_class_order(course_class)
        self._classes[course_class.id] = course_class

    def delete_class(self, class_id: UUID) -> None:
        self._classes.pop(class_id, None)

    def list_classes(self, module_id: UUID) -> list[CourseClass]:
        return sorted(
            (c for c in self._classes.values() if c.module_id == module_id),
            key=lambda c: c.order_index,
        )

    def list_course_classes(self, course_id: UUID) -> list[CourseClass]:
        """All lessons of a course, flattened in module order then class order."""
        flat: list[CourseClass] = []
        for module in self.list_modules(course_id):
            flat.extend(self.list_classes(module.id))
        return flat

    def _check_class_order(self, course_class: CourseClass) -> None:
        for other in self._classes.values():
            if (
                other.id != course_class.id
                and other.module_id == course_class.module_id
                and other.order_index == course_class.order_index
            ):
                raise DuplicateKeyError("class order_index already taken")
