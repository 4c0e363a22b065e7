"""Lesson completion tracking and the student's course views.

Progress is always derived from completion markers over the course's full
ordered lesson list.  The value stored on the enrollment is refreshed after
every change; reads recompute it so course edits (new or deleted lessons)
are reflected immediately.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING
from uuid import UUID

from learnhub.core.errors import NotEnrolledError, NotFoundError
from learnhub.models.course import Course, CourseClass, CourseModule
from learnhub.models.enrollment import ClassCompletion, Enrollment
from learnhub.models.page import Page, paginate
from learnhub.repos.course_repo import CourseRepo
from learnhub.repos.enrollment_repo import EnrollmentRepo
from learnhub.repos.user_repo import UserRepo
from learnhub.services.progress_math import CourseProgress, course_progress

if TYPE_CHECKING:
    from learnhub.services.certificate_service import CertificateService

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProgressUpdate:
    course_id: UUID
    progress: int
    completed_classes: int
    total_classes: int
    class_id: UUID | None = None
    certificate_id: str | None = None
    newly_issued: bool = False


@dataclass(frozen=True, slots=True)
class MyCourse:
    enrollment: Enrollment
    course: Course
    instructor_name: str
    progress: CourseProgress


@dataclass(frozen=True, slots=True)
class ModuleOutline:
    module: CourseModule
    classes: list[tuple[CourseClass, bool]]  # (lesson, completed)


@dataclass(frozen=True, slots=True)
class CourseDetails:
    course: Course
    enrollment: Enrollment
    instructor_name: str
    progress: CourseProgress
    modules: list[ModuleOutline]


class ProgressService:
    def __init__(
        self,
        courses: CourseRepo,
        enrollments: EnrollmentRepo,
        users: UserRepo,
        certificates: CertificateService,
    ) -> None:
        self._courses = courses
        self._enrollments = enrollments
        self._users = users
        self._certificates = certificates

    # --- completion state ---

    def mark_class_complete(self, student_id: UUID, class_id: UUID) -> ProgressUpdate:
        enrollment = self._locate(student_id, class_id)
        if self._enrollments.add_completion(
            ClassCompletion(student_id=student_id, class_id=class_id)
        ):
            logger.info("Class completed student=%s class=%s", student_id, class_id)

        enrollment, progress = self._refresh(enrollment)
        newly_issued = False
        if progress.is_complete and not enrollment.has_certificate:
            enrollment, newly_issued = self._certificates.issue(enrollment)

        return self._update(class_id, enrollment, progress, newly_issued)

    def mark_class_incomplete(
        self, student_id: UUID, class_id: UUID
    ) -> ProgressUpdate:
        enrollment = self._locate(student_id, class_id)
        if self._enrollments.remove_completion(student_id, class_id):
            logger.info("Class uncompleted student=%s class=%s", student_id, class_id)

        # An issued certificate survives progress dropping below 100
        enrollment, progress = self._refresh(enrollment)
        return self._update(class_id, enrollment, progress, False)

    def get_progress(self, student_id: UUID, course_id: UUID) -> ProgressUpdate:
        """Current progress for a course, without a class in focus."""
        if self._courses.get(course_id) is None:
            raise NotFoundError("Course not found")
        enrollment = self._require_enrollment(student_id, course_id)
        progress = course_progress(
            self._courses, self._enrollments, student_id, course_id
        )
        return ProgressUpdate(
            course_id=course_id,
            progress=progress.percent,
            completed_classes=progress.completed,
            total_classes=progress.total,
            certificate_id=enrollment.certificate_id,
        )

    # --- student views ---

    def list_my_courses(
        self, student_id: UUID, page: int, limit: int
    ) -> Page[MyCourse]:
        rows: list[MyCourse] = []
        for enrollment in self._enrollments.list_by_student(student_id):
            course = self._courses.get(enrollment.course_id)
            if course is None:
                continue
            rows.append(
                MyCourse(
                    enrollment=enrollment,
                    course=course,
                    instructor_name=self._user_name(course.instructor_id),
                    progress=course_progress(
                        self._courses, self._enrollments, student_id, course.id
                    ),
                )
            )
        return paginate(rows, page, limit)

    def course_details(self, student_id: UUID, course_id: UUID) -> CourseDetails:
        course = self._courses.get(course_id)
        if course is None:
            raise NotFoundError("Course not found")
        enrollment = self._require_enrollment(student_id, course_id)
        progress = course_progress(
            self._courses, self._enrollments, student_id, course_id
        )
        done = progress.completed_class_ids

        outline = [
            ModuleOutline(
                module=module,
                classes=[
                    (cls, cls.id in done)
                    for cls in self._courses.list_classes(module.id)
                ],
            )
            for module in self._courses.list_modules(course_id)
        ]
        return CourseDetails(
            course=course,
            enrollment=enrollment,
            instructor_name=self._user_name(course.instructor_id),
            progress=progress,
            modules=outline,
        )

    # --- helpers ---

    def _locate(self, student_id: UUID, class_id: UUID) -> Enrollment:
        """Resolve a class to the caller's enrollment in its course."""
        cls = self._courses.get_class(class_id)
        module = self._courses.get_module(cls.module_id) if cls else None
        if cls is None or module is None:
            raise NotFoundError("Class not found")
        return self._require_enrollment(student_id, module.course_id)

    def _require_enrollment(self, student_id: UUID, course_id: UUID) -> Enrollment:
        enrollment = self._enrollments.get(student_id, course_id)
        if enrollment is None:
            logger.warning(
                "Progress rejected: student=%s not enrolled in course=%s",
                student_id,
                course_id,
            )
            raise NotEnrolledError()
        return enrollment

    def _refresh(self, enrollment: Enrollment) -> tuple[Enrollment, CourseProgress]:
        progress = course_progress(
            self._courses,
            self._enrollments,
            enrollment.student_id,
            enrollment.course_id,
        )
        if progress.percent != enrollment.progress:
            enrollment = replace(enrollment, progress=progress.percent)
            self._enrollments.update(enrollment)
        return enrollment, progress

    @staticmethod
    def _update(
        class_id: UUID,
        enrollment: Enrollment,
        progress: CourseProgress,
        newly_issued: bool,
    ) -> ProgressUpdate:
        return ProgressUpdate(
            course_id=enrollment.course_id,
            class_id=class_id,
            progress=progress.percent,
            completed_classes=progress.completed,
            total_classes=progress.total,
            certificate_id=enrollment.certificate_id,
            newly_issued=newly_issued,
        )

    def _user_name(self, user_id: UUID) -> str:
        user = self._users.get_by_id(user_id)
        return user.name if user else "Unknown"
