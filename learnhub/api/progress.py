"""Lesson completion and the student's own course views."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter
from pydantic import BaseModel

from learnhub.api.courses import (
    CourseOut,
    LimitParam,
    ModuleOut,
    PageParam,
    course_out,
    module_out,
)
from learnhub.api.dependencies import Learner
from learnhub.api.stores import progress_service
from learnhub.services.progress_service import ProgressUpdate

router = APIRouter(tags=["progress"])


class ProgressOut(BaseModel):
    course_id: str
    class_id: str | None = None
    progress: int
    completed_classes: int
    total_classes: int
    certificate_id: str | None = None
    newly_issued: bool = False


class MyCourseOut(BaseModel):
    enrollment_id: str
    course: CourseOut
    instructor_name: str
    progress: int
    completed_classes: int
    total_classes: int
    enrolled_at: datetime
    certificate_id: str | None


class MyCoursesOut(BaseModel):
    items: list[MyCourseOut]
    total: int
    page: int
    limit: int
    total_pages: int


class MyCourseDetailOut(BaseModel):
    course: CourseOut
    instructor_name: str
    progress: int
    completed_classes: int
    total_classes: int
    certificate_id: str | None
    modules: list[ModuleOut]


def _progress_out(update: ProgressUpdate) -> ProgressOut:
    return ProgressOut(
        course_id=str(update.course_id),
        class_id=str(update.class_id) if update.class_id else None,
        progress=update.progress,
        completed_classes=update.completed_classes,
        total_classes=update.total_classes,
        certificate_id=update.certificate_id,
        newly_issued=update.newly_issued,
    )


@router.post("/classes/{class_id}/progress", response_model=ProgressOut)
def mark_complete(class_id: UUID, principal: Learner) -> ProgressOut:
    update = progress_service.mark_class_complete(UUID(principal.user_id), class_id)
    return _progress_out(update)


@router.delete("/classes/{class_id}/progress", response_model=ProgressOut)
def mark_incomplete(class_id: UUID, principal: Learner) -> ProgressOut:
    update = progress_service.mark_class_incomplete(UUID(principal.user_id), class_id)
    return _progress_out(update)


@router.get("/student/courses/{course_id}/progress", response_model=ProgressOut)
def course_progress(course_id: UUID, principal: Learner) -> ProgressOut:
    return _progress_out(
        progress_service.get_progress(UUID(principal.user_id), course_id)
    )


@router.get("/student/my-courses", response_model=MyCoursesOut)
def my_courses(
    principal: Learner, page: PageParam = 1, limit: LimitParam = 10
) -> MyCoursesOut:
    result = progress_service.list_my_courses(UUID(principal.user_id), page, limit)
    return MyCoursesOut(
        items=[
            MyCourseOut(
                enrollment_id=str(row.enrollment.id),
                course=course_out(row.course, is_enrolled=True),
                instructor_name=row.instructor_name,
                progress=row.progress.percent,
                completed_classes=row.progress.completed,
                total_classes=row.progress.total,
                enrolled_at=row.enrollment.enrolled_at,
                certificate_id=row.enrollment.certificate_id,
            )
            for row in result.items
        ],
        total=result.total,
        page=result.page,
        limit=result.limit,
        total_pages=result.total_pages,
    )


@router.get("/student/my-courses/{course_id}", response_model=MyCourseDetailOut)
def my_course_detail(course_id: UUID, principal: Learner) -> MyCourseDetailOut:
    details = progress_service.course_details(UUID(principal.user_id), course_id)
    return MyCourseDetailOut(
        course=course_out(details.course, is_enrolled=True),
        instructor_name=details.instructor_name,
        progress=details.progress.percent,
        completed_classes=details.progress.completed,
        total_classes=details.progress.total,
        certificate_id=details.enrollment.certificate_id,
        modules=[module_out(m.module, m.classes) for m in details.modules],
    )
