"""Progress arithmetic and the progress tracker on fresh stores."""

from __future__ import annotations

from uuid import uuid4

import pytest

from learnhub.core.errors import NotEnrolledError, NotFoundError
from learnhub.models.course import Course, CourseClass, CourseModule
from learnhub.models.enrollment import Enrollment
from learnhub.models.user import User
from learnhub.repos.course_repo import InMemoryCourseRepo
from learnhub.repos.enrollment_repo import InMemoryEnrollmentRepo
from learnhub.repos.user_repo import InMemoryUserRepo
from learnhub.services.certificate_service import CertificateService
from learnhub.services.progress_math import progress_percent
from learnhub.services.progress_service import ProgressService

# ---- percentage rounding ----

_PERCENT_CASES = [
    # (completed, total, expected)
    (0, 0, 0),
    (0, 5, 0),
    (1, 2, 50),
    (1, 3, 33),
    (2, 3, 67),
    (1, 8, 13),  # 12.5 rounds up
    (1, 200, 1),  # 0.5 rounds up
    (7, 7, 100),
]


@pytest.mark.parametrize(
    "completed,total,expected",
    _PERCENT_CASES,
    ids=[f"{c}/{t} -> {e}" for c, t, e in _PERCENT_CASES],
)
def test_progress_percent(completed: int, total: int, expected: int) -> None:
    assert progress_percent(completed, total) == expected


def test_progress_percent_is_monotonic() -> None:
    for total in range(1, 40):
        values = [progress_percent(done, total) for done in range(total + 1)]
        assert values == sorted(values)
        assert values[-1] == 100


# ---- tracker ----


def _setup(lessons: int = 2):
    courses, enrollments, users = (
        InMemoryCourseRepo(),
        InMemoryEnrollmentRepo(),
        InMemoryUserRepo(),
    )
    certificates = CertificateService(
        courses, enrollments, users, public_base_url="https://learnhub.test"
    )
    service = ProgressService(courses, enrollments, users, certificates)

    student = User.new(name="Stu", email="stu@test.dev", password_hash="x")
    users.add(student)
    course = Course.new(title="C", instructor_id=uuid4(), category_id=uuid4())
    courses.add(course)
    module = CourseModule.new(course_id=course.id, order_index=0, title="M")
    courses.add_module(module)
    classes = []
    for i in range(lessons):
        cls = CourseClass.new(module_id=module.id, order_index=i, title=f"L{i}")
        courses.add_class(cls)
        classes.append(cls)
    return service, enrollments, student, course, classes


def test_completion_updates_stored_progress() -> None:
    service, enrollments, student, course, classes = _setup(lessons=2)
    enrollments.add(Enrollment.new(student_id=student.id, course_id=course.id))

    update = service.mark_class_complete(student.id, classes[0].id)

    assert update.progress == 50
    assert update.class_id == classes[0].id
    assert enrollments.get(student.id, course.id).progress == 50


def test_reaching_100_issues_certificate_once() -> None:
    service, enrollments, student, course, classes = _setup(lessons=2)
    enrollments.add(Enrollment.new(student_id=student.id, course_id=course.id))

    service.mark_class_complete(student.id, classes[0].id)
    done = service.mark_class_complete(student.id, classes[1].id)
    assert done.newly_issued is True
    assert done.certificate_id is not None

    service.mark_class_incomplete(student.id, classes[1].id)
    again = service.mark_class_complete(student.id, classes[1].id)
    assert again.newly_issued is False
    assert again.certificate_id == done.certificate_id


def test_incomplete_lowers_stored_progress_but_keeps_certificate() -> None:
    service, enrollments, student, course, classes = _setup(lessons=1)
    enrollments.add(Enrollment.new(student_id=student.id, course_id=course.id))
    issued = service.mark_class_complete(student.id, classes[0].id)

    update = service.mark_class_incomplete(student.id, classes[0].id)

    stored = enrollments.get(student.id, course.id)
    assert update.progress == stored.progress == 0
    assert stored.certificate_id == issued.certificate_id


def test_marking_requires_enrollment() -> None:
    service, _, student, _, classes = _setup()
    with pytest.raises(NotEnrolledError):
        service.mark_class_complete(student.id, classes[0].id)


def test_marking_unknown_class() -> None:
    service, _, student, _, _ = _setup()
    with pytest.raises(NotFoundError):
        service.mark_class_complete(student.id, uuid4())


def test_get_progress_recomputes_live() -> None:
    service, enrollments, student, course, classes = _setup(lessons=2)
    enrollments.add(Enrollment.new(student_id=student.id, course_id=course.id))
    service.mark_class_complete(student.id, classes[0].id)
    service.mark_class_complete(student.id, classes[1].id)

    # Removing a lesson from the course keeps progress over what remains
    service._courses.delete_class(classes[1].id)  # type: ignore[attr-defined]
    assert service.get_progress(student.id, course.id).progress == 100


def test_certificate_waits_for_last_lesson_on_large_course() -> None:
    service, enrollments, student, course, classes = _setup(lessons=200)
    enrollments.add(Enrollment.new(student_id=student.id, course_id=course.id))

    for cls in classes[:199]:
        update = service.mark_class_complete(student.id, cls.id)

    # 199/200 rounds to 100 but one lesson is still open
    assert update.progress == 100
    assert update.completed_classes == 199
    assert update.certificate_id is None
    assert update.newly_issued is False
    assert not enrollments.get(student.id, course.id).has_certificate

    last = service.mark_class_complete(student.id, classes[199].id)
    assert last.newly_issued is True
    assert last.certificate_id is not None
