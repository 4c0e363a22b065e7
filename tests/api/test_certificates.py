"""Certificate issuance and public verification tests."""

from __future__ import annotations

import re
from uuid import uuid4

from fastapi.testclient import TestClient

from learnhub.api.stores import enrollment_repo
from learnhub.models.course import Course
from learnhub.models.enrollment import ClassCompletion
from learnhub.models.user import User
from tests.conftest import enroll, lessons_of, make_course, make_user, token_for

_CERT_ID = re.compile(r"^[a-z2-7]{26}$")


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _complete_silently(student: User, course: Course) -> None:
    """Record every completion without going through the progress endpoint."""
    for cls in lessons_of(course):
        enrollment_repo.add_completion(
            ClassCompletion(student_id=student.id, class_id=cls.id)
        )


# ---- issuance ----


def test_generate_is_idempotent(
    client: TestClient, student: User, instructor: User
) -> None:
    course = make_course(instructor, lessons=2)
    enroll(student, course)
    _complete_silently(student, course)
    url = f"/student/courses/{course.id}/certificate"
    headers = _auth(token_for(student))

    first = client.post(url, headers=headers)
    assert first.status_code == 201
    data = first.json()
    assert data["newly_issued"] is True
    assert _CERT_ID.match(data["certificate_id"])
    assert data["validation_url"].endswith(f"/certificates/{data['certificate_id']}")

    second = client.post(url, headers=headers)
    assert second.status_code == 200
    assert second.json()["certificate_id"] == data["certificate_id"]
    assert second.json()["issued_at"] == data["issued_at"]
    assert second.json()["newly_issued"] is False


def test_generate_before_completion_refused(
    client: TestClient, student: User, instructor: User
) -> None:
    course = make_course(instructor, lessons=2)
    enroll(student, course)
    enrollment_repo.add_completion(
        ClassCompletion(student_id=student.id, class_id=lessons_of(course)[0].id)
    )

    resp = client.post(
        f"/student/courses/{course.id}/certificate", headers=_auth(token_for(student))
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Course not completed (progress < 100%)"}
    assert enrollment_repo.get(student.id, course.id).certificate_id is None


def test_course_without_lessons_cannot_be_certified(
    client: TestClient, student: User, instructor: User
) -> None:
    course = make_course(instructor)
    enroll(student, course)
    resp = client.post(
        f"/student/courses/{course.id}/certificate", headers=_auth(token_for(student))
    )
    assert resp.status_code == 400


def test_generate_requires_enrollment(
    client: TestClient, student: User, instructor: User
) -> None:
    course = make_course(instructor, lessons=1)
    headers = _auth(token_for(student))

    resp = client.post(f"/student/courses/{course.id}/certificate", headers=headers)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Student is not enrolled in this course"}

    resp = client.post(f"/student/courses/{uuid4()}/certificate", headers=headers)
    assert resp.status_code == 404


def test_certificates_are_unique_per_enrollment(
    client: TestClient, instructor: User
) -> None:
    course = make_course(instructor, lessons=1)
    ids = set()
    for i in range(3):
        learner = make_user(name=f"Learner {i}")
        enroll(learner, course)
        _complete_silently(learner, course)
        resp = client.post(
            f"/student/courses/{course.id}/certificate",
            headers=_auth(token_for(learner)),
        )
        ids.add(resp.json()["certificate_id"])
    assert len(ids) == 3


# ---- public verification ----


def test_public_lookup_needs_no_auth(
    client: TestClient, student: User, instructor: User
) -> None:
    course = make_course(instructor, title="Data Science", lessons=3)
    enroll(student, course)
    _complete_silently(student, course)
    issued = client.post(
        f"/student/courses/{course.id}/certificate", headers=_auth(token_for(student))
    ).json()

    resp = client.get(f"/certificates/{issued['certificate_id']}")
    assert resp.status_code == 200
    data = resp.json()
    assert data == {
        "certificate_id": issued["certificate_id"],
        "student_name": "Sam Student",
        "course_title": "Data Science",
        "instructor_name": "Ivy Instructor",
        "issued_at": issued["issued_at"],
        "workload_hours": 3,
        "is_valid": True,
    }


def test_lookup_is_case_insensitive(
    client: TestClient, student: User, instructor: User
) -> None:
    course = make_course(instructor, lessons=1)
    enroll(student, course)
    _complete_silently(student, course)
    cert_id = client.post(
        f"/student/courses/{course.id}/certificate", headers=_auth(token_for(student))
    ).json()["certificate_id"]

    assert client.get(f"/certificates/{cert_id.upper()}").status_code == 200


def test_unknown_certificate_is_404(client: TestClient) -> None:
    resp = client.get("/certificates/aaaaaaaaaaaaaaaaaaaaaaaaaa")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Certificate not found"}
