"""Role-based access control across the API surface.

Each row hits an endpoint with a token for one role and checks the
status.  Capability checks run before any resource lookup, so a forbidden
role gets 403 even for ids that do not exist, while an allowed role falls
through to the handler (and may get 404/400 there).
"""

from __future__ import annotations

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from learnhub.models.principal import Role
from tests.conftest import mint_token

_MISSING = uuid4()
_COURSE_BODY = {"title": "T", "category_id": str(_MISSING)}
_REVIEW_BODY = {"course_id": str(_MISSING), "rating": 5}

_CASES = [
    # (method, path, json, role, expected)
    ("GET", "/students/cart", None, Role.STUDENT, 200),
    ("GET", "/students/cart", None, Role.INSTRUCTOR, 403),
    ("GET", "/students/cart", None, Role.ADMIN, 403),
    ("POST", "/checkout", None, Role.STUDENT, 400),
    ("POST", "/checkout", None, Role.INSTRUCTOR, 403),
    ("POST", f"/students/{_MISSING}/enroll", None, Role.STUDENT, 404),
    ("POST", f"/students/{_MISSING}/enroll", None, Role.ADMIN, 403),
    ("POST", f"/classes/{_MISSING}/progress", None, Role.STUDENT, 404),
    ("POST", f"/classes/{_MISSING}/progress", None, Role.INSTRUCTOR, 403),
    ("GET", "/student/my-courses", None, Role.STUDENT, 200),
    ("GET", "/student/my-courses", None, Role.ADMIN, 403),
    ("POST", f"/student/courses/{_MISSING}/certificate", None, Role.STUDENT, 404),
    ("POST", f"/student/courses/{_MISSING}/certificate", None, Role.ADMIN, 403),
    ("POST", "/reviews", _REVIEW_BODY, Role.STUDENT, 404),
    ("POST", "/reviews", _REVIEW_BODY, Role.ADMIN, 403),
    ("POST", "/categories", {"name": "RBAC"}, Role.ADMIN, 201),
    ("POST", "/categories", {"name": "RBAC"}, Role.INSTRUCTOR, 403),
    ("POST", "/categories", {"name": "RBAC"}, Role.STUDENT, 403),
    ("PUT", f"/categories/{_MISSING}", {"name": "RBAC"}, Role.ADMIN, 404),
    ("PUT", f"/categories/{_MISSING}", {"name": "RBAC"}, Role.INSTRUCTOR, 403),
    ("DELETE", f"/categories/{_MISSING}", None, Role.ADMIN, 404),
    ("DELETE", f"/categories/{_MISSING}", None, Role.STUDENT, 403),
    ("POST", "/courses", _COURSE_BODY, Role.STUDENT, 403),
    ("POST", "/courses", _COURSE_BODY, Role.ADMIN, 404),
    ("DELETE", f"/courses/{_MISSING}", None, Role.INSTRUCTOR, 404),
    ("DELETE", f"/courses/{_MISSING}", None, Role.STUDENT, 403),
    ("DELETE", f"/modules/{_MISSING}", None, Role.STUDENT, 403),
    ("PUT", f"/classes/{_MISSING}", {"title": "x"}, Role.STUDENT, 403),
    ("GET", f"/classes/{_MISSING}", None, Role.STUDENT, 404),
]


@pytest.mark.parametrize(
    "method,path,body,role,expected",
    _CASES,
    ids=[f"{m} {p.split('/')[1]} as {r.value} -> {e}" for m, p, _, r, e in _CASES],
)
def test_role_matrix(
    client: TestClient,
    method: str,
    path: str,
    body: dict | None,
    role: Role,
    expected: int,
) -> None:
    token = mint_token(str(uuid4()), "RBAC User", role)
    resp = client.request(
        method, path, json=body, headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == expected, resp.text


_PROTECTED = [
    ("GET", "/students/cart"),
    ("POST", "/checkout"),
    ("GET", "/student/my-courses"),
    ("GET", "/auth/me"),
    ("DELETE", f"/reviews/{_MISSING}"),
    ("GET", f"/courses/{_MISSING}/students"),
]


@pytest.mark.parametrize(
    "method,path", _PROTECTED, ids=[f"{m} {p}" for m, p in _PROTECTED]
)
def test_protected_routes_require_token(
    client: TestClient, method: str, path: str
) -> None:
    resp = client.request(method, path)
    assert resp.status_code == 401
    assert resp.json() == {"error": "Authentication required"}
