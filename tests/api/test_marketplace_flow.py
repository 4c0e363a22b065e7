"""End-to-end: an instructor publishes, a student buys, learns and certifies.

Drives the whole journey through HTTP only, from registration to the
public certificate page.
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from learnhub.models.principal import Role
from tests.conftest import make_user, token_for


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _publish(
    client: TestClient, token: str, category_id: str, title: str, price: str, n: int
) -> tuple[str, list[str]]:
    """Create a course with one module of ``n`` lessons; return ids."""
    course = client.post(
        "/courses",
        json={"title": title, "category_id": category_id, "price": price},
        headers=_auth(token),
    ).json()
    module = client.post(
        f"/courses/{course['id']}/modules",
        json={"title": "Basics"},
        headers=_auth(token),
    ).json()
    class_ids = [
        client.post(
            f"/modules/{module['id']}/classes",
            json={"title": f"Lesson {i + 1}"},
            headers=_auth(token),
        ).json()["id"]
        for i in range(n)
    ]
    return course["id"], class_ids


def test_buy_learn_certify(client: TestClient) -> None:
    admin = make_user(Role.ADMIN, "Ada Admin")
    author = make_user(Role.INSTRUCTOR, "Grace Hopper")
    author_token = token_for(author)

    category = client.post(
        "/categories", json={"name": "Computing"}, headers=_auth(token_for(admin))
    ).json()
    c1, c1_lessons = _publish(
        client, author_token, category["id"], "Compilers", "50.00", 4
    )
    c2, _ = _publish(client, author_token, category["id"], "Debugging", "30.00", 2)

    # Student signs up and shops
    reg = client.post(
        "/auth/register",
        json={"name": "Alan", "email": "alan@learnhub.dev", "password": "enigma-1912"},
    )
    assert reg.status_code == 201
    student = _auth(reg.json()["access_token"])

    for course_id in (c1, c2):
        added = client.post(f"/students/cart/{course_id}", headers=student)
        assert added.status_code == 201
    cart = client.get("/students/cart", headers=student).json()
    assert cart["item_count"] == 2
    assert cart["total_price"] == 80.0

    checkout = client.post("/checkout", headers=student)
    assert checkout.status_code == 200
    assert checkout.json()["enrolled_count"] == 2
    assert client.get("/students/cart", headers=student).json()["item_count"] == 0

    # Learn C1 lesson by lesson
    progress = [
        client.post(f"/classes/{cid}/progress", headers=student).json()
        for cid in c1_lessons
    ]
    assert [p["progress"] for p in progress] == [25, 50, 75, 100]
    certificate_id = progress[-1]["certificate_id"]
    assert certificate_id is not None

    # Explicit generation returns the same certificate
    cert = client.post(f"/student/courses/{c1}/certificate", headers=student)
    assert cert.status_code == 200
    assert cert.json()["certificate_id"] == certificate_id

    # Anyone can verify it
    public = client.get(f"/certificates/{certificate_id}")
    assert public.status_code == 200
    assert public.json()["student_name"] == "Alan"
    assert public.json()["course_title"] == "Compilers"
    assert public.json()["instructor_name"] == "Grace Hopper"
    assert public.json()["workload_hours"] == 4

    # Review, then see it on the course page
    review = client.post(
        "/reviews",
        json={"course_id": c1, "rating": 5, "comment": "Superb"},
        headers=student,
    )
    assert review.status_code == 201
    reviews = client.get(f"/courses/{c1}/reviews").json()
    assert reviews["average_rating"] == 5.0
    assert reviews["items"][0]["student_name"] == "Alan"

    # Dashboard reflects both enrollments
    mine = client.get("/student/my-courses", headers=student).json()
    by_course = {row["course"]["id"]: row for row in mine["items"]}
    assert by_course[c1]["progress"] == 100
    assert by_course[c1]["certificate_id"] == certificate_id
    assert by_course[c2]["progress"] == 0

    # The instructor sees the roster; the course can no longer be deleted
    roster = client.get(f"/courses/{c1}/students", headers=_auth(author_token))
    assert [r["name"] for r in roster.json()] == ["Alan"]
    refused = client.delete(f"/courses/{c1}", headers=_auth(author_token))
    assert refused.status_code == 409
