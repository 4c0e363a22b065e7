from __future__ import annotations

import os
from dataclasses import replace
from datetime import timedelta
from decimal import Decimal

# Must be set before learnhub.core.config is imported: no dev seed, no docs
os.environ.setdefault("APP_ENV", "test")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from learnhub.api.stores import (  # noqa: E402
    cart_repo,
    category_repo,
    course_repo,
    enrollment_repo,
    review_repo,
    user_repo,
)
from learnhub.main import app  # noqa: E402
from learnhub.models.course import (  # noqa: E402
    Category,
    Course,
    CourseClass,
    CourseModule,
)
from learnhub.models.enrollment import Enrollment  # noqa: E402
from learnhub.models.principal import Role  # noqa: E402
from learnhub.models.user import User  # noqa: E402
from learnhub.services import token_service  # noqa: E402
from learnhub.services.rate_limiter import rate_limiter  # noqa: E402
from learnhub.services.token_blacklist import token_blacklist  # noqa: E402


@pytest.fixture(autouse=True)
def reset_stores() -> None:
    """Empty every in-memory repository between tests."""
    user_repo._by_email.clear()
    user_repo._by_id.clear()
    category_repo._by_id.clear()
    course_repo._courses.clear()
    course_repo._modules.clear()
    course_repo._classes.clear()
    cart_repo._store.clear()
    enrollment_repo._by_id.clear()
    enrollment_repo._by_pair.clear()
    enrollment_repo._completions.clear()
    review_repo._by_id.clear()


@pytest.fixture(autouse=True)
def reset_rate_limiter() -> None:
    if hasattr(rate_limiter, "_buckets"):
        rate_limiter._buckets.clear()  # type: ignore[union-attr]


@pytest.fixture(autouse=True)
def reset_token_blacklist() -> None:
    if hasattr(token_blacklist, "_revoked"):
        token_blacklist._revoked.clear()  # type: ignore[union-attr]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


# ---------------------------------------------------------------------------
# Identity helpers
# ---------------------------------------------------------------------------


def mint_token(
    user_id: str,
    name: str = "Test User",
    role: Role = Role.STUDENT,
    ttl: timedelta | None = None,
) -> str:
    """Create a signed ES256 access token for testing."""
    return token_service.create_access_token(
        sub=user_id, name=name, role=role, ttl=ttl
    )


def make_user(role: Role = Role.STUDENT, name: str | None = None) -> User:
    """Persist a user (no usable password) and return it."""
    name = name or f"{role.value.title()} User"
    email = f"{role.value.lower()}-{len(user_repo._by_id)}@test.dev"
    user = User.new(name=name, email=email, password_hash="x", role=role)
    user_repo.add(user)
    return user


def token_for(user: User) -> str:
    return mint_token(str(user.id), user.name, user.role)


@pytest.fixture
def student() -> User:
    return make_user(Role.STUDENT, "Sam Student")


@pytest.fixture
def instructor() -> User:
    return make_user(Role.INSTRUCTOR, "Ivy Instructor")


@pytest.fixture
def admin() -> User:
    return make_user(Role.ADMIN, "Ada Admin")


# ---------------------------------------------------------------------------
# Catalog helpers
# ---------------------------------------------------------------------------


def make_category(name: str = "Programming") -> Category:
    existing = category_repo.get_by_name(name)
    if existing is not None:
        return existing
    category = Category.new(name=name)
    category_repo.add(category)
    return category


def make_course(
    instructor: User,
    *,
    title: str = "Python 101",
    price: str = "50.00",
    lessons: int = 0,
    is_active: bool = True,
) -> Course:
    """Persist a course with one module holding ``lessons`` classes."""
    course = Course.new(
        title=title,
        instructor_id=instructor.id,
        category_id=make_category().id,
        price=Decimal(price),
    )
    if not is_active:
        course = replace(course, is_active=False)
    course_repo.add(course)

    if lessons:
        module = CourseModule.new(
            course_id=course.id, order_index=0, title="Module 1"
        )
        course_repo.add_module(module)
        for i in range(lessons):
            course_repo.add_class(
                CourseClass.new(
                    module_id=module.id, order_index=i, title=f"Lesson {i}"
                )
            )
    return course


def lessons_of(course: Course) -> list[CourseClass]:
    return course_repo.list_course_classes(course.id)


def enroll(student: User, course: Course) -> Enrollment:
    """Write an enrollment straight into the ledger, bypassing checkout."""
    enrollment = Enrollment.new(student_id=student.id, course_id=course.id)
    enrollment_repo.add(enrollment)
    return enrollment
