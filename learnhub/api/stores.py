"""Process-wide repository and service singletons.

Every router imports its collaborators from here, so there is exactly one
instance of each store per process.  Tests reset the stores between cases
through their private containers (see tests/conftest.py).
"""

from __future__ import annotations

import logging
from decimal import Decimal

from learnhub.core.config import SETTINGS
from learnhub.models.course import Category, Course
from learnhub.models.principal import Role
from learnhub.models.user import User
from learnhub.repos.cart_repo import InMemoryCartRepo
from learnhub.repos.category_repo import InMemoryCategoryRepo
from learnhub.repos.course_repo import InMemoryCourseRepo
from learnhub.repos.enrollment_repo import InMemoryEnrollmentRepo
from learnhub.repos.review_repo import InMemoryReviewRepo
from learnhub.repos.user_repo import InMemoryUserRepo
from learnhub.services import auth_service
from learnhub.services.cart_service import CartService
from learnhub.services.catalog_service import CatalogService
from learnhub.services.certificate_service import CertificateService
from learnhub.services.checkout_service import CheckoutService
from learnhub.services.progress_service import ProgressService
from learnhub.services.review_service import ReviewService

logger = logging.getLogger(__name__)

# --- repositories ---

user_repo = InMemoryUserRepo()
category_repo = InMemoryCategoryRepo()
course_repo = InMemoryCourseRepo()
cart_repo = InMemoryCartRepo()
enrollment_repo = InMemoryEnrollmentRepo()
review_repo = InMemoryReviewRepo()

# --- services ---

catalog_service = CatalogService(
    category_repo, course_repo, cart_repo, enrollment_repo, user_repo
)
cart_service = CartService(cart_repo, course_repo, enrollment_repo, user_repo)
checkout_service = CheckoutService(cart_repo, course_repo, enrollment_repo)
certificate_service = CertificateService(
    course_repo, enrollment_repo, user_repo, public_base_url=SETTINGS.public_base_url
)
progress_service = ProgressService(
    course_repo, enrollment_repo, user_repo, certificate_service
)
review_service = ReviewService(review_repo, course_repo, enrollment_repo, user_repo)


def seed_dev_data() -> None:
    """Seed an admin, an instructor, a category and a sample course.

    Instructors and admins cannot self-register, so local development needs
    at least one of each.  Skipped when the admin already exists.
    """
    if user_repo.get_by_email("admin@learnhub.dev") is not None:
        return

    admin = User.new(
        name="Admin",
        email="admin@learnhub.dev",
        password_hash=auth_service.hash_password("admin-password"),
        role=Role.ADMIN,
    )
    instructor = User.new(
        name="Ada Instructor",
        email="instructor@learnhub.dev",
        password_hash=auth_service.hash_password("instructor-password"),
        role=Role.INSTRUCTOR,
    )
    user_repo.add(admin)
    user_repo.add(instructor)

    category = Category.new(name="Programming")
    category_repo.add(category)
    course_repo.add(
        Course.new(
            title="Python Fundamentals",
            instructor_id=instructor.id,
            category_id=category.id,
            price=Decimal("49.90"),
            description="Variables, control flow, functions and modules.",
        )
    )
    logger.info("Seeded dev data: admin, instructor, 1 category, 1 course")


if SETTINGS.is_dev:
    seed_dev_data()
