"""Cart, checkout and direct enrollment (students only)."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from learnhub.api.dependencies import Student
from learnhub.api.stores import cart_service, checkout_service
from learnhub.models.enrollment import Enrollment

router = APIRouter(tags=["cart"])


class CartItemOut(BaseModel):
    course_id: str
    title: str
    price: float
    cover_image_url: str | None
    instructor_name: str
    added_at: datetime


class CartOut(BaseModel):
    items: list[CartItemOut]
    item_count: int
    total_price: float


class CartAddOut(BaseModel):
    course_id: str
    added: bool


class EnrollmentOut(BaseModel):
    id: str
    student_id: str
    course_id: str
    progress: int
    enrolled_at: datetime


class CheckoutOut(BaseModel):
    enrolled_count: int
    enrollments: list[EnrollmentOut]


def enrollment_out(e: Enrollment) -> EnrollmentOut:
    return EnrollmentOut(
        id=str(e.id),
        student_id=str(e.student_id),
        course_id=str(e.course_id),
        progress=e.progress,
        enrolled_at=e.enrolled_at,
    )


# --- cart ------------------------------------------------------------------


@router.get("/students/cart", response_model=CartOut)
def view_cart(principal: Student) -> CartOut:
    cart = cart_service.view(UUID(principal.user_id))
    return CartOut(
        items=[
            CartItemOut(
                course_id=str(item.course.id),
                title=item.course.title,
                price=float(item.course.price),
                cover_image_url=item.course.cover_image_url,
                instructor_name=item.instructor_name,
                added_at=item.added_at,
            )
            for item in cart.items
        ],
        item_count=cart.item_count,
        total_price=float(cart.total_price),
    )


@router.post(
    "/students/cart/{course_id}",
    response_model=CartAddOut,
    status_code=status.HTTP_201_CREATED,
)
def add_to_cart(
    course_id: UUID, principal: Student, response: Response
) -> CartAddOut:
    added = cart_service.add(UUID(principal.user_id), course_id)
    if not added:
        response.status_code = status.HTTP_200_OK
    return CartAddOut(course_id=str(course_id), added=added)


@router.delete("/students/cart/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_from_cart(course_id: UUID, principal: Student) -> Response:
    cart_service.remove(UUID(principal.user_id), course_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- enrollment ------------------------------------------------------------


@router.post("/checkout", response_model=CheckoutOut)
def checkout(principal: Student) -> CheckoutOut:
    created = checkout_service.checkout(UUID(principal.user_id))
    return CheckoutOut(
        enrolled_count=len(created),
        enrollments=[enrollment_out(e) for e in created],
    )


@router.post(
    "/students/{course_id}/enroll",
    response_model=EnrollmentOut,
    status_code=status.HTTP_201_CREATED,
)
def enroll(course_id: UUID, principal: Student) -> EnrollmentOut:
    return enrollment_out(checkout_service.enroll(UUID(principal.user_id), course_id))
