from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from learnhub.api.courses import LimitParam, PageParam
from learnhub.api.dependencies import CurrentUser, Reviewer
from learnhub.api.stores import review_service
from learnhub.models.principal import Principal
from learnhub.models.review import Review

router = APIRouter(tags=["reviews"])


class ReviewIn(BaseModel):
    course_id: UUID
    # Range and integer checks happen in the service so every client gets
    # the same "Rating must be..." error
    rating: int | float
    comment: str | None = None


class ReviewOut(BaseModel):
    id: str
    course_id: str
    student_id: str
    student_name: str
    rating: int
    comment: str | None
    created_at: datetime
    updated_at: datetime


class CourseReviewsOut(BaseModel):
    items: list[ReviewOut]
    total: int
    average_rating: float
    page: int
    limit: int
    total_pages: int


def _review_out(review: Review, student_name: str) -> ReviewOut:
    return ReviewOut(
        id=str(review.id),
        course_id=str(review.course_id),
        student_id=str(review.student_id),
        student_name=student_name,
        rating=review.rating,
        comment=review.comment,
        created_at=review.created_at,
        updated_at=review.updated_at,
    )


def _upsert(payload: ReviewIn, principal: Principal, response: Response) -> ReviewOut:
    review, created = review_service.upsert(
        UUID(principal.user_id), payload.course_id, payload.rating, payload.comment
    )
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return _review_out(review, principal.name)


@router.post("/reviews", response_model=ReviewOut, status_code=status.HTTP_201_CREATED)
def submit_review(
    payload: ReviewIn, principal: Reviewer, response: Response
) -> ReviewOut:
    return _upsert(payload, principal, response)


@router.put("/reviews", response_model=ReviewOut)
def edit_review(
    payload: ReviewIn, principal: Reviewer, response: Response
) -> ReviewOut:
    return _upsert(payload, principal, response)


@router.delete("/reviews/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_review(review_id: UUID, principal: CurrentUser) -> Response:
    review_service.delete(principal, review_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/courses/{course_id}/reviews", response_model=CourseReviewsOut)
def course_reviews(
    course_id: UUID, page: PageParam = 1, limit: LimitParam = 10
) -> CourseReviewsOut:
    result = review_service.list_for_course(course_id, page, limit)
    return CourseReviewsOut(
        items=[_review_out(r, name) for r, name in result.page.items],
        total=result.total,
        average_rating=result.average_rating,
        page=result.page.page,
        limit=result.page.limit,
        total_pages=result.page.total_pages,
    )
