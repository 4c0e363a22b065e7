"""Domain error taxonomy.

Services raise these; the exception handler installed in learnhub.main
renders any DomainError as ``{"error": message}`` with its status code.
Repositories never raise them directly; they raise DuplicateKeyError and
let the calling service decide what the collision means.
"""

from __future__ import annotations

from fastapi import status


class DomainError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request could not be processed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


# --- 401 / 403 ---


class UnauthenticatedError(DomainError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class ForbiddenError(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Insufficient permissions"


# --- 404 ---


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


# --- 409 ---


class ConflictError(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class AlreadyEnrolledError(ConflictError):
    default_message = "Student is already enrolled in this course"


class CourseHasEnrollmentsError(ConflictError):
    default_message = (
        "Course has enrollments and cannot be deleted; deactivate it instead"
    )


class CategoryInUseError(ConflictError):
    default_message = "Category still has courses and cannot be deleted"


# --- 422 ---


class InvalidInputError(DomainError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Invalid input"


class InvalidRatingError(InvalidInputError):
    default_message = "Rating must be an integer between 1 and 5"


# --- 400 ---


class PreconditionFailedError(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Precondition failed"


class EmptyCartError(PreconditionFailedError):
    default_message = "Cart is empty"


class NotEnrolledError(PreconditionFailedError):
    default_message = "Student is not enrolled in this course"


class CourseNotCompleteError(PreconditionFailedError):
    default_message = "Course not completed (progress < 100%)"


# --- storage ---


class DuplicateKeyError(ValueError):
    """A repository refused an insert that would violate a uniqueness rule."""
