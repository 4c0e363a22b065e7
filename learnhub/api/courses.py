"""Course catalog endpoints: browse, author, and inspect enrollments.

Browsing uses optional auth: a signed-in caller sees ``in_cart`` and
``is_enrolled`` on each course, guests see both as false.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, Response, status
from pydantic import BaseModel, Field

from learnhub.api.dependencies import Author, CurrentUser, MaybeUser
from learnhub.api.stores import catalog_service
from learnhub.models.course import Course, CourseClass, CourseModule
from learnhub.models.page import Page
from learnhub.models.principal import Principal

router = APIRouter(prefix="/courses", tags=["courses"])

PageParam = Annotated[int, Query(ge=1)]
LimitParam = Annotated[int, Query(ge=1, le=100)]


# --- Request / Response schemas -------------------------------------------


class CourseOut(BaseModel):
    id: str
    title: str
    description: str
    price: float
    cover_image_url: str | None
    max_students: int | None
    instructor_id: str
    instructor_name: str
    category_id: str
    category_name: str | None
    is_active: bool
    created_at: datetime
    in_cart: bool = False
    is_enrolled: bool = False


class CoursePageOut(BaseModel):
    items: list[CourseOut]
    total: int
    page: int
    limit: int
    total_pages: int


class CourseIn(BaseModel):
    title: str
    category_id: UUID
    price: Decimal = Field(default=Decimal("0"), ge=0)
    description: str = ""
    cover_image_url: str | None = None
    max_students: int | None = Field(default=None, gt=0)


class CourseUpdateIn(BaseModel):
    title: str | None = None
    category_id: UUID | None = None
    price: Decimal | None = Field(default=None, ge=0)
    description: str | None = None
    cover_image_url: str | None = None
    max_students: int | None = Field(default=None, gt=0)
    is_active: bool | None = None


class ClassOut(BaseModel):
    id: str
    module_id: str
    order_index: int
    title: str
    description: str
    video_url: str | None
    material_url: str | None
    is_completed: bool = False


class ModuleOut(BaseModel):
    id: str
    course_id: str
    order_index: int
    title: str
    classes: list[ClassOut] = []


class ModuleIn(BaseModel):
    title: str
    order_index: int | None = Field(default=None, ge=0)


class EnrolledStudentOut(BaseModel):
    student_id: str
    name: str
    email: str
    progress: int
    enrolled_at: datetime
    certificate_id: str | None


# --- Serialization helpers ------------------------------------------------


def course_out(
    course: Course, *, in_cart: bool = False, is_enrolled: bool = False
) -> CourseOut:
    return CourseOut(
        id=str(course.id),
        title=course.title,
        description=course.description,
        price=float(course.price),
        cover_image_url=course.cover_image_url,
        max_students=course.max_students,
        instructor_id=str(course.instructor_id),
        instructor_name=catalog_service.instructor_name(course),
        category_id=str(course.category_id),
        category_name=catalog_service.category_name(course),
        is_active=course.is_active,
        created_at=course.created_at,
        in_cart=in_cart,
        is_enrolled=is_enrolled,
    )


def course_page_out(page: Page[Course], principal: Principal | None) -> CoursePageOut:
    flags = catalog_service.course_flags(principal, [c.id for c in page.items])
    return CoursePageOut(
        items=[
            course_out(
                c, in_cart=flags[c.id].in_cart, is_enrolled=flags[c.id].is_enrolled
            )
            for c in page.items
        ],
        total=page.total,
        page=page.page,
        limit=page.limit,
        total_pages=page.total_pages,
    )


def class_out(cls: CourseClass, *, is_completed: bool = False) -> ClassOut:
    return ClassOut(
        id=str(cls.id),
        module_id=str(cls.module_id),
        order_index=cls.order_index,
        title=cls.title,
        description=cls.description,
        video_url=cls.video_url,
        material_url=cls.material_url,
        is_completed=is_completed,
    )


def module_out(
    module: CourseModule, classes: list[tuple[CourseClass, bool]] | None = None
) -> ModuleOut:
    return ModuleOut(
        id=str(module.id),
        course_id=str(module.course_id),
        order_index=module.order_index,
        title=module.title,
        classes=[class_out(c, is_completed=done) for c, done in classes or []],
    )


# --- Browse ----------------------------------------------------------------


@router.get("", response_model=CoursePageOut)
def list_courses(
    principal: MaybeUser,
    page: PageParam = 1,
    limit: LimitParam = 10,
    search: str | None = None,
    category_id: UUID | None = None,
) -> CoursePageOut:
    result = catalog_service.list_courses(
        page, limit, search=search, category_id=category_id
    )
    return course_page_out(result, principal)


@router.get("/{course_id}", response_model=CourseOut)
def get_course(course_id: UUID, principal: MaybeUser) -> CourseOut:
    course = catalog_service.get_course(course_id, principal)
    flags = catalog_service.course_flags(principal, [course.id])[course.id]
    return course_out(course, in_cart=flags.in_cart, is_enrolled=flags.is_enrolled)


@router.get("/{course_id}/modules", response_model=list[ModuleOut])
def list_modules(course_id: UUID, principal: MaybeUser) -> list[ModuleOut]:
    return [
        module_out(module, classes)
        for module, classes in catalog_service.list_modules(course_id, principal)
    ]


# --- Authoring -------------------------------------------------------------


@router.post("", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
def create_course(payload: CourseIn, principal: Author) -> CourseOut:
    course = catalog_service.create_course(
        principal,
        title=payload.title,
        category_id=payload.category_id,
        price=payload.price,
        description=payload.description,
        cover_image_url=payload.cover_image_url,
        max_students=payload.max_students,
    )
    return course_out(course)


@router.put("/{course_id}", response_model=CourseOut)
def update_course(
    course_id: UUID, payload: CourseUpdateIn, principal: Author
) -> CourseOut:
    course = catalog_service.update_course(
        principal, course_id, payload.model_dump(exclude_unset=True)
    )
    return course_out(course)


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course(course_id: UUID, principal: Author) -> Response:
    catalog_service.delete_course(principal, course_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{course_id}/students", response_model=list[EnrolledStudentOut])
def list_students(course_id: UUID, principal: CurrentUser) -> list[EnrolledStudentOut]:
    return [
        EnrolledStudentOut(
            student_id=str(row.user.id),
            name=row.user.name,
            email=row.user.email,
            progress=row.enrollment.progress,
            enrolled_at=row.enrollment.enrolled_at,
            certificate_id=row.enrollment.certificate_id,
        )
        for row in catalog_service.list_students(principal, course_id)
    ]


@router.post(
    "/{course_id}/modules",
    response_model=ModuleOut,
    status_code=status.HTTP_201_CREATED,
)
def create_module(course_id: UUID, payload: ModuleIn, principal: Author) -> ModuleOut:
    module = catalog_service.create_module(
        principal, course_id, title=payload.title, order_index=payload.order_index
    )
    return module_out(module)
