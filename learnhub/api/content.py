"""Module and class authoring, plus lesson lookup.

Every write requires the AUTHOR capability and ownership of the parent
course (admins may edit any course).
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Response, status
from pydantic import BaseModel, Field

from learnhub.api.courses import ClassOut, ModuleOut, class_out, module_out
from learnhub.api.dependencies import Author, CurrentUser
from learnhub.api.stores import catalog_service

router = APIRouter(tags=["content"])


class ModuleUpdateIn(BaseModel):
    title: str | None = None
    order_index: int | None = Field(default=None, ge=0)


class ClassIn(BaseModel):
    title: str
    description: str = ""
    video_url: str | None = None
    material_url: str | None = None
    order_index: int | None = Field(default=None, ge=0)


class ClassUpdateIn(BaseModel):
    title: str | None = None
    description: str | None = None
    video_url: str | None = None
    material_url: str | None = None
    order_index: int | None = Field(default=None, ge=0)


class ClassDetailOut(ClassOut):
    course_id: str


# --- modules ---------------------------------------------------------------


@router.put("/modules/{module_id}", response_model=ModuleOut)
def update_module(
    module_id: UUID, payload: ModuleUpdateIn, principal: Author
) -> ModuleOut:
    module = catalog_service.update_module(
        principal, module_id, title=payload.title, order_index=payload.order_index
    )
    return module_out(module)


@router.delete("/modules/{module_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_module(module_id: UUID, principal: Author) -> Response:
    catalog_service.delete_module(principal, module_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/modules/{module_id}/classes",
    response_model=ClassOut,
    status_code=status.HTTP_201_CREATED,
)
def create_class(module_id: UUID, payload: ClassIn, principal: Author) -> ClassOut:
    cls = catalog_service.create_class(
        principal,
        module_id,
        title=payload.title,
        description=payload.description,
        video_url=payload.video_url,
        material_url=payload.material_url,
        order_index=payload.order_index,
    )
    return class_out(cls)


# --- classes ---------------------------------------------------------------


@router.get("/classes/{class_id}", response_model=ClassDetailOut)
def get_class(class_id: UUID, _principal: CurrentUser) -> ClassDetailOut:
    cls, module = catalog_service.get_class(class_id)
    return ClassDetailOut(
        **class_out(cls).model_dump(), course_id=str(module.course_id)
    )


@router.put("/classes/{class_id}", response_model=ClassOut)
def update_class(
    class_id: UUID, payload: ClassUpdateIn, principal: Author
) -> ClassOut:
    cls = catalog_service.update_class(
        principal, class_id, payload.model_dump(exclude_unset=True)
    )
    return class_out(cls)


@router.delete("/classes/{class_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_class(class_id: UUID, principal: Author) -> Response:
    catalog_service.delete_class(principal, class_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
