from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from learnhub.api.courses import CoursePageOut, LimitParam, PageParam, course_page_out
from learnhub.api.dependencies import CatalogAdmin, MaybeUser
from learnhub.api.stores import catalog_service

router = APIRouter(prefix="/categories", tags=["categories"])


class CategoryIn(BaseModel):
    name: str


class CategoryOut(BaseModel):
    id: str
    name: str


@router.get("", response_model=list[CategoryOut])
def list_categories() -> list[CategoryOut]:
    return [
        CategoryOut(id=str(c.id), name=c.name)
        for c in catalog_service.list_categories()
    ]


@router.post("", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(payload: CategoryIn, _principal: CatalogAdmin) -> CategoryOut:
    category = catalog_service.create_category(payload.name)
    return CategoryOut(id=str(category.id), name=category.name)


@router.get("/{category_id}/courses", response_model=CoursePageOut)
def courses_in_category(
    category_id: UUID,
    principal: MaybeUser,
    page: PageParam = 1,
    limit: LimitParam = 10,
) -> CoursePageOut:
    result = catalog_service.courses_in_category(category_id, page, limit)
    return course_page_out(result, principal)


@router.put("/{category_id}", response_model=CategoryOut)
def rename_category(
    category_id: UUID, payload: CategoryIn, _principal: CatalogAdmin
) -> CategoryOut:
    category = catalog_service.rename_category(category_id, payload.name)
    return CategoryOut(id=str(category.id), name=category.name)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(category_id: UUID, _principal: CatalogAdmin) -> Response:
    catalog_service.delete_category(category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
