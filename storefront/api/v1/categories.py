"""Category endpoints. Reads are public; writes go through the guard."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.auth.guard import AuthorizedContext, Guard, owner_of
from storefront.auth.roles import Role
from storefront.core.database import get_db
from storefront.models import Category
from storefront.schemas.catalog import CategoryCreate, CategoryOut, CategoryUpdate
from storefront.schemas.common import ApiResponse
from storefront.services.catalog import (
    CatalogError,
    category_to_out,
    create_category,
    delete_category,
    list_categories,
    update_category,
)

router = APIRouter()

can_create = Guard(capability="manage_categories")
can_manage = Guard(
    {Role.ADMIN, Role.MODERATOR},
    ownership=owner_of(Category, "Category", id_param="category_id"),
)


def _get_category(db: Session, category_id: int) -> Category:
    category = db.get(Category, category_id)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.get("", response_model=ApiResponse[list[CategoryOut]])
def get_categories(db: Annotated[Session, Depends(get_db)]) -> ApiResponse[list[CategoryOut]]:
    categories = [category_to_out(c) for c in list_categories(db)]
    return ApiResponse(data=categories, count=len(categories))


@router.get("/{category_id}", response_model=ApiResponse[CategoryOut])
def get_category(
    category_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[CategoryOut]:
    return ApiResponse(data=category_to_out(_get_category(db, category_id)))


@router.post("", response_model=ApiResponse[CategoryOut], status_code=201)
def post_category(
    body: CategoryCreate,
    ctx: Annotated[AuthorizedContext, Depends(can_create)],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[CategoryOut]:
    try:
        category = create_category(db, body, created_by=ctx.principal.id)
    except CatalogError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    return ApiResponse(message="Category created successfully", data=category_to_out(category))


@router.put("/{category_id}", response_model=ApiResponse[CategoryOut])
def put_category(
    category_id: int,
    body: CategoryUpdate,
    _ctx: Annotated[AuthorizedContext, Depends(can_manage)],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[CategoryOut]:
    category = _get_category(db, category_id)
    try:
        category = update_category(db, category, body)
    except CatalogError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    return ApiResponse(message="Category updated successfully", data=category_to_out(category))


@router.delete("/{category_id}", response_model=ApiResponse[None])
def remove_category(
    category_id: int,
    _ctx: Annotated[AuthorizedContext, Depends(can_manage)],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[None]:
    """Delete a category. Refused while any product still belongs to it."""
    try:
        delete_category(db, _get_category(db, category_id))
    except CatalogError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    return ApiResponse(message="Category deleted successfully")
