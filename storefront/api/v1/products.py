"""Product endpoints: public catalog browsing and guarded inventory management."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.api.v1.params import PageParams, page_params
from storefront.auth.guard import AuthorizedContext, Guard, owner_of
from storefront.auth.roles import Role
from storefront.core.database import get_db
from storefront.models import Category, Product
from storefront.schemas.catalog import ProductCreate, ProductOut, ProductUpdate
from storefront.schemas.common import ApiResponse, Pagination
from storefront.services.catalog import (
    CatalogError,
    create_product,
    delete_product,
    list_products,
    product_to_out,
    update_product,
)

logger = logging.getLogger(__name__)
router = APIRouter()

product_owner = owner_of(Product, "Product", id_param="product_id")

can_create = Guard({Role.ADMIN, Role.MODERATOR, Role.SELLER})
can_edit = Guard({Role.ADMIN, Role.MODERATOR}, ownership=product_owner)
can_delete = Guard({Role.ADMIN}, ownership=product_owner)


def _get_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


def _page(
    db: Session,
    paging: PageParams,
    category_id: int | None = None,
    search: str | None = None,
) -> ApiResponse[list[ProductOut]]:
    products, total = list_products(db, paging.page, paging.limit, category_id, search)
    items = [product_to_out(p) for p in products]
    return ApiResponse(
        data=items,
        count=len(items),
        pagination=Pagination.build(paging.page, paging.limit, total),
    )


@router.get("", response_model=ApiResponse[list[ProductOut]])
def get_products(
    db: Annotated[Session, Depends(get_db)],
    paging: Annotated[PageParams, Depends(page_params)],
    category_id: Annotated[int | None, Query(ge=1)] = None,
    search: Annotated[str | None, Query(max_length=255)] = None,
) -> ApiResponse[list[ProductOut]]:
    """Newest first. Optional filters: category_id, and search over name and description."""
    return _page(db, paging, category_id, search)


@router.get("/category/{category_id}", response_model=ApiResponse[list[ProductOut]])
def get_products_by_category(
    category_id: int,
    db: Annotated[Session, Depends(get_db)],
    paging: Annotated[PageParams, Depends(page_params)],
) -> ApiResponse[list[ProductOut]]:
    if db.get(Category, category_id) is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return _page(db, paging, category_id=category_id)


@router.get("/{product_id}", response_model=ApiResponse[ProductOut])
def get_product(
    product_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[ProductOut]:
    return ApiResponse(data=product_to_out(_get_product(db, product_id)))


@router.post("", response_model=ApiResponse[ProductOut], status_code=201)
def post_product(
    body: ProductCreate,
    ctx: Annotated[AuthorizedContext, Depends(can_create)],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[ProductOut]:
    """Create a product owned by the caller."""
    try:
        product = create_product(db, body, created_by=ctx.principal.id)
    except CatalogError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    logger.info("Product created", extra={"product_id": product.id, "user_id": ctx.principal.id})
    return ApiResponse(message="Product created successfully", data=product_to_out(product))


@router.put("/{product_id}", response_model=ApiResponse[ProductOut])
def put_product(
    product_id: int,
    body: ProductUpdate,
    _ctx: Annotated[AuthorizedContext, Depends(can_edit)],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[ProductOut]:
    product = _get_product(db, product_id)
    try:
        product = update_product(db, product, body)
    except CatalogError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    return ApiResponse(message="Product updated successfully", data=product_to_out(product))


@router.delete("/{product_id}", response_model=ApiResponse[None])
def remove_product(
    product_id: int,
    ctx: Annotated[AuthorizedContext, Depends(can_delete)],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[None]:
    delete_product(db, _get_product(db, product_id))
    logger.info("Product deleted", extra={"product_id": product_id, "user_id": ctx.principal.id})
    return ApiResponse(message="Product deleted successfully")
