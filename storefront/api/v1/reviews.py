"""Review endpoints: public listing and rating, guarded writes."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.api.v1.params import PageParams, page_params
from storefront.auth.guard import AuthorizedContext, Guard, owner_of
from storefront.auth.roles import Role
from storefront.core.database import get_db
from storefront.models import Product, Review
from storefront.schemas.common import ApiResponse, Pagination
from storefront.schemas.reviews import ProductRating, ReviewCreate, ReviewOut, ReviewUpdate
from storefront.services.reviews import (
    create_review,
    delete_review,
    list_product_reviews,
    product_rating,
    review_to_out,
    update_review,
)

router = APIRouter()

review_owner = owner_of(Review, "Review", owner_attr="user_id", id_param="review_id")

signed_in = Guard()
can_edit = Guard({Role.ADMIN}, ownership=review_owner)
can_delete = Guard({Role.ADMIN, Role.MODERATOR}, ownership=review_owner)


def _require_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


def _get_review(db: Session, review_id: int) -> Review:
    review = db.get(Review, review_id)
    if review is None:
        raise HTTPException(status_code=404, detail="Review not found")
    return review


@router.get("/product/{product_id}", response_model=ApiResponse[list[ReviewOut]])
def get_product_reviews(
    product_id: int,
    db: Annotated[Session, Depends(get_db)],
    paging: Annotated[PageParams, Depends(page_params)],
) -> ApiResponse[list[ReviewOut]]:
    _require_product(db, product_id)
    reviews, total = list_product_reviews(db, product_id, paging.page, paging.limit)
    items = [review_to_out(r) for r in reviews]
    return ApiResponse(
        data=items,
        count=len(items),
        pagination=Pagination.build(paging.page, paging.limit, total),
    )


@router.get("/product/{product_id}/rating", response_model=ApiResponse[ProductRating])
def get_product_rating(
    product_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[ProductRating]:
    """Average rating rounded to two decimals; null when the product has no reviews."""
    _require_product(db, product_id)
    return ApiResponse(data=product_rating(db, product_id))


@router.post("", response_model=ApiResponse[ReviewOut], status_code=201)
def post_review(
    body: ReviewCreate,
    ctx: Annotated[AuthorizedContext, Depends(signed_in)],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[ReviewOut]:
    _require_product(db, body.product_id)
    review = create_review(db, body.product_id, ctx.principal.id, body.text, body.rating)
    return ApiResponse(message="Review created successfully", data=review_to_out(review))


@router.put("/{review_id}", response_model=ApiResponse[ReviewOut])
def put_review(
    review_id: int,
    body: ReviewUpdate,
    _ctx: Annotated[AuthorizedContext, Depends(can_edit)],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[ReviewOut]:
    review = update_review(db, _get_review(db, review_id), body)
    return ApiResponse(message="Review updated successfully", data=review_to_out(review))


@router.delete("/{review_id}", response_model=ApiResponse[None])
def remove_review(
    review_id: int,
    _ctx: Annotated[AuthorizedContext, Depends(can_delete)],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[None]:
    delete_review(db, _get_review(db, review_id))
    return ApiResponse(message="Review deleted successfully")
