"""Order endpoints: placing, viewing, status management and cancellation."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.api.v1.params import PageParams, page_params
from storefront.auth.guard import AuthorizedContext, Guard, owner_of
from storefront.auth.roles import Role
from storefront.core.database import get_db
from storefront.models import Order
from storefront.schemas.common import ApiResponse, Pagination
from storefront.schemas.orders import OrderCreate, OrderOut, OrderStatus, OrderStatusUpdate
from storefront.services.orders import (
    OrderError,
    cancel_order,
    list_orders,
    order_to_out,
    place_order,
    update_status,
)

router = APIRouter()

order_owner = owner_of(Order, "Order", owner_attr="user_id", id_param="order_id")

# Reading and cancelling own orders works before email verification; placing does not.
any_role = Guard(require_verified=False)
verified = Guard()
staff_only = Guard({Role.ADMIN, Role.MODERATOR})
owner_or_staff = Guard({Role.ADMIN, Role.MODERATOR}, require_verified=False, ownership=order_owner)


def _get_order(db: Session, order_id: int) -> Order:
    order = db.get(Order, order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


def _page(
    db: Session,
    paging: PageParams,
    user_id: int | None = None,
    status: OrderStatus | None = None,
) -> ApiResponse[list[OrderOut]]:
    orders, total = list_orders(
        db, paging.page, paging.limit, user_id=user_id, status=status.value if status else None
    )
    items = [order_to_out(o) for o in orders]
    return ApiResponse(
        data=items,
        count=len(items),
        pagination=Pagination.build(paging.page, paging.limit, total),
    )


# Declared before /{order_id} so the literal path wins.
@router.get("/my-orders", response_model=ApiResponse[list[OrderOut]])
def get_my_orders(
    ctx: Annotated[AuthorizedContext, Depends(any_role)],
    db: Annotated[Session, Depends(get_db)],
    paging: Annotated[PageParams, Depends(page_params)],
) -> ApiResponse[list[OrderOut]]:
    return _page(db, paging, user_id=ctx.principal.id)


@router.get("", response_model=ApiResponse[list[OrderOut]])
def get_orders(
    _ctx: Annotated[AuthorizedContext, Depends(staff_only)],
    db: Annotated[Session, Depends(get_db)],
    paging: Annotated[PageParams, Depends(page_params)],
    status: Annotated[OrderStatus | None, Query()] = None,
) -> ApiResponse[list[OrderOut]]:
    """All orders, newest first, optionally filtered by status."""
    return _page(db, paging, status=status)


@router.get("/{order_id}", response_model=ApiResponse[OrderOut])
def get_order(
    order_id: int,
    _ctx: Annotated[AuthorizedContext, Depends(owner_or_staff)],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[OrderOut]:
    return ApiResponse(data=order_to_out(_get_order(db, order_id)))


@router.post("", response_model=ApiResponse[OrderOut], status_code=201)
def post_order(
    body: OrderCreate,
    ctx: Annotated[AuthorizedContext, Depends(verified)],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[OrderOut]:
    """
    Place an order for the caller.

    Every product must exist and have enough stock; the unit price is
    recorded on each line and stock is decremented.
    """
    try:
        order = place_order(db, ctx.principal.id, body.items)
    except OrderError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    return ApiResponse(message="Order created successfully", data=order_to_out(order))


@router.put("/{order_id}/status", response_model=ApiResponse[OrderOut])
def put_order_status(
    order_id: int,
    body: OrderStatusUpdate,
    _ctx: Annotated[AuthorizedContext, Depends(staff_only)],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[OrderOut]:
    """Staff set any status; leaving 'cancelled' needs the stock to still be there."""
    try:
        order = update_status(db, _get_order(db, order_id), body.status)
    except OrderError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    return ApiResponse(message="Order status updated successfully", data=order_to_out(order))


@router.patch("/{order_id}/cancel", response_model=ApiResponse[OrderOut])
def patch_cancel_order(
    order_id: int,
    _ctx: Annotated[AuthorizedContext, Depends(owner_or_staff)],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[OrderOut]:
    """Cancel a pending or confirmed order; its items go back into stock."""
    try:
        order = cancel_order(db, _get_order(db, order_id))
    except OrderError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    return ApiResponse(message="Order cancelled successfully", data=order_to_out(order))
