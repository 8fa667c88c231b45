"""Order placement, status changes and cancellation."""

import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from storefront.models import Order, OrderItem, Product
from storefront.schemas.orders import (
    CANCELLABLE_STATUSES,
    OrderItemIn,
    OrderItemOut,
    OrderOut,
    OrderStatus,
)

logger = logging.getLogger(__name__)


class OrderError(Exception):
    """Raised when an order cannot be placed or changed (unknown product, stock, state)."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def order_to_out(order: Order) -> OrderOut:
    return OrderOut(
        id=order.id,
        user_id=order.user_id,
        username=order.user.username if order.user else None,
        amount=order.amount,
        status=order.status,
        items=[
            OrderItemOut(
                id=item.id,
                product_id=item.product_id,
                product_name=item.product.name if item.product else None,
                price_at_time=item.price_at_time,
                quantity=item.quantity,
            )
            for item in order.items
        ],
        created_at=order.created_at,
    )


def list_orders(
    session: Session,
    page: int,
    limit: int,
    user_id: int | None = None,
    status: str | None = None,
) -> tuple[list[Order], int]:
    """One page of orders (newest first), optionally for one user or status."""
    query = session.query(Order)
    if user_id is not None:
        query = query.filter(Order.user_id == user_id)
    if status is not None:
        query = query.filter(Order.status == status)
    total = query.count()
    orders = (
        query.order_by(Order.created_at.desc(), Order.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return orders, total


def place_order(session: Session, user_id: int, items: list[OrderItemIn]) -> Order:
    """
    Create a pending order, snapshot unit prices and decrement stock.

    Quantities for the same product are summed before the stock check.
    Nothing is written unless every line is valid.
    """
    wanted: dict[int, int] = {}
    for item in items:
        wanted[item.product_id] = wanted.get(item.product_id, 0) + item.quantity

    products: dict[int, Product] = {}
    for product_id, quantity in wanted.items():
        product = session.get(Product, product_id)
        if product is None:
            raise OrderError(f"Product with ID {product_id} not found")
        if product.stock_quantity < quantity:
            raise OrderError(f"Not enough stock for product: {product.name}")
        products[product_id] = product

    order = Order(user_id=user_id, status=OrderStatus.PENDING.value, amount=Decimal("0"))
    total = Decimal("0")
    for item in items:
        product = products[item.product_id]
        total += Decimal(str(product.price)) * item.quantity
        order.items.append(
            OrderItem(product_id=product.id, price_at_time=product.price, quantity=item.quantity)
        )
    order.amount = total.quantize(Decimal("0.01"))
    for product_id, quantity in wanted.items():
        products[product_id].stock_quantity -= quantity

    session.add(order)
    session.commit()
    session.refresh(order)
    logger.info(
        "Order placed",
        extra={"order_id": order.id, "user_id": user_id, "item_count": len(items)},
    )
    return order


def update_status(session: Session, order: Order, status: OrderStatus) -> Order:
    """
    Set any valid status, keeping stock in step with the order.

    Moving into 'cancelled' returns stock like cancel_order; moving out of
    'cancelled' takes it out again and fails if there is not enough left.
    """
    was_cancelled = order.status == OrderStatus.CANCELLED.value
    if status is OrderStatus.CANCELLED and not was_cancelled:
        _restock(order)
    elif status is not OrderStatus.CANCELLED and was_cancelled:
        _reserve_stock(order)
    order.status = status.value
    session.commit()
    session.refresh(order)
    return order


def cancel_order(session: Session, order: Order) -> Order:
    """Cancel a pending or confirmed order and return its items to stock."""
    if order.status not in CANCELLABLE_STATUSES:
        raise OrderError(f"Order cannot be cancelled in status '{order.status}'")
    _restock(order)
    order.status = OrderStatus.CANCELLED.value
    session.commit()
    session.refresh(order)
    return order


def _restock(order: Order) -> None:
    for item in order.items:
        if item.product is not None:
            item.product.stock_quantity += item.quantity


def _reserve_stock(order: Order) -> None:
    wanted: dict[int, int] = {}
    products: dict[int, Product] = {}
    for item in order.items:
        if item.product is None:
            continue
        products[item.product_id] = item.product
        wanted[item.product_id] = wanted.get(item.product_id, 0) + item.quantity
    for product_id, quantity in wanted.items():
        if products[product_id].stock_quantity < quantity:
            raise OrderError(f"Not enough stock for product: {products[product_id].name}")
    for product_id, quantity in wanted.items():
        products[product_id].stock_quantity -= quantity
