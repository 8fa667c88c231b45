"""Request/response schemas for orders."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# Orders in these states can still be cancelled by their owner.
CANCELLABLE_STATUSES = frozenset({OrderStatus.PENDING.value, OrderStatus.CONFIRMED.value})


class OrderItemIn(BaseModel):
    product_id: int = Field(..., ge=1)
    quantity: int = Field(..., ge=1, le=1000)


class OrderCreate(BaseModel):
    items: list[OrderItemIn] = Field(..., min_length=1, max_length=100)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderItemOut(BaseModel):
    id: int
    product_id: int | None
    product_name: str | None = None
    price_at_time: float
    quantity: int


class OrderOut(BaseModel):
    id: int
    user_id: int
    username: str | None = None
    amount: float
    status: str
    items: list[OrderItemOut] = Field(default_factory=list)
    created_at: datetime | None = None
