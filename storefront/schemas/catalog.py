"""Request/response schemas for categories and products."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(default="", max_length=5000)


class CategoryUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=5000)


class CategoryOut(BaseModel):
    id: int
    name: str
    description: str
    created_by: int | None = None
    created_by_username: str | None = None
    created_at: datetime | None = None


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(default="", max_length=5000)
    price: Decimal = Field(
        ..., ge=0, max_digits=10, decimal_places=2, description="Unit price; must be non-negative"
    )
    category_id: int = Field(..., ge=1)
    stock_quantity: int = Field(default=0, ge=0)


class ProductUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=5000)
    price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    category_id: int | None = Field(default=None, ge=1)
    stock_quantity: int | None = Field(default=None, ge=0)


class ProductOut(BaseModel):
    id: int
    name: str
    description: str
    price: float
    category_id: int
    category_name: str | None = None
    stock_quantity: int
    created_by: int | None = None
    created_by_username: str | None = None
    created_at: datetime | None = None
