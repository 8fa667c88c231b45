"""Pydantic request/response schemas."""

from storefront.schemas.auth import (
    LoginData,
    LoginRequest,
    RegisterRequest,
    TokenData,
    UserOut,
)
from storefront.schemas.catalog import (
    CategoryCreate,
    CategoryOut,
    CategoryUpdate,
    ProductCreate,
    ProductOut,
    ProductUpdate,
)
from storefront.schemas.common import ApiResponse, Pagination
from storefront.schemas.health import HealthResponse
from storefront.schemas.orders import OrderCreate, OrderOut, OrderStatus
from storefront.schemas.reviews import ProductRating, ReviewCreate, ReviewOut, ReviewUpdate

__all__ = [
    "ApiResponse",
    "CategoryCreate",
    "CategoryOut",
    "CategoryUpdate",
    "HealthResponse",
    "LoginData",
    "LoginRequest",
    "OrderCreate",
    "OrderOut",
    "OrderStatus",
    "Pagination",
    "ProductCreate",
    "ProductOut",
    "ProductRating",
    "ProductUpdate",
    "RegisterRequest",
    "ReviewCreate",
    "ReviewOut",
    "ReviewUpdate",
    "TokenData",
    "UserOut",
]
