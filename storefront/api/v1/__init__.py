"""API v1 routes."""

from fastapi import APIRouter

from storefront.api.v1 import (
    auth,
    categories,
    health,
    orders,
    permissions,
    products,
    reviews,
    users,
)

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(permissions.router, prefix="/permissions", tags=["permissions"])
router.include_router(categories.router, prefix="/categories", tags=["categories"])
router.include_router(products.router, prefix="/products", tags=["products"])
router.include_router(orders.router, prefix="/orders", tags=["orders"])
router.include_router(reviews.router, prefix="/reviews", tags=["reviews"])
