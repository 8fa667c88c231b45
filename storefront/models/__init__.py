"""SQLAlchemy ORM models."""

from storefront.models.base import Base
from storefront.models.catalog import Category, Product
from storefront.models.order import Order, OrderItem
from storefront.models.review import Review
from storefront.models.user import User

__all__ = ["Base", "Category", "Order", "OrderItem", "Product", "Review", "User"]
