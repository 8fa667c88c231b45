"""Catalog queries and mutations: categories and products."""

from sqlalchemy import or_
from sqlalchemy.orm import Session

from storefront.models import Category, Product
from storefront.schemas.catalog import (
    CategoryCreate,
    CategoryOut,
    CategoryUpdate,
    ProductCreate,
    ProductOut,
    ProductUpdate,
)


class CatalogError(Exception):
    """Raised when a catalog mutation is rejected (missing category, duplicate name, ...)."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def category_to_out(category: Category) -> CategoryOut:
    return CategoryOut(
        id=category.id,
        name=category.name,
        description=category.description or "",
        created_by=category.created_by,
        created_by_username=category.creator.username if category.creator else None,
        created_at=category.created_at,
    )


def product_to_out(product: Product) -> ProductOut:
    return ProductOut(
        id=product.id,
        name=product.name,
        description=product.description or "",
        price=product.price,
        category_id=product.category_id,
        category_name=product.category.name if product.category else None,
        stock_quantity=product.stock_quantity,
        created_by=product.created_by,
        created_by_username=product.creator.username if product.creator else None,
        created_at=product.created_at,
    )


def _require_category(session: Session, category_id: int) -> Category:
    category = session.get(Category, category_id)
    if category is None:
        raise CatalogError("Category not found")
    return category


def _ensure_unique_category_name(session: Session, name: str, exclude_id: int | None = None) -> None:
    query = session.query(Category).filter(Category.name == name)
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    if query.first() is not None:
        raise CatalogError("Category with this name already exists")


def list_categories(session: Session) -> list[Category]:
    return session.query(Category).order_by(Category.name).all()


def create_category(session: Session, body: CategoryCreate, created_by: int) -> Category:
    name = body.name.strip()
    _ensure_unique_category_name(session, name)
    category = Category(name=name, description=body.description, created_by=created_by)
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


def update_category(session: Session, category: Category, body: CategoryUpdate) -> Category:
    if body.name is not None:
        name = body.name.strip()
        _ensure_unique_category_name(session, name, exclude_id=category.id)
        category.name = name
    if body.description is not None:
        category.description = body.description
    session.commit()
    session.refresh(category)
    return category


def delete_category(session: Session, category: Category) -> None:
    """Refuses while products still reference the category."""
    in_use = session.query(Product).filter(Product.category_id == category.id).count()
    if in_use > 0:
        raise CatalogError("Cannot delete category with existing products")
    session.delete(category)
    session.commit()


def list_products(
    session: Session,
    page: int,
    limit: int,
    category_id: int | None = None,
    search: str | None = None,
) -> tuple[list[Product], int]:
    """Return one page of products (newest first) and the total match count."""
    query = session.query(Product)
    if category_id is not None:
        query = query.filter(Product.category_id == category_id)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(Product.name.ilike(pattern), Product.description.ilike(pattern)))
    total = query.count()
    products = (
        query.order_by(Product.created_at.desc(), Product.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return products, total


def create_product(session: Session, body: ProductCreate, created_by: int) -> Product:
    _require_category(session, body.category_id)
    product = Product(
        name=body.name.strip(),
        description=body.description,
        price=body.price,
        category_id=body.category_id,
        stock_quantity=body.stock_quantity,
        created_by=created_by,
    )
    session.add(product)
    session.commit()
    session.refresh(product)
    return product


def update_product(session: Session, product: Product, body: ProductUpdate) -> Product:
    """Apply only the fields present in the request."""
    if body.category_id is not None:
        _require_category(session, body.category_id)
        product.category_id = body.category_id
    if body.name is not None:
        product.name = body.name.strip()
    if body.description is not None:
        product.description = body.description
    if body.price is not None:
        product.price = body.price
    if body.stock_quantity is not None:
        product.stock_quantity = body.stock_quantity
    session.commit()
    session.refresh(product)
    return product


def delete_product(session: Session, product: Product) -> None:
    session.delete(product)
    session.commit()
