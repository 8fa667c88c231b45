"""Shared fixtures for API tests: in-memory database, seeded users and bearer tokens."""

import unittest
from unittest.mock import MagicMock

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.auth.roles import Role
from storefront.auth.tokens import get_token_service
from storefront.core.database import get_db
from storefront.core.security import hash_password
from storefront.main import app
from storefront.models import Base, Category, Product, User
from storefront.services.email import EmailService, get_email_service

PASSWORD = "correct-horse-battery"
# Hashing once keeps seeded users cheap.
PASSWORD_HASH = hash_password(PASSWORD)


class ApiTestCase(unittest.TestCase):
    """Each test gets an empty sqlite schema, a TestClient and a mocked email service."""

    raise_server_exceptions = True

    def setUp(self) -> None:
        self.engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

        def override_get_db():
            db = self.Session()
            try:
                yield db
            finally:
                db.close()

        self.email = MagicMock(spec=EmailService)
        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_email_service] = lambda: self.email
        self.client = TestClient(app, raise_server_exceptions=self.raise_server_exceptions)
        self.tokens = get_token_service()

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        Base.metadata.drop_all(self.engine)
        self.engine.dispose()

    # Seeding helpers; each commits and closes its own session.

    def make_user(
        self,
        username: str,
        role: Role | str = Role.CUSTOMER,
        is_verified: bool = True,
        is_active: bool = True,
        **fields,
    ) -> int:
        db = self.Session()
        try:
            user = User(
                username=username,
                email=fields.pop("email", f"{username}@example.com"),
                password_hash=PASSWORD_HASH,
                role=role.value if isinstance(role, Role) else role,
                is_active=is_active,
                is_verified=is_verified,
                token_version=0,
                **fields,
            )
            db.add(user)
            db.commit()
            return user.id
        finally:
            db.close()

    def make_category(self, name: str = "Books", created_by: int | None = None) -> int:
        db = self.Session()
        try:
            category = Category(name=name, description="", created_by=created_by)
            db.add(category)
            db.commit()
            return category.id
        finally:
            db.close()

    def make_product(
        self,
        category_id: int,
        created_by: int | None = None,
        name: str = "Widget",
        price: float = 10.0,
        stock_quantity: int = 5,
    ) -> int:
        db = self.Session()
        try:
            product = Product(
                name=name,
                description=f"{name} description",
                price=price,
                category_id=category_id,
                stock_quantity=stock_quantity,
                created_by=created_by,
            )
            db.add(product)
            db.commit()
            return product.id
        finally:
            db.close()

    def get_row(self, model: type, row_id: int):
        db = self.Session()
        try:
            return db.get(model, row_id)
        finally:
            db.close()

    def auth(self, user_id: int, version: int = 0) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.tokens.issue(user_id, version=version)}"}
