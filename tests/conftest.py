"""
Shared fixtures.

Tests run against an in-memory SQLite database; the app's `get_session`
dependency is overridden so every request in a test sees the same data.
Supabase is never contacted: tokens are minted locally with the same
HS256 secret the app verifies with.
"""
import os
import uuid

# Settings are read at import time, so the environment goes first.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")
os.environ.setdefault("COOKIE_SECURE", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.core.auth import create_access_token
from app.database import get_session
from app.main import app
from app.models.product import Category, Product
from app.models.user import User


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def test_client(engine):
    """
    TestClient wired to the in-memory database.
    """

    def _get_session_override():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = _get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


# ---- users ----


def _make_user(session: Session, role: str, email: str) -> User:
    user = User(id=uuid.uuid4(), email=email, name=email.split("@")[0], role=role)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token(user.id, user.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer(session) -> User:
    return _make_user(session, "user", "customer@example.com")


@pytest.fixture
def admin(session) -> User:
    return _make_user(session, "admin", "admin@example.com")


@pytest.fixture
def superadmin(session) -> User:
    return _make_user(session, "superadmin", "owner@example.com")


@pytest.fixture
def customer_headers(customer) -> dict[str, str]:
    return auth_headers(customer)


@pytest.fixture
def admin_headers(admin) -> dict[str, str]:
    return auth_headers(admin)


# ---- catalog ----


@pytest.fixture
def make_product(session):
    """
    Factory: make_product(title="Oil Filter", price=12.5, stock=10, ...)
    """

    def _make(title: str = "Oil Filter", price: float = 12.5, stock: int = 10, **fields) -> Product:
        product = Product(title=title, price=price, stock=stock, **fields)
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make


@pytest.fixture
def make_category(session):
    def _make(name: str, position: int = 0, active: bool = True) -> Category:
        category = Category(
            name=name, slug=name.replace(" ", "-"), position=position, active=active
        )
        session.add(category)
        session.commit()
        session.refresh(category)
        return category

    return _make


@pytest.fixture
def headers_for():
    return auth_headers
