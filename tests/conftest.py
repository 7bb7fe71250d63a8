"""
Shared fixtures: a fresh SQLite database per test, data factories, and an
HTTP client bound to the app with `get_db` pointed at the test database.
"""
import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["TRACING_ENABLED"] = "false"
os.environ["METRICS_ENABLED"] = "false"
os.environ["ORDER_RATE_LIMIT"] = "1000/minute"

from decimal import Decimal
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from main import app
from services.auth_service.models import User
from services.product_service.models import Category, Product
from shared.config.database import Base, get_db
from shared.security import Role, create_access_token


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'cafe.db'}")

    # pysqlite's implicit transaction handling breaks SAVEPOINT; take it over.
    # BEGIN IMMEDIATE makes concurrent writers queue on the database lock,
    # which stands in for PostgreSQL's row lock in these tests.
    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    counter = {"n": 0}

    async def _make_user(role: Role = Role.CLIENT, **overrides) -> User:
        counter["n"] += 1
        user = User(
            email=overrides.pop("email", f"user{counter['n']}@cafe.fr"),
            hashed_password=overrides.pop("hashed_password", "not-a-real-hash"),
            first_name=overrides.pop("first_name", "Ada"),
            last_name=overrides.pop("last_name", f"Client{counter['n']}"),
            role=role,
            **overrides,
        )
        async with session_factory() as session:
            session.add(user)
            await session.commit()
        return user

    return _make_user


@pytest.fixture
def make_product(session_factory):
    async def _make_product(
        name: str = "Espresso",
        price: str = "2.50",
        quantity: int = 10,
        category: Category = Category.BOISSON,
    ) -> Product:
        product = Product(
            name=name,
            description=f"{name} maison",
            price=Decimal(price),
            quantity=quantity,
            available=quantity > 0,
            category=category,
        )
        async with session_factory() as session:
            session.add(product)
            await session.commit()
        return product

    return _make_product


@pytest.fixture
def reload(session_factory):
    """Read a fresh copy of a row in its own short-lived session."""
    async def _reload(model, pk):
        async with session_factory() as session:
            return await session.get(model, pk)

    return _reload


@pytest.fixture
def auth_headers():
    def _auth_headers(user: User) -> dict:
        token = create_access_token({"sub": str(user.id), "role": user.role.value})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
