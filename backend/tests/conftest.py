"""Pytest configuration and shared fixtures."""

import os

# Settings are read at import time; point them at an in-memory database first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-the-test-suite-only-0123456789")
os.environ.setdefault("METRICS_ENABLED", "false")

from decimal import Decimal
from typing import AsyncGenerator
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from invest_tracker.core.database import Base, get_db
from invest_tracker.core.security import hash_password
from invest_tracker.main import app
from invest_tracker.models.category import Category
from invest_tracker.models.holding import Holding
from invest_tracker.models.user import User
from invest_tracker.services.auth_service import issue_token

# Test database URL; StaticPool so in-memory SQLite shares one connection
# (NullPool creates a new connection per call, losing all tables each time)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign keys for SQLite."""
    if hasattr(dbapi_conn, "execute"):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    # Import all models to ensure they're registered with Base.metadata
    import invest_tracker.models  # noqa: F401

    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def db(db_session: AsyncSession) -> AsyncSession:
    """Alias for db_session to match test function signatures."""
    return db_session


@pytest.fixture(scope="function")
def override_get_db(db_session: AsyncSession):
    """Override the get_db dependency."""

    async def _override_get_db():
        yield db_session

    return _override_get_db


@pytest_asyncio.fixture(scope="function")
async def async_client(override_get_db) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client."""
    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", follow_redirects=True) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user."""
    user = User(
        id=uuid4(),
        username="tester",
        password_hash=hash_password("password123"),
        display_name="Test User",
        email="test@example.com",
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def second_user(db_session: AsyncSession) -> User:
    """Create a second user for cross-user isolation tests."""
    user = User(
        id=uuid4(),
        username="other",
        password_hash=hash_password("password123"),
        display_name="Other User",
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Create authentication headers with access token."""
    return {"Authorization": f"Bearer {issue_token(test_user)}"}


@pytest.fixture
def second_auth_headers(second_user: User) -> dict:
    return {"Authorization": f"Bearer {issue_token(second_user)}"}


@pytest_asyncio.fixture
async def test_category(db_session: AsyncSession, test_user: User) -> Category:
    """Create a category with a zeroed holding, as the category service does."""
    category = Category(id=uuid4(), user_id=test_user.id, name="Gold", color="#FFD700")
    db_session.add(category)
    await db_session.flush()
    db_session.add(
        Holding(
            category_id=category.id,
            quantity=Decimal("0"),
            average_price=Decimal("0"),
            total_invested=Decimal("0"),
            current_value=Decimal("0"),
        )
    )
    await db_session.commit()
    return category


@pytest_asyncio.fixture
async def other_category(db_session: AsyncSession, test_user: User) -> Category:
    """A second category of the test user."""
    category = Category(id=uuid4(), user_id=test_user.id, name="Fund", color="#2196F3")
    db_session.add(category)
    await db_session.flush()
    db_session.add(
        Holding(
            category_id=category.id,
            quantity=Decimal("0"),
            average_price=Decimal("0"),
            total_invested=Decimal("0"),
            current_value=Decimal("0"),
        )
    )
    await db_session.commit()
    return category
