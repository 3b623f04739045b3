"""
Pytest Configuration and Fixtures

Provides reusable async fixtures for testing the Apadbandhav Backend.
"""

import os

# Settings are read once at import time; configure them before any app import.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["SECRET_KEY"] = "test-secret-key-that-is-at-least-32-characters"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["TRUSTED_PROXIES"] = ""
os.environ["SMS_BASE_URL"] = ""
os.environ["SMS_SECRET"] = ""
os.environ["SMS_SENDER"] = ""
os.environ["SMS_TEMPID"] = ""
os.environ["SEED_SUPERADMIN_PHONE"] = ""
os.environ["SEED_ADMIN_PHONE"] = ""

from typing import AsyncGenerator, Callable
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.database import Base, get_db
from app.core.security import create_access_token
from app.models.enums import UserRole
from app.models.user import User
import app.models  # noqa: F401  registers every table on Base.metadata


# ==================== Database Fixtures ====================

@pytest_asyncio.fixture
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite engine with every table created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """An async session against the test database."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def mock_async_session() -> AsyncMock:
    """
    Create a mock async database session.

    Returns:
        AsyncMock configured to behave like AsyncSession.
    """
    session = AsyncMock(spec=AsyncSession)
    session.add = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.execute = AsyncMock()
    return session


# ==================== Identity Fixtures ====================

@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable:
    """
    Factory fixture that persists a user.

    Usage:
        user = await make_user(phone="9876543210", role=UserRole.ADMIN)
    """
    counter = {"n": 0}

    async def _make_user(
        phone: str | None = None,
        email: str | None = None,
        role: UserRole = UserRole.USER,
        is_active: bool = True,
        full_name: str = "Test User",
    ) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            full_name=full_name,
            email=email or f"user{n}@example.com",
            phone=phone or f"90000000{n:02d}",
            role=role,
            is_active=is_active,
            is_verified=True,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def auth_headers() -> Callable:
    """Build a bearer Authorization header for a user."""
    def _auth_headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user)}"}
    return _auth_headers


# ==================== HTTP Client Fixtures ====================

@pytest_asyncio.fixture
async def client(session_maker) -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    HTTP client bound to the app with get_db pointed at the test database.

    The lifespan does not run, so no seeding or real engine is involved.
    """
    from app.main import app

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def mock_httpx_response():
    """
    Factory fixture to create mock httpx responses.

    Usage:
        response = mock_httpx_response(status_code=200, text="OK")
    """
    def _create_response(status_code: int = 200, json_data: dict = None, text: str = ""):
        response = MagicMock()
        response.status_code = status_code
        response.json.return_value = json_data or {}
        response.text = text
        return response
    return _create_response
