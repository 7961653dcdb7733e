"""Pytest configuration and fixtures for Chirpy tests."""

import os

# Settings are read at import time, so the test environment goes in first.
os.environ.update(
    {
        "APP_ENV": "test",
        "PLATFORM": "dev",
        "DATABASE_URL": "sqlite+aiosqlite:///:memory:",
        "JWT_SECRET_KEY": "test-secret-key-not-for-production",
        "POLKA_KEY": "test-polka-key",
        "BCRYPT_ROUNDS": "4",
        "RATE_LIMIT_ENABLED": "false",
        "SENTRY_DSN": "",
    }
)

from collections.abc import AsyncGenerator  # noqa: E402
from datetime import timedelta  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import chirpy.models  # noqa: E402,F401
from chirpy.core.config import AuthConfig, get_auth_config  # noqa: E402
from chirpy.core.database import Base, get_db  # noqa: E402
from chirpy.core.security import get_password_hash  # noqa: E402
from chirpy.core.tokens import create_access_token  # noqa: E402
from chirpy.main import app  # noqa: E402
from chirpy.models.user import User  # noqa: E402

# Use SQLite in-memory database for tests (faster and no setup needed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_PASSWORD = "Test123!@#"


@pytest.fixture
async def engine():
    """Create async engine for tests with SQLite in-memory database."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,  # StaticPool for in-memory SQLite
        connect_args={"check_same_thread": False},  # Required for SQLite
    )

    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        """Enforce ON DELETE CASCADE like Postgres does."""
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables after tests
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async_session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session
        # Rollback to clean up any changes (but allows commits during test)
        await session.rollback()


@pytest.fixture
def auth_config() -> AuthConfig:
    """Auth configuration built from the test settings."""
    return get_auth_config()


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with database session override."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _make_user(db_session: AsyncSession, email: str) -> User:
    user = User(
        email=email,
        hashed_password=get_password_hash(TEST_PASSWORD),
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
def test_password() -> str:
    """Plain text password of the fixture users."""
    return TEST_PASSWORD


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user for authentication tests."""
    return await _make_user(db_session, "test@example.com")


@pytest.fixture
async def other_user(db_session: AsyncSession) -> User:
    """Create a second user for ownership tests."""
    return await _make_user(db_session, "other@example.com")


@pytest.fixture
def access_token(test_user: User, auth_config: AuthConfig) -> str:
    """Valid access token for test_user."""
    return create_access_token(
        test_user.id,
        auth_config.secret,
        timedelta(minutes=30),
        issuer=auth_config.issuer,
    )


@pytest.fixture
def auth_headers(access_token: str) -> dict[str, str]:
    """Authorization header carrying test_user's access token."""
    return {"Authorization": f"Bearer {access_token}"}
