import os
import re
import smtplib
from collections.abc import AsyncGenerator
from typing import Any

# Settings are read at import time; provide test values before importing the app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_ACCESS_SECRET_KEY", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET_KEY", "test-refresh-secret")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_FORMAT", "console")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("FRONTEND_URL", "http://frontend.test")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from auth_api.core.google_oauth import GoogleProfile
from auth_api.core.redis_client import CacheManager
from auth_api.core.security import create_access_token, hash_password, token_claims
from auth_api.database import get_db
from auth_api.dependencies import get_cache_manager, get_google_oauth_client, get_mailer
from auth_api.main import app
from auth_api.models import metadata, users

TEST_PASSWORD = "pw123456"

# A single in-memory SQLite connection shared by every session in a test
test_engine = create_async_engine(
    "sqlite+aiosqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class FakeMailer:
    """Records outgoing mail instead of talking to SMTP."""

    def __init__(self) -> None:
        self.sent: list[dict[str, str]] = []
        self.fail = False

    async def send(self, to: str, subject: str, html: str) -> None:
        if self.fail:
            raise smtplib.SMTPException("relay unavailable")
        self.sent.append({"to": to, "subject": subject, "html": html})

    def last_reset_token(self) -> str:
        match = re.search(r"token=([0-9a-f]+)", self.sent[-1]["html"])
        assert match, "no reset link in the last email"
        return match.group(1)


class FakeGoogleClient:
    """Returns a preset profile for any authorization code."""

    def __init__(self) -> None:
        self.profile = GoogleProfile(id="google-123", email="g@test.com", name="Google User")

    def authorization_url(self) -> str:
        return "https://accounts.google.com/o/oauth2/v2/auth?client_id=test"

    async def fetch_profile(self, code: str) -> GoogleProfile:
        return self.profile


class FakeRedis:
    """The subset of the redis client used by CacheManager, backed by a dict."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self.store.get(key)

    def setex(self, key: str, ttl: int, value: str) -> None:
        self.store[key] = value

    def delete(self, key: str) -> None:
        self.store.pop(key, None)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session on fresh tables."""
    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
        await conn.run_sync(metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def google_client() -> FakeGoogleClient:
    return FakeGoogleClient()


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    mailer: FakeMailer,
    google_client: FakeGoogleClient,
    fake_redis: FakeRedis,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_google_oauth_client] = lambda: google_client
    app.dependency_overrides[get_cache_manager] = lambda: CacheManager(fake_redis)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


async def _insert_user(db_session: AsyncSession, **values: Any) -> dict[str, Any]:
    result = await db_session.execute(insert(users).values(**values).returning(users))
    await db_session.commit()
    return dict(result.mappings().one())


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> dict[str, Any]:
    """Create a local user with password ``TEST_PASSWORD``."""
    return await _insert_user(
        db_session,
        email="u@test.com",
        name="Test User",
        password_hash=await hash_password(TEST_PASSWORD),
        provider="local",
        role="user",
    )


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> dict[str, Any]:
    return await _insert_user(
        db_session,
        email="admin@test.com",
        name="Admin User",
        password_hash=await hash_password(TEST_PASSWORD),
        provider="local",
        role="admin",
    )


@pytest_asyncio.fixture
async def google_user(db_session: AsyncSession) -> dict[str, Any]:
    return await _insert_user(
        db_session,
        email="g@test.com",
        name="Google User",
        password_hash=None,
        provider="google",
        google_id="google-123",
        role="user",
    )


@pytest.fixture
def auth_headers(test_user: dict[str, Any]) -> dict[str, str]:
    """Bearer header for ``test_user``."""
    return {"Authorization": f"Bearer {create_access_token(token_claims(test_user))}"}


@pytest.fixture
def admin_headers(admin_user: dict[str, Any]) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(token_claims(admin_user))}"}
