"""
RenewalPro API - Test Configuration

Pytest fixtures: a throwaway SQLite database, an ASGI client, a platform
client backed by ``httpx.MockTransport`` and seeded user profiles.
"""

import os
import tempfile
from typing import AsyncGenerator

# Settings are read at import time; PLATFORM_* have no defaults.
_TEST_DIR = tempfile.mkdtemp(prefix="renewalpro-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/test.db"
os.environ.setdefault("PLATFORM_URL", "https://platform.test")
os.environ.setdefault("PLATFORM_API_KEY", "test-key")
os.environ.setdefault("APP_ENV", "test")

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from renewalpro.db.base import Base, async_session_factory, engine  # noqa: E402
from renewalpro.domain import Agent, Profile  # noqa: E402
from renewalpro.main import app  # noqa: E402
from renewalpro.middleware.audit import drain_pending  # noqa: E402
from renewalpro.services.admin import get_admin_cache  # noqa: E402
from renewalpro.services.cache import CacheRegistry  # noqa: E402
from renewalpro.services.platform import PlatformClient, get_platform  # noqa: E402
from tests.factories import (  # noqa: E402
    ADMIN_ID,
    AGENT_USER_ID,
    OTHER_ID,
    OWNER_ID,
    PLATFORM_EMAILS,
    InMemoryRedis,
)


class PlatformStub:
    """Records platform calls and answers them like the real API."""

    def __init__(self):
        self.calls: list[httpx.Request] = []
        self.fail = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if self.fail:
            return httpx.Response(503, json={"error": "unavailable"})
        if request.url.path == "/auth/v1/admin/users":
            users = [{"id": uid, "email": email} for uid, email in PLATFORM_EMAILS.items()]
            return httpx.Response(200, json={"users": users})
        if request.url.path == "/functions/v1/create-checkout":
            return httpx.Response(200, json={"url": "https://checkout.test/session/cs_123"})
        if request.url.path == "/functions/v1/customer-portal":
            return httpx.Response(200, json={"url": "https://billing.test/portal/bps_123"})
        return httpx.Response(404, json={"error": "not found"})


# ===========================================
# DATABASE / CLIENT
# ===========================================

@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create fresh tables and a session for seeding and assertions."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as session:
        yield session

    await drain_pending()
    await engine.dispose()


@pytest.fixture
def platform() -> PlatformStub:
    return PlatformStub()


@pytest.fixture
def cache_registry() -> CacheRegistry:
    """Admin cache over an in-memory Redis double."""
    return CacheRegistry(ttl_seconds=300, client=InMemoryRedis())


@pytest_asyncio.fixture(scope="function")
async def client(
    db_session: AsyncSession, platform: PlatformStub, cache_registry: CacheRegistry
) -> AsyncGenerator[AsyncClient, None]:
    """ASGI client with the platform and admin cache replaced per test."""
    stub_client = PlatformClient(
        "https://platform.test", "test-key", transport=httpx.MockTransport(platform.handler)
    )
    app.dependency_overrides[get_platform] = lambda: stub_client
    app.dependency_overrides[get_admin_cache] = lambda: cache_registry

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ===========================================
# DATA FIXTURES
# ===========================================

@pytest_asyncio.fixture
async def owner(db_session: AsyncSession) -> Profile:
    profile = Profile(user_id=OWNER_ID, email="owner@example.com", first_name="Olivia")
    db_session.add(profile)
    await db_session.commit()
    return profile


@pytest_asyncio.fixture
async def other_owner(db_session: AsyncSession) -> Profile:
    profile = Profile(user_id=OTHER_ID, email="other@example.com", first_name="Oscar")
    db_session.add(profile)
    await db_session.commit()
    return profile


@pytest_asyncio.fixture
async def admin(db_session: AsyncSession) -> Profile:
    profile = Profile(user_id=ADMIN_ID, email="admin@example.com", is_admin=True)
    db_session.add(profile)
    await db_session.commit()
    return profile


@pytest_asyncio.fixture
async def agent(db_session: AsyncSession) -> Agent:
    db_session.add(Profile(
        user_id=AGENT_USER_ID, email="agent@example.com", user_type="registered_agent"
    ))
    record = Agent(
        user_id=AGENT_USER_ID,
        company_name="Harbor Registered Agents",
        contact_email="agent@example.com",
        states=["DE", "NY"],
        price_per_entity=150.0,
        years_experience=8,
        is_available=True,
    )
    db_session.add(record)
    await db_session.commit()
    return record
