import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from app.config import Settings, get_settings
from app.database import Base, get_db
from app.identity import IdentityProvider
from app.main import app
from support import (
    TEST_DATABASE_URL,
    TEST_JWT_SECRET,
    TEST_WEBHOOK_SECRET,
    AsyncSessionTest,
    engine_test,
)


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def settings_env(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", TEST_DATABASE_URL)
    monkeypatch.setenv("WEBHOOK_SECRET", TEST_WEBHOOK_SECRET)
    monkeypatch.setenv("SESSION_JWT_KEY", TEST_JWT_SECRET)
    monkeypatch.setenv("SESSION_JWT_ALGORITHMS", "HS256")
    monkeypatch.setenv("CLERK_SECRET_KEY", "sk_test_123")
    monkeypatch.setenv("CLERK_API_URL", "https://api.clerk.test/v1")
    monkeypatch.setenv("PAGE_SIZE", "10")
    monkeypatch.setenv("FREE_TODO_LIMIT", "3")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def roles() -> dict[str, str]:
    """Role per user id served by the fake identity provider API."""
    return {"user_admin": "admin"}


@pytest.fixture
def broken_users() -> set[str]:
    """User ids for which the identity provider API answers 500."""
    return set()


@pytest.fixture
def identity(settings_env, roles, broken_users) -> IdentityProvider:
    def clerk_api(request: httpx.Request) -> httpx.Response:
        assert request.headers["authorization"] == "Bearer sk_test_123"
        user_id = request.url.path.rsplit("/", 1)[-1]
        if user_id in broken_users:
            return httpx.Response(500, json={"errors": [{"message": "boom"}]})
        metadata = {"role": roles[user_id]} if user_id in roles else {}
        return httpx.Response(200, json={"id": user_id, "public_metadata": metadata})

    return IdentityProvider(Settings(), transport=httpx.MockTransport(clerk_api))


@pytest.fixture
async def db_session():
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    async with AsyncSessionTest() as session:
        yield session


@pytest.fixture
async def client(db_session, identity):
    async def override_get_db():
        async with AsyncSessionTest() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.state.identity = identity
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
