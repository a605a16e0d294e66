"""Helpers shared by the test modules and conftest."""

import base64
from datetime import datetime, timedelta, timezone

from jose import jwt
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from svix.webhooks import Webhook

from app.models.todo import Todo
from app.models.user import User

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_JWT_SECRET = "test-secret-key-for-testing-only"
TEST_WEBHOOK_SECRET = "whsec_" + base64.b64encode(b"test-webhook-signing-secret").decode()

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
AsyncSessionTest = async_sessionmaker(engine_test, class_=AsyncSession, expire_on_commit=False)


def create_test_token(user_id: str = "user_alice", expired: bool = False, secret: str = TEST_JWT_SECRET) -> str:
    now = datetime.now(timezone.utc)
    exp = now - timedelta(hours=1) if expired else now + timedelta(hours=1)
    payload = {
        "sub": user_id,
        "exp": int(exp.timestamp()),
        "iat": int(now.timestamp()),
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def auth_headers(user_id: str = "user_alice") -> dict[str, str]:
    return {"Authorization": f"Bearer {create_test_token(user_id)}"}


def signed_headers(body: str, msg_id: str = "msg_1", secret: str = TEST_WEBHOOK_SECRET) -> dict[str, str]:
    now = datetime.now(timezone.utc)
    return {
        "svix-id": msg_id,
        "svix-timestamp": str(int(now.timestamp())),
        "svix-signature": Webhook(secret).sign(msg_id, now, body),
        "content-type": "application/json",
    }


async def add_user(session: AsyncSession, user_id: str, email: str, subscribed: bool = False) -> User:
    user = User(id=user_id, email=email, is_subscribed=subscribed)
    session.add(user)
    await session.commit()
    return user


async def add_todos(session: AsyncSession, owner_id: str, titles: list[str]) -> list[Todo]:
    # distinct, increasing timestamps so ordering is deterministic
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    todos = [
        Todo(owner_id=owner_id, title=title, created_at=base + timedelta(minutes=i))
        for i, title in enumerate(titles)
    ]
    session.add_all(todos)
    await session.commit()
    return todos


async def unavailable_db():
    """``get_db`` override whose session fails every statement."""
    async def fail(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is unavailable"))

    async with AsyncSessionTest() as session:
        session.execute = fail
        session.flush = fail
        yield session
