"""
Test configuration and shared fixtures.
Each test gets its own in-memory SQLite database.
"""
from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_LOGIN", "1000/minute")

import datetime as dt  # noqa: E402
from collections.abc import AsyncGenerator, Awaitable, Callable  # noqa: E402
from typing import Any  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

import activitylog.models  # noqa: E402, F401
from activitylog.crud.activity import ActivityQueryRunner  # noqa: E402
from activitylog.crud.user import crud_user  # noqa: E402
from activitylog.db.base import Base  # noqa: E402
from activitylog.db.session import get_db  # noqa: E402
from activitylog.main import app  # noqa: E402
from activitylog.models.activity import Activity, ActivityAction, ActivityType  # noqa: E402
from activitylog.models.user import User  # noqa: E402

# ── Test database ─────────────────────────────────────────────────────────────
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

T0 = dt.datetime(2024, 1, 1, 9, 0, tzinfo=dt.timezone.utc)

ActivityFactory = Callable[..., Awaitable[Activity]]


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """A fresh in-memory database with all tables created."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a test database session that rolls back after each test."""
    session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        try:
            yield session
            await session.rollback()
        finally:
            await session.close()


@pytest_asyncio.fixture
async def runner(db: AsyncSession) -> ActivityQueryRunner:
    return ActivityQueryRunner(db)


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide an async HTTP test client with the test DB injected."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# ── Helper fixtures ───────────────────────────────────────────────────────────

async def _create_user(db: AsyncSession, name: str) -> User:
    return await crud_user.create_user(
        db,
        email=f"{name}@example.com",
        username=name,
        password="TestPass1",
        full_name=name.title(),
    )


@pytest_asyncio.fixture
async def alice(db: AsyncSession) -> User:
    return await _create_user(db, "alice")


@pytest_asyncio.fixture
async def bob(db: AsyncSession) -> User:
    return await _create_user(db, "bob")


@pytest_asyncio.fixture
async def carol(db: AsyncSession) -> User:
    return await _create_user(db, "carol")


@pytest_asyncio.fixture
async def make_activity(db: AsyncSession) -> ActivityFactory:
    """Insert an activity row directly, bypassing the recorder."""

    async def _make(
        user: User,
        *,
        action: ActivityAction = ActivityAction.ADD,
        type: ActivityType = ActivityType.ENTRY,
        collection: str = "posts",
        item: str = "5",
        at: dt.datetime = T0,
        **extra: Any,
    ) -> Activity:
        entry = Activity(
            type=type,
            action=action,
            collection=collection,
            item=item,
            user=user.id,
            datetime=at,
            **extra,
        )
        db.add(entry)
        await db.flush()
        return entry

    return _make


@pytest_asyncio.fixture
async def auth_headers(client: AsyncClient, alice: User) -> dict[str, str]:
    """Return Authorization headers for alice."""
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": "alice@example.com", "password": "TestPass1"},
    )
    assert response.status_code == 200, response.text
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}
