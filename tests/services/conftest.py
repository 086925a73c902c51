"""Service test fixtures: async DB + FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched so the readiness probe sees the test engine
    - insert_subscription writes rows directly, with explicit created_at when ordering matters

Design Decisions:
    - SQLite in-memory: fast, no external dependency; the repository's SQL is
      written to run unchanged on SQLite and PostgreSQL
"""

import uuid
from datetime import date, datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

import subscription_service.infrastructure.database as db_module
from subscription_service.db.base import Base
from subscription_service.infrastructure.database import DatabaseSessionManager, get_db
from subscription_service.infrastructure.subscription_repository import (
    SqlSubscriptionRepository,
)
from subscription_service.main import app
from subscription_service.models.subscription import Subscription


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def repository(test_db):
    return SqlSubscriptionRepository(test_db)


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def insert_subscription(test_db):
    """Factory: insert a subscription row and return it."""

    async def _insert(
        service_name: str = "Yandex Plus",
        price: int = 400,
        user_id: uuid.UUID | None = None,
        start_date: date = date(2025, 1, 1),
        end_date: date | None = None,
        created_at: datetime | None = None,
    ) -> Subscription:
        now = created_at or datetime.now(timezone.utc)
        row = Subscription(
            service_name=service_name,
            price=price,
            user_id=user_id or uuid.uuid4(),
            start_date=start_date,
            end_date=end_date,
            created_at=now,
            updated_at=now,
        )
        test_db.add(row)
        await test_db.commit()
        await test_db.refresh(row)
        return row

    return _insert
