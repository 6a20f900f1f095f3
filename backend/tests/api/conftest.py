"""API test fixtures — async DB + FastAPI test client with fake AI and storage.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db, get_ai_client and get_storage overridden on the app
    - db_manager patched so /health/ready sees the test engine

Design Decisions:
    - SQLite in-memory with StaticPool: one shared connection, so every session
      sees the same schema and rows
      (PostgreSQL-specific features not exercised here)
"""

import uuid
from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)
from sqlalchemy.pool import StaticPool

import farmops.infrastructure.database as db_module
from farmops.db.base import Base
from farmops.infrastructure.anthropic_client import get_ai_client
from farmops.infrastructure.database import DatabaseSessionManager, get_db
from farmops.infrastructure.supabase_storage import get_storage
from farmops.main import app
from farmops.models import Crop, Farm, GrowthStage, OrganizationMember
from tests.api.fakes import FakeAIClient, FakeStorage


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
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
def fake_ai():
    return FakeAIClient()


@pytest.fixture
def fake_storage():
    return FakeStorage()


@pytest.fixture
async def client(test_engine, test_session_factory, fake_ai, fake_storage):
    """FastAPI test client with DB, AI and storage dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ai_client] = lambda: fake_ai
    app.dependency_overrides[get_storage] = lambda: fake_storage

    # Patch db_manager for the readiness probe, which uses it directly
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


# ─── Seed data ──────────────────────────────────────────────────

@pytest.fixture
def org_id():
    return uuid.uuid4()


@pytest.fixture
async def member(test_db, org_id):
    """User id of a member of org_id."""
    user_id = uuid.uuid4()
    test_db.add(OrganizationMember(organization_id=org_id, user_id=user_id))
    await test_db.commit()
    return user_id


@pytest.fixture
async def outsider(test_db):
    """User id of a member of some other organization."""
    user_id = uuid.uuid4()
    test_db.add(OrganizationMember(organization_id=uuid.uuid4(), user_id=user_id))
    await test_db.commit()
    return user_id


@pytest.fixture
async def farm(test_db, org_id):
    farm = Farm(
        organization_id=org_id, name="Green Acres",
        location="Nakuru", size_hectares=12.5,
    )
    test_db.add(farm)
    await test_db.commit()
    return farm


@pytest.fixture
async def crop(test_db, farm, org_id):
    crop = Crop(
        farm_id=farm.id, organization_id=org_id, crop_name="Maize",
        status="growing", planting_date=date(2024, 3, 1),
        quantity_planted=100, farm_area=4,
    )
    test_db.add(crop)
    await test_db.commit()
    return crop


@pytest.fixture
async def stage(test_db, org_id):
    stage = GrowthStage(
        organization_id=org_id, name="Germination", duration_days=10, order=1,
    )
    test_db.add(stage)
    await test_db.commit()
    return stage
