import pytest
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from bed_tracker.main import app
from bed_tracker.infrastructure.database import Base, get_db, get_session_factory
from bed_tracker.domain.beds.models import Bed, BedState


@pytest.fixture(scope="function")
async def test_engine(tmp_path):
    """SQLite file database per test, so separate sessions really use separate connections."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test_beds.db'}", connect_args={"timeout": 10}
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest.fixture(scope="function")
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async with session_factory() as session:
        yield session


@pytest.fixture(scope="function")
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database dependency override."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def bed_factory(session_factory):
    """Insert beds through their own session so service rollbacks never expire them."""

    async def make_bed(bed_number: str, **fields) -> Bed:
        async with session_factory() as session:
            bed = Bed(bed_number=bed_number, **{"state": BedState.AVAILABLE, **fields})
            session.add(bed)
            await session.commit()
            await session.refresh(bed)
            return bed

    return make_bed


@pytest.fixture(scope="function")
async def available_bed(bed_factory) -> Bed:
    return await bed_factory("ICU-1")


@pytest.fixture(scope="function")
async def occupied_bed(bed_factory) -> Bed:
    return await bed_factory(
        "ICU-2",
        state=BedState.OCCUPIED,
        patient_name="R. Roe",
        urgency_level="high",
    )


@pytest.fixture(scope="function")
async def maintenance_bed(bed_factory) -> Bed:
    return await bed_factory(
        "ICU-3",
        state=BedState.MAINTENANCE,
        patient_name="S. Poe",
        urgency_level="low",
    )
