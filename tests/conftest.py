from collections.abc import AsyncGenerator
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from parkshare.core.dependencies import get_db
from parkshare.database import Base
from parkshare.main import app
from parkshare.models.parking import ParkingSpace
from parkshare.services.booking_store import InMemoryBookingStore

TEST_DATABASE_URL = "sqlite+aiosqlite:///./test_parkshare.db"

test_engine = create_async_engine(TEST_DATABASE_URL, echo=False)
test_session_maker = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with test_session_maker() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def isolated_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """A client whose requests each get their own session, as in production."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with test_session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def store() -> InMemoryBookingStore:
    return InMemoryBookingStore(space_owners={"space-1": "host-1", "space-2": "host-2"})


@pytest_asyncio.fixture
async def space_id(db_session: AsyncSession) -> str:
    """A $10/hour downtown space with no discounts."""
    space = ParkingSpace(
        owner_id="host-1",
        title="Downtown Covered Garage",
        address="123 Market St",
        city="San Francisco",
        latitude=37.7949,
        longitude=-122.4094,
        price_per_hour=Decimal("10.00"),
        minimum_duration=1,
        first_hour_discount=False,
        discount_percentage=Decimal("0"),
        covered=True,
        security_camera=True,
        max_length=Decimal("18.0"),
        max_width=Decimal("7.0"),
        max_height=Decimal("6.5"),
    )
    db_session.add(space)
    await db_session.commit()
    return space.id
