from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from parkshare.database import async_session_maker
from parkshare.services.booking_store import BookingStore, SqlAlchemyBookingStore


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_booking_store(db: Annotated[AsyncSession, Depends(get_db)]) -> BookingStore:
    return SqlAlchemyBookingStore(db)


# Type aliases for cleaner dependency injection
DB = Annotated[AsyncSession, Depends(get_db)]
Bookings = Annotated[BookingStore, Depends(get_booking_store)]
