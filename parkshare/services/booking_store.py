from typing import Any, Protocol

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from parkshare.core.exceptions import ConflictError
from parkshare.models.base import generate_id
from parkshare.models.booking import Booking
from parkshare.models.parking import ParkingSpace
from parkshare.utils.dates import ensure_utc, utcnow


class BookingStore(Protocol):
    async def get(self, booking_id: str) -> Booking | None: ...

    async def list_by_renter(self, renter_id: str) -> list[Booking]: ...

    async def list_by_space(self, space_id: str) -> list[Booking]: ...

    async def list_by_owner(self, owner_id: str, limit: int | None = None) -> list[Booking]: ...

    async def insert(self, booking: Booking) -> Booking: ...

    async def update(
        self,
        booking_id: str,
        changes: dict[str, Any],
        expected_version: int | None = None,
    ) -> Booking | None: ...

    async def commit(self) -> None: ...


def _newest_first(bookings: list[Booking]) -> list[Booking]:
    return sorted(bookings, key=lambda b: ensure_utc(b.created_at), reverse=True)


class SqlAlchemyBookingStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, booking_id: str) -> Booking | None:
        # Bypass the identity map so rows committed by other sessions are seen
        result = await self.db.execute(
            select(Booking)
            .where(Booking.id == booking_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_by_renter(self, renter_id: str) -> list[Booking]:
        result = await self.db.execute(
            select(Booking)
            .where(Booking.renter_id == renter_id)
            .order_by(Booking.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_by_space(self, space_id: str) -> list[Booking]:
        result = await self.db.execute(
            select(Booking)
            .where(Booking.space_id == space_id)
            .order_by(Booking.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_by_owner(self, owner_id: str, limit: int | None = None) -> list[Booking]:
        query = (
            select(Booking)
            .join(ParkingSpace, Booking.space_id == ParkingSpace.id)
            .where(ParkingSpace.owner_id == owner_id)
            .order_by(Booking.created_at.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def insert(self, booking: Booking) -> Booking:
        if not booking.id:
            booking.id = generate_id()
        self.db.add(booking)
        await self.db.flush()
        return booking

    async def update(
        self,
        booking_id: str,
        changes: dict[str, Any],
        expected_version: int | None = None,
    ) -> Booking | None:
        stmt = update(Booking).where(Booking.id == booking_id)
        if expected_version is not None:
            stmt = stmt.where(Booking.version == expected_version)
        stmt = stmt.values(**changes, version=Booking.version + 1).execution_options(
            synchronize_session=False
        )

        result = await self.db.execute(stmt)
        if result.rowcount == 0:
            if await self.get(booking_id) is None:
                return None
            raise ConflictError("Booking was modified by another request")

        return await self.db.get(Booking, booking_id, populate_existing=True)

    async def commit(self) -> None:
        await self.db.commit()


class InMemoryBookingStore:
    """Dictionary-backed store for tests and local tooling.

    ``space_owners`` maps space ids to host ids for the owner listing.
    """

    def __init__(self, space_owners: dict[str, str] | None = None) -> None:
        self._bookings: dict[str, Booking] = {}
        self.space_owners: dict[str, str] = dict(space_owners or {})

    async def get(self, booking_id: str) -> Booking | None:
        return self._bookings.get(booking_id)

    async def list_by_renter(self, renter_id: str) -> list[Booking]:
        return _newest_first([b for b in self._bookings.values() if b.renter_id == renter_id])

    async def list_by_space(self, space_id: str) -> list[Booking]:
        return _newest_first([b for b in self._bookings.values() if b.space_id == space_id])

    async def list_by_owner(self, owner_id: str, limit: int | None = None) -> list[Booking]:
        bookings = _newest_first(
            [b for b in self._bookings.values() if self.space_owners.get(b.space_id) == owner_id]
        )
        return bookings if limit is None else bookings[:limit]

    async def insert(self, booking: Booking) -> Booking:
        if not booking.id:
            booking.id = generate_id()
        if booking.created_at is None:
            booking.created_at = utcnow()
        if booking.version is None:
            booking.version = 1
        self._bookings[booking.id] = booking
        return booking

    async def update(
        self,
        booking_id: str,
        changes: dict[str, Any],
        expected_version: int | None = None,
    ) -> Booking | None:
        booking = self._bookings.get(booking_id)
        if booking is None:
            return None
        if expected_version is not None and booking.version != expected_version:
            raise ConflictError("Booking was modified by another request")

        for field, value in changes.items():
            setattr(booking, field, value)
        booking.version += 1
        booking.updated_at = utcnow()
        return booking

    async def commit(self) -> None:
        return None
