import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any

from parkshare.config import settings
from parkshare.core.exceptions import (
    CancellationWindowClosedError,
    InvalidInputError,
    InvalidTransitionError,
    InvalidWindowError,
    NotFoundError,
)
from parkshare.models.booking import Booking
from parkshare.services.booking_store import BookingStore
from parkshare.services.locks import booking_locks
from parkshare.services.pricing import (
    billable_hours,
    compute_cancellation_refund,
    compute_extension_cost,
    to_money,
)
from parkshare.utils.constants import TERMINAL_BOOKING_STATUSES, BookingStatus, IssueType
from parkshare.utils.dates import ensure_utc, utcnow

logger = logging.getLogger(__name__)

# Nothing moves into PENDING; it is reserved for a host-approval flow.
ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset(
        {BookingStatus.ACTIVE, BookingStatus.CANCELLED, BookingStatus.ISSUE_REPORTED}
    ),
    BookingStatus.ACTIVE: frozenset({BookingStatus.COMPLETED, BookingStatus.ISSUE_REPORTED}),
    BookingStatus.ISSUE_REPORTED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

EXTENDABLE_STATUSES = frozenset({BookingStatus.CONFIRMED, BookingStatus.ACTIVE})


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(BookingStatus(current), frozenset())


def ensure_transition(booking: Booking, target: BookingStatus) -> None:
    if not can_transition(booking.status, target):
        logger.warning(
            "Rejected transition for booking %s: %s -> %s",
            booking.id,
            BookingStatus(booking.status).value,
            target.value,
        )
        raise InvalidTransitionError(
            f"Cannot move booking from {BookingStatus(booking.status).value} to {target.value}"
        )


async def get_booking(store: BookingStore, booking_id: str) -> Booking:
    booking = await store.get(booking_id)
    if booking is None:
        raise NotFoundError("Booking not found")
    return booking


async def list_bookings(
    store: BookingStore,
    renter_id: str | None = None,
    space_id: str | None = None,
    owner_id: str | None = None,
    limit: int | None = None,
) -> list[Booking]:
    """
    List bookings newest first.

    ``renter_id`` selects a renter's trips and ``owner_id`` the bookings across
    every space a host owns. ``space_id`` narrows either, or lists one space on
    its own.
    """
    if limit is not None and limit <= 0:
        raise InvalidInputError("limit must be greater than zero")

    if renter_id:
        bookings = await store.list_by_renter(renter_id)
        if owner_id:
            owned = {b.id for b in await store.list_by_owner(owner_id)}
            bookings = [b for b in bookings if b.id in owned]
    elif owner_id:
        bookings = await store.list_by_owner(owner_id, None if space_id else limit)
    elif space_id:
        bookings = await store.list_by_space(space_id)
    else:
        raise InvalidInputError("One of renter_id, owner_id or space_id is required")

    if space_id:
        bookings = [b for b in bookings if b.space_id == space_id]
    return bookings if limit is None else bookings[:limit]


async def _apply(store: BookingStore, booking: Booking, changes: dict[str, Any]) -> Booking:
    updated = await store.update(booking.id, changes, expected_version=booking.version)
    if updated is None:
        raise NotFoundError("Booking not found")
    # Commit while the booking lock is still held
    await store.commit()
    return updated


async def create_booking(
    store: BookingStore,
    renter_id: str,
    space_id: str,
    start_time: datetime,
    end_time: datetime,
    total_price: Decimal,
    now: datetime | None = None,
) -> Booking:
    now = ensure_utc(now or utcnow())
    start_time = ensure_utc(start_time)
    end_time = ensure_utc(end_time)

    if end_time <= start_time:
        raise InvalidWindowError("End time must be after start time")
    if start_time <= now:
        raise InvalidWindowError("Start time must be in the future")
    if total_price < 0:
        raise InvalidInputError("Total price cannot be negative")

    booking = Booking(
        renter_id=renter_id,
        space_id=space_id,
        start_time=start_time,
        end_time=end_time,
        total_price=to_money(Decimal(total_price)),
        extension_price=Decimal("0.00"),
        status=BookingStatus.CONFIRMED,
        extended_count=0,
        version=1,
        created_at=now,
    )
    booking = await store.insert(booking)
    await store.commit()
    logger.info("Created booking %s for space %s (%s)", booking.id, space_id, booking.total_price)
    return booking


async def set_booking_status(
    store: BookingStore,
    booking_id: str,
    new_status: BookingStatus,
    now: datetime | None = None,
) -> Booking:
    new_status = BookingStatus(new_status)
    if new_status == BookingStatus.CANCELLED:
        return await cancel_booking(store, booking_id, now)
    if new_status == BookingStatus.ISSUE_REPORTED:
        raise InvalidTransitionError("Issues must be reported with an issue type and description")

    now = ensure_utc(now or utcnow())
    async with booking_locks.hold(booking_id):
        booking = await get_booking(store, booking_id)
        ensure_transition(booking, new_status)

        changes: dict[str, Any] = {"status": new_status}
        if new_status == BookingStatus.ACTIVE and booking.checked_in_at is None:
            changes["checked_in_at"] = now
        if new_status == BookingStatus.COMPLETED and booking.checked_out_at is None:
            changes["checked_out_at"] = now

        previous = BookingStatus(booking.status)
        booking = await _apply(store, booking, changes)
    logger.info("Booking %s moved %s -> %s", booking_id, previous.value, new_status.value)
    return booking


async def cancel_booking(
    store: BookingStore, booking_id: str, now: datetime | None = None
) -> Booking:
    """
    Cancel a booking and record the refund owed.

    Free up to the cancellation cutoff, charged the late fee inside it, and
    refused once the booking has started. A booking with a reported issue is
    refunded in full whenever it is cancelled.
    """
    now = ensure_utc(now or utcnow())
    async with booking_locks.hold(booking_id):
        booking = await get_booking(store, booking_id)
        status = BookingStatus(booking.status)
        if status in TERMINAL_BOOKING_STATUSES:
            logger.warning("Rejected cancellation of %s booking %s", status.value, booking_id)
            raise InvalidTransitionError(f"Booking is already {status.value}")

        # Cancelling over a reported issue resolves it with a full refund, so the
        # start-time window does not apply
        if status == BookingStatus.ISSUE_REPORTED:
            refund = to_money(Decimal(booking.total_price))
        else:
            refund = compute_cancellation_refund(booking.total_price, booking.start_time, now)
            if refund is None:
                logger.warning("Rejected cancellation of started booking %s", booking_id)
                raise CancellationWindowClosedError()
        ensure_transition(booking, BookingStatus.CANCELLED)

        booking = await _apply(
            store,
            booking,
            {
                "status": BookingStatus.CANCELLED,
                "refund_amount": refund,
                "cancelled_at": now,
            },
        )
    logger.info("Cancelled booking %s, refund %s", booking_id, refund)
    return booking


async def extend_booking(
    store: BookingStore,
    booking_id: str,
    new_end_time: datetime | None,
    additional_hours: int,
    price_per_hour: Decimal,
) -> Booking:
    """
    Push a booking's end time out by ``additional_hours``.

    Without ``new_end_time`` the new end is the current end plus the hours
    bought. An explicit ``new_end_time`` must be covered exactly by them, with
    a partial hour counted as a whole one.
    """
    async with booking_locks.hold(booking_id):
        booking = await get_booking(store, booking_id)
        if additional_hours <= 0:
            raise InvalidInputError("Additional hours must be greater than zero")
        if BookingStatus(booking.status) not in EXTENDABLE_STATUSES:
            raise InvalidTransitionError(
                f"Cannot extend a booking that is {BookingStatus(booking.status).value}"
            )

        current_end = ensure_utc(booking.end_time)
        if new_end_time is None:
            new_end_time = current_end + timedelta(hours=additional_hours)
        new_end_time = ensure_utc(new_end_time)
        if new_end_time <= current_end:
            raise InvalidWindowError("New end time must be after the current end time")
        if billable_hours(current_end, new_end_time) != additional_hours:
            raise InvalidInputError(
                f"Extending to {new_end_time.isoformat()} takes "
                f"{billable_hours(current_end, new_end_time)} hour(s), "
                f"not {additional_hours}"
            )

        cost = compute_extension_cost(price_per_hour, additional_hours)
        booking = await _apply(
            store,
            booking,
            {
                "end_time": new_end_time,
                "original_end_time": booking.original_end_time or booking.end_time,
                "extension_price": to_money(Decimal(booking.extension_price or 0) + cost),
                "total_price": to_money(Decimal(booking.total_price) + cost),
                "extended_count": (booking.extended_count or 0) + additional_hours,
            },
        )
    logger.info("Extended booking %s by %s hour(s) for %s", booking_id, additional_hours, cost)
    return booking


async def report_issue(
    store: BookingStore,
    booking_id: str,
    issue_type: IssueType | str,
    description: str,
    now: datetime | None = None,
) -> Booking:
    now = ensure_utc(now or utcnow())
    async with booking_locks.hold(booking_id):
        booking = await get_booking(store, booking_id)
        try:
            issue_type = IssueType(issue_type)
        except ValueError:
            raise InvalidInputError(f"Unknown issue type: {issue_type}") from None

        description = (description or "").strip()
        if len(description) < settings.min_issue_description_length:
            raise InvalidInputError(
                f"Please provide at least {settings.min_issue_description_length} "
                f"characters describing the issue"
            )
        ensure_transition(booking, BookingStatus.ISSUE_REPORTED)

        booking = await _apply(
            store,
            booking,
            {
                "status": BookingStatus.ISSUE_REPORTED,
                "issue_type": issue_type,
                "issue_description": description,
                "issue_reported_at": now,
            },
        )
    logger.info("Issue %s reported on booking %s", issue_type.value, booking_id)
    return booking


async def check_in(store: BookingStore, booking_id: str, now: datetime | None = None) -> Booking:
    now = ensure_utc(now or utcnow())
    async with booking_locks.hold(booking_id):
        booking = await get_booking(store, booking_id)
        if BookingStatus(booking.status) != BookingStatus.CONFIRMED:
            raise InvalidTransitionError("Only confirmed bookings can be checked in")
        booking = await _apply(
            store, booking, {"status": BookingStatus.ACTIVE, "checked_in_at": now}
        )
    logger.info("Checked in booking %s", booking_id)
    return booking


async def check_out(store: BookingStore, booking_id: str, now: datetime | None = None) -> Booking:
    now = ensure_utc(now or utcnow())
    async with booking_locks.hold(booking_id):
        booking = await get_booking(store, booking_id)
        if BookingStatus(booking.status) != BookingStatus.ACTIVE:
            raise InvalidTransitionError("Only active bookings can be checked out")
        booking = await _apply(
            store, booking, {"status": BookingStatus.COMPLETED, "checked_out_at": now}
        )
    logger.info("Checked out booking %s", booking_id)
    return booking
