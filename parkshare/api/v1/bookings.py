from dataclasses import asdict

from fastapi import APIRouter, Query, status

from parkshare.core.dependencies import DB, Bookings
from parkshare.schemas.booking import (
    BookingCreate,
    BookingExtend,
    BookingResponse,
    BookingStatusUpdate,
    BookingWindow,
    IssueReport,
    PriceQuoteResponse,
)
from parkshare.services import booking as booking_service
from parkshare.services import parking as parking_service

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(db: DB, store: Bookings, data: BookingCreate):
    quote = await parking_service.quote_space(db, data.space_id, data.start_time, data.end_time)
    return await booking_service.create_booking(
        store,
        renter_id=data.renter_id,
        space_id=data.space_id,
        start_time=data.start_time,
        end_time=data.end_time,
        total_price=quote.total_price,
    )


@router.post("/quote", response_model=PriceQuoteResponse)
async def quote_booking(db: DB, data: BookingWindow):
    quote = await parking_service.quote_space(db, data.space_id, data.start_time, data.end_time)
    return PriceQuoteResponse(space_id=data.space_id, **asdict(quote))


@router.get("", response_model=list[BookingResponse])
async def list_bookings(
    store: Bookings,
    renter_id: str | None = Query(None),
    space_id: str | None = Query(None),
    owner_id: str | None = Query(None),
    limit: int | None = Query(None, ge=1, le=100),
):
    return await booking_service.list_bookings(store, renter_id, space_id, owner_id, limit)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(store: Bookings, booking_id: str):
    return await booking_service.get_booking(store, booking_id)


@router.patch("/{booking_id}", response_model=BookingResponse)
async def update_booking_status(store: Bookings, booking_id: str, data: BookingStatusUpdate):
    return await booking_service.set_booking_status(store, booking_id, data.status)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(store: Bookings, booking_id: str):
    return await booking_service.cancel_booking(store, booking_id)


@router.post("/{booking_id}/extend", response_model=BookingResponse)
async def extend_booking(db: DB, store: Bookings, booking_id: str, data: BookingExtend):
    booking = await booking_service.get_booking(store, booking_id)
    space = await parking_service.get_space(db, booking.space_id)
    return await booking_service.extend_booking(
        store,
        booking_id,
        new_end_time=data.new_end_time,
        additional_hours=data.additional_hours,
        price_per_hour=space.price_per_hour,
    )


@router.post("/{booking_id}/report-issue", response_model=BookingResponse)
async def report_issue(store: Bookings, booking_id: str, data: IssueReport):
    return await booking_service.report_issue(
        store, booking_id, data.issue_type, data.description
    )


@router.post("/{booking_id}/check-in", response_model=BookingResponse)
async def check_in(store: Bookings, booking_id: str):
    return await booking_service.check_in(store, booking_id)


@router.post("/{booking_id}/check-out", response_model=BookingResponse)
async def check_out(store: Bookings, booking_id: str):
    return await booking_service.check_out(store, booking_id)
