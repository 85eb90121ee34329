import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from parkshare.core.exceptions import InvalidInputError, NotFoundError
from parkshare.models.parking import EventPricing, ParkingSpace
from parkshare.schemas.parking import (
    EventPricingCreate,
    EventPricingResponse,
    ParkingSpaceCreate,
    ParkingSpaceResponse,
    ParkingSpaceSearchResponse,
    ParkingSpaceSearchResult,
)
from parkshare.schemas.vehicle import CompatibilityResponse
from parkshare.services.compatibility import (
    SpaceCandidate,
    SpaceConstraints,
    SpaceFilters,
    VehicleProfile,
    check_vehicle_compatibility,
    filter_spaces,
    haversine_miles,
    sort_spaces,
)
from parkshare.services.pricing import PriceQuote, quote_booking
from parkshare.utils.constants import SortBy

logger = logging.getLogger(__name__)


async def get_space(db: AsyncSession, space_id: str) -> ParkingSpace:
    result = await db.execute(select(ParkingSpace).where(ParkingSpace.id == space_id))
    space = result.scalar_one_or_none()
    if not space:
        raise NotFoundError("Parking space not found")
    return space


async def get_space_by_id(db: AsyncSession, space_id: str) -> ParkingSpaceResponse:
    return ParkingSpaceResponse.model_validate(await get_space(db, space_id))


async def create_space(db: AsyncSession, data: ParkingSpaceCreate) -> ParkingSpaceResponse:
    space = ParkingSpace(**data.model_dump())
    db.add(space)
    await db.flush()
    await db.refresh(space)
    logger.info("Listed parking space %s at %s", space.id, space.address)
    return ParkingSpaceResponse.model_validate(space)


async def search_spaces(
    db: AsyncSession,
    filters: SpaceFilters,
    sort_by: SortBy = SortBy.DISTANCE,
    city: str | None = None,
    latitude: float | None = None,
    longitude: float | None = None,
) -> ParkingSpaceSearchResponse:
    has_origin = latitude is not None and longitude is not None
    if filters.max_distance is not None and not has_origin:
        raise InvalidInputError("latitude and longitude are required to filter by distance")

    query = select(ParkingSpace).where(ParkingSpace.is_active == True)  # noqa: E712
    if city:
        query = query.where(ParkingSpace.city.ilike(f"%{city}%"))
    result = await db.execute(query)
    spaces = {s.id: s for s in result.scalars().all()}

    candidates = [
        SpaceCandidate(
            space_id=space.id,
            price=Decimal(space.price_per_hour),
            distance=(
                round(haversine_miles(latitude, longitude, space.latitude, space.longitude), 2)
                if has_origin
                else None
            ),
            ev_charging=space.ev_charger,
            covered=space.covered,
            height_limit=space.height_limit,
            security=space.security_camera,
        )
        for space in spaces.values()
    ]
    matches = sort_spaces(filter_spaces(candidates, filters), sort_by)

    return ParkingSpaceSearchResponse(
        results=[
            ParkingSpaceSearchResult(
                space=ParkingSpaceResponse.model_validate(spaces[c.space_id]),
                distance=c.distance,
            )
            for c in matches
        ],
        total=len(matches),
        sort_by=sort_by,
    )


async def get_event_rules(db: AsyncSession, space_id: str) -> list[EventPricing]:
    result = await db.execute(
        select(EventPricing)
        .where(EventPricing.space_id == space_id)
        .order_by(EventPricing.start_date)
    )
    return list(result.scalars().all())


async def get_space_events(db: AsyncSession, space_id: str) -> list[EventPricingResponse]:
    await get_space(db, space_id)
    rules = await get_event_rules(db, space_id)
    return [EventPricingResponse.model_validate(r) for r in rules]


async def create_space_event(
    db: AsyncSession, space_id: str, data: EventPricingCreate
) -> EventPricingResponse:
    await get_space(db, space_id)
    event = EventPricing(space_id=space_id, **data.model_dump())
    db.add(event)
    await db.flush()
    await db.refresh(event)
    logger.info("Added %sx event pricing %r to space %s", event.multiplier, event.event_name, space_id)
    return EventPricingResponse.model_validate(event)


async def quote_space(
    db: AsyncSession, space_id: str, start_time: datetime, end_time: datetime
) -> PriceQuote:
    space = await get_space(db, space_id)
    rules = await get_event_rules(db, space_id)
    return quote_booking(
        price_per_hour=space.price_per_hour,
        start_time=start_time,
        end_time=end_time,
        minimum_hours=space.minimum_duration or 1,
        discount_percent=space.discount_percentage if space.first_hour_discount else None,
        event_rules=rules,
    )


def space_constraints(space: ParkingSpace) -> SpaceConstraints:
    return SpaceConstraints(
        max_length=space.max_length,
        max_width=space.max_width,
        max_height=space.max_height,
        allows_trucks=space.allows_trucks,
        has_ev_charging=space.ev_charger,
    )


async def check_compatibility(
    db: AsyncSession, space_id: str, vehicle: VehicleProfile
) -> CompatibilityResponse:
    space = await get_space(db, space_id)
    result = check_vehicle_compatibility(vehicle, space_constraints(space))
    return CompatibilityResponse(
        space_id=space_id,
        is_compatible=result.is_compatible,
        issues=result.issues,
        warnings=result.warnings,
    )
