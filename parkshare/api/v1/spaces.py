from decimal import Decimal

from fastapi import APIRouter, Query, status

from parkshare.core.dependencies import DB
from parkshare.schemas.parking import (
    EventPricingCreate,
    EventPricingResponse,
    ParkingSpaceCreate,
    ParkingSpaceResponse,
    ParkingSpaceSearchResponse,
)
from parkshare.schemas.vehicle import CompatibilityResponse, VehicleDimensions
from parkshare.services import parking as parking_service
from parkshare.services.compatibility import SpaceFilters, VehicleProfile
from parkshare.utils.constants import SortBy

router = APIRouter(prefix="/spaces", tags=["Parking Spaces"])


@router.get("", response_model=ParkingSpaceSearchResponse)
async def search_spaces(
    db: DB,
    city: str | None = Query(None),
    latitude: float | None = Query(None, ge=-90, le=90),
    longitude: float | None = Query(None, ge=-180, le=180),
    max_price: Decimal | None = Query(None, gt=0),
    max_distance: float | None = Query(None, gt=0),
    ev_charging: bool = Query(False),
    covered: bool = Query(False),
    height_limit: float | None = Query(None, gt=0),
    security: bool = Query(False),
    sort_by: SortBy = Query(SortBy.DISTANCE),
):
    filters = SpaceFilters(
        max_price=max_price,
        max_distance=max_distance,
        ev_charging=ev_charging,
        covered=covered,
        height_limit=height_limit,
        security=security,
    )
    return await parking_service.search_spaces(db, filters, sort_by, city, latitude, longitude)


@router.post("", response_model=ParkingSpaceResponse, status_code=status.HTTP_201_CREATED)
async def create_space(db: DB, data: ParkingSpaceCreate):
    return await parking_service.create_space(db, data)


@router.get("/{space_id}", response_model=ParkingSpaceResponse)
async def get_space(db: DB, space_id: str):
    return await parking_service.get_space_by_id(db, space_id)


@router.get("/{space_id}/events", response_model=list[EventPricingResponse])
async def list_space_events(db: DB, space_id: str):
    return await parking_service.get_space_events(db, space_id)


@router.post(
    "/{space_id}/events",
    response_model=EventPricingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_space_event(db: DB, space_id: str, data: EventPricingCreate):
    return await parking_service.create_space_event(db, space_id, data)


@router.post("/{space_id}/compatibility", response_model=CompatibilityResponse)
async def check_compatibility(db: DB, space_id: str, data: VehicleDimensions):
    vehicle = VehicleProfile(**data.model_dump())
    return await parking_service.check_compatibility(db, space_id, vehicle)
