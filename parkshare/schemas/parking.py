from datetime import datetime
from decimal import Decimal

from pydantic import Field, model_validator

from parkshare.schemas.common import BaseSchema, TimestampSchema, UTCDateTime
from parkshare.utils.constants import EventType, SortBy, SpaceType


class ParkingSpaceBase(BaseSchema):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    address: str
    city: str
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    space_type: SpaceType = SpaceType.DRIVEWAY
    price_per_hour: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    minimum_duration: int = Field(default=1, ge=1)
    first_hour_discount: bool = False
    discount_percentage: Decimal = Field(default=Decimal("0"), ge=0, le=50)
    covered: bool = False
    ev_charger: bool = False
    security_camera: bool = False
    height_limit: float | None = Field(default=None, gt=0)
    max_length: Decimal | None = Field(default=None, gt=0)
    max_width: Decimal | None = Field(default=None, gt=0)
    max_height: Decimal | None = Field(default=None, gt=0)
    allows_trucks: bool = False


class ParkingSpaceCreate(ParkingSpaceBase):
    owner_id: str = Field(min_length=1, max_length=64)


class ParkingSpaceResponse(ParkingSpaceBase, TimestampSchema):
    id: str
    owner_id: str
    is_active: bool


class ParkingSpaceSearchResult(BaseSchema):
    space: ParkingSpaceResponse
    distance: float | None = None


class ParkingSpaceSearchResponse(BaseSchema):
    results: list[ParkingSpaceSearchResult]
    total: int
    sort_by: SortBy


class EventPricingCreate(BaseSchema):
    event_name: str = Field(min_length=1, max_length=200)
    event_type: EventType
    start_date: datetime
    end_date: datetime
    multiplier: Decimal = Field(default=Decimal("1.5"), ge=1, le=5)

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class EventPricingResponse(BaseSchema):
    id: str
    space_id: str
    event_name: str
    event_type: EventType
    start_date: UTCDateTime
    end_date: UTCDateTime
    multiplier: Decimal
    is_active: bool
    created_at: UTCDateTime | None = None
