from decimal import Decimal

from pydantic import Field

from parkshare.schemas.common import BaseSchema, TimestampSchema
from parkshare.utils.constants import VehicleType


class VehicleBase(BaseSchema):
    make: str = Field(min_length=1, max_length=50)
    model: str = Field(min_length=1, max_length=50)
    year: int = Field(ge=1900, le=2100)
    vehicle_type: VehicleType = VehicleType.SEDAN
    length: Decimal | None = Field(default=None, gt=0)
    width: Decimal | None = Field(default=None, gt=0)
    height: Decimal | None = Field(default=None, gt=0)
    is_electric: bool = False
    is_default: bool = False


class VehicleCreate(VehicleBase):
    user_id: str = Field(min_length=1, max_length=64)


class VehicleResponse(VehicleBase, TimestampSchema):
    id: str
    user_id: str


class VehicleDimensions(BaseSchema):
    """Raw vehicle details as entered by a driver; dimensions may be malformed."""

    vehicle_type: str = VehicleType.SEDAN.value
    length: str | float | None = None
    width: str | float | None = None
    height: str | float | None = None
    is_electric: bool = False


class CompatibilityResponse(BaseSchema):
    space_id: str
    is_compatible: bool
    issues: list[str]
    warnings: list[str]
