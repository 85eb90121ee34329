from datetime import datetime
from decimal import Decimal

from pydantic import Field

from parkshare.schemas.common import BaseSchema, TimestampSchema, UTCDateTime
from parkshare.utils.constants import BookingStatus, IssueType


class BookingWindow(BaseSchema):
    space_id: str
    start_time: datetime
    end_time: datetime


class BookingCreate(BookingWindow):
    renter_id: str = Field(min_length=1, max_length=64)


class BookingStatusUpdate(BaseSchema):
    status: BookingStatus


class BookingExtend(BaseSchema):
    new_end_time: datetime | None = None
    additional_hours: int


class IssueReport(BaseSchema):
    issue_type: IssueType
    description: str


class BookingResponse(TimestampSchema):
    id: str
    renter_id: str
    space_id: str
    start_time: UTCDateTime
    end_time: UTCDateTime
    original_end_time: UTCDateTime | None = None
    total_price: Decimal
    extension_price: Decimal
    status: BookingStatus
    issue_type: IssueType | None = None
    issue_description: str | None = None
    issue_reported_at: UTCDateTime | None = None
    refund_amount: Decimal | None = None
    extended_count: int
    checked_in_at: UTCDateTime | None = None
    checked_out_at: UTCDateTime | None = None
    cancelled_at: UTCDateTime | None = None
    version: int


class PriceQuoteResponse(BaseSchema):
    space_id: str
    hours: int
    price_per_hour: Decimal
    base_price: Decimal
    first_hour_discount: Decimal
    event_multiplier: Decimal
    total_price: Decimal
