from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict

from parkshare.utils.dates import ensure_utc

# Timestamps always leave the API with a UTC offset, even when SQLite
# returned them naive.
UTCDateTime = Annotated[datetime, AfterValidator(ensure_utc)]


class BaseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class TimestampSchema(BaseSchema):
    created_at: UTCDateTime | None = None
    updated_at: UTCDateTime | None = None


class ErrorResponse(BaseSchema):
    error: str
    detail: str
