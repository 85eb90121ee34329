from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from parkshare.models.base import BaseModel, generate_id
from parkshare.utils.constants import EventType, SpaceType


class ParkingSpace(BaseModel):
    __tablename__ = "parking_spaces"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    owner_id: Mapped[str] = mapped_column(String(64), index=True)
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    address: Mapped[str] = mapped_column(String(255))
    city: Mapped[str] = mapped_column(String(100), index=True)
    latitude: Mapped[float] = mapped_column(Float)
    longitude: Mapped[float] = mapped_column(Float)
    space_type: Mapped[SpaceType] = mapped_column(default=SpaceType.DRIVEWAY)
    price_per_hour: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    minimum_duration: Mapped[int] = mapped_column(Integer, default=1)
    first_hour_discount: Mapped[bool] = mapped_column(Boolean, default=False)
    discount_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0"))

    # Feature toggles
    covered: Mapped[bool] = mapped_column(Boolean, default=False)
    ev_charger: Mapped[bool] = mapped_column(Boolean, default=False)
    security_camera: Mapped[bool] = mapped_column(Boolean, default=False)
    height_limit: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Vehicle constraints, in feet
    max_length: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    max_width: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    max_height: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    allows_trucks: Mapped[bool] = mapped_column(Boolean, default=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Relationships
    bookings: Mapped[list["Booking"]] = relationship(back_populates="space")  # noqa: F821
    events: Mapped[list["EventPricing"]] = relationship(back_populates="space")


class EventPricing(BaseModel):
    __tablename__ = "event_pricing"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    space_id: Mapped[str] = mapped_column(ForeignKey("parking_spaces.id"), index=True)
    event_name: Mapped[str] = mapped_column(String(200))
    event_type: Mapped[EventType] = mapped_column()
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    multiplier: Mapped[Decimal] = mapped_column(Numeric(4, 2), default=Decimal("1.5"))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Relationships
    space: Mapped["ParkingSpace"] = relationship(back_populates="events")
