from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from parkshare.models.base import BaseModel, generate_id
from parkshare.utils.constants import BookingStatus, IssueType


class Booking(BaseModel):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_bookings_window"),
        CheckConstraint("total_price >= 0", name="ck_bookings_total_price"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    renter_id: Mapped[str] = mapped_column(String(64), index=True)
    space_id: Mapped[str] = mapped_column(ForeignKey("parking_spaces.id"), index=True)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    original_end_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    extension_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    status: Mapped[BookingStatus] = mapped_column(default=BookingStatus.CONFIRMED)
    issue_type: Mapped[IssueType | None] = mapped_column(nullable=True)
    issue_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    issue_reported_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    refund_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    extended_count: Mapped[int] = mapped_column(Integer, default=0)
    checked_in_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    checked_out_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    version: Mapped[int] = mapped_column(Integer, default=1)

    # Relationships
    space: Mapped["ParkingSpace"] = relationship(back_populates="bookings")  # noqa: F821
