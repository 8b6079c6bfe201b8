"""
Room model.

Bookable room inventory. Soft-deleted rooms never show up in
availability queries.
"""

from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON, CheckConstraint, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_booking.models.base import BaseModel, SoftDeleteMixin, enum_column
from hostel_booking.models.enums import RoomStatus

if TYPE_CHECKING:
    from hostel_booking.models.booking import Booking


class Room(BaseModel, SoftDeleteMixin):
    """Room inventory entry."""

    __tablename__ = "rooms"
    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_rooms_capacity_positive"),
        CheckConstraint(
            "current_occupancy >= 0 AND current_occupancy <= capacity",
            name="ck_rooms_occupancy_within_capacity",
        ),
        CheckConstraint("price_per_month >= 0", name="ck_rooms_price_non_negative"),
    )

    room_number: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        nullable=False,
        index=True,
    )
    room_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    current_occupancy: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    price_per_month: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
        comment="Monthly rent",
    )
    status: Mapped[RoomStatus] = mapped_column(
        enum_column(RoomStatus, "room_status_enum"),
        nullable=False,
        default=RoomStatus.AVAILABLE,
        index=True,
    )
    amenities: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    bookings: Mapped[List["Booking"]] = relationship(back_populates="room")

    @property
    def available_beds(self) -> int:
        return self.capacity - self.current_occupancy
