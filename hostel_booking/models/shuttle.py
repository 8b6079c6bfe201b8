"""
Shuttle models.

Routes run daily with a fixed seat count; bookings are per route and
calendar date.
"""

from datetime import date, time
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, Numeric, String, Text, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_booking.models.base import BaseModel, enum_column
from hostel_booking.models.enums import ShuttleBookingStatus, ShuttleRouteStatus


class ShuttleRoute(BaseModel):
    """Scheduled shuttle route."""

    __tablename__ = "shuttle_routes"
    __table_args__ = (
        CheckConstraint("total_seats > 0", name="ck_shuttle_routes_seats_positive"),
    )

    route_from: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    route_to: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    departure_time: Mapped[time] = mapped_column(Time, nullable=False)
    arrival_time: Mapped[time] = mapped_column(Time, nullable=False)
    price_per_seat: Mapped[Decimal] = mapped_column(Numeric(precision=10, scale=2), nullable=False)
    total_seats: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[ShuttleRouteStatus] = mapped_column(
        enum_column(ShuttleRouteStatus, "shuttle_route_status_enum"),
        nullable=False,
        default=ShuttleRouteStatus.ACTIVE,
        index=True,
    )
    driver_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    vehicle_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    frequency: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    bookings: Mapped[List["ShuttleBooking"]] = relationship(back_populates="route")


class ShuttleBooking(BaseModel):
    """Seats reserved on a route for one date."""

    __tablename__ = "shuttle_bookings"
    __table_args__ = (
        CheckConstraint("seats_booked >= 1", name="ck_shuttle_bookings_min_seats"),
        Index("ix_shuttle_bookings_route_date", "route_id", "booking_date"),
    )

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    route_id: Mapped[UUID] = mapped_column(
        ForeignKey("shuttle_routes.id", ondelete="RESTRICT"),
        nullable=False,
    )
    booking_date: Mapped[date] = mapped_column(Date, nullable=False)
    seats_booked: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    total_price: Mapped[Decimal] = mapped_column(Numeric(precision=10, scale=2), nullable=False)
    status: Mapped[ShuttleBookingStatus] = mapped_column(
        enum_column(ShuttleBookingStatus, "shuttle_booking_status_enum"),
        nullable=False,
        default=ShuttleBookingStatus.CONFIRMED,
        index=True,
    )
    qr_code: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    route: Mapped["ShuttleRoute"] = relationship(back_populates="bookings")
