"""
Shuttle schemas.
"""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import Field

from hostel_booking.models.enums import ShuttleBookingStatus, ShuttleRouteStatus
from hostel_booking.schemas.common import BaseSchema

__all__ = [
    "ShuttleBookingCreate",
    "ShuttleRouteResponse",
    "ShuttleAvailabilityResponse",
    "ShuttleBookingResponse",
    "ShuttleCancellationResponse",
]


class ShuttleBookingCreate(BaseSchema):
    route_id: UUID
    booking_date: date
    seats: int = Field(default=1, ge=1, le=50, description="Seats to reserve")


class ShuttleRouteResponse(BaseSchema):
    id: UUID
    route_from: str
    route_to: str
    departure_time: time
    arrival_time: time
    price_per_seat: Decimal
    total_seats: int
    status: ShuttleRouteStatus
    driver_name: Optional[str] = None
    vehicle_type: Optional[str] = None
    frequency: Optional[str] = None
    available_seats: Optional[int] = Field(
        default=None,
        description="Free seats for the requested date, when one was given",
    )


class ShuttleAvailabilityResponse(BaseSchema):
    route_id: UUID
    booking_date: date
    total_seats: int
    booked_seats: int
    available_seats: int


class ShuttleBookingResponse(BaseSchema):
    id: UUID
    user_id: UUID
    route_id: UUID
    booking_date: date
    seats_booked: int
    total_price: Decimal
    status: ShuttleBookingStatus
    qr_code: Optional[str] = None
    created_at: datetime


class ShuttleCancellationResponse(BaseSchema):
    booking_id: UUID
    refund_amount: Decimal
