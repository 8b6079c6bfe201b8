"""
SQLAlchemy models. Importing this package registers every table on
``Base.metadata``.
"""

from hostel_booking.models.base import Base, BaseModel
from hostel_booking.models.booking import Booking
from hostel_booking.models.enums import (
    BookingStatus,
    PaymentMethod,
    PaymentStatus,
    PaymentType,
    RoomStatus,
    ShuttleBookingStatus,
    ShuttleRouteStatus,
    UserRole,
)
from hostel_booking.models.payment import Payment
from hostel_booking.models.room import Room
from hostel_booking.models.shuttle import ShuttleBooking, ShuttleRoute
from hostel_booking.models.user import User
from hostel_booking.models.webhook_event import UnmatchedWebhookEvent

__all__ = [
    "Base",
    "BaseModel",
    "Booking",
    "BookingStatus",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
    "PaymentType",
    "Room",
    "RoomStatus",
    "ShuttleBooking",
    "ShuttleBookingStatus",
    "ShuttleRoute",
    "ShuttleRouteStatus",
    "UnmatchedWebhookEvent",
    "User",
    "UserRole",
]
