"""
Repository layer for data access.
"""

from hostel_booking.repositories.base_repository import BaseRepository
from hostel_booking.repositories.booking_repository import BookingRepository
from hostel_booking.repositories.payment_repository import PaymentRepository
from hostel_booking.repositories.room_repository import RoomRepository
from hostel_booking.repositories.shuttle_repository import (
    ShuttleBookingRepository,
    ShuttleRouteRepository,
)
from hostel_booking.repositories.webhook_event_repository import WebhookEventRepository

__all__ = [
    "BaseRepository",
    "BookingRepository",
    "PaymentRepository",
    "RoomRepository",
    "ShuttleBookingRepository",
    "ShuttleRouteRepository",
    "WebhookEventRepository",
]
