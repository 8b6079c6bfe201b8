"""
Service layer: business workflows over the repositories.
"""

from hostel_booking.services.booking_service import RoomBookingService
from hostel_booking.services.notification_service import NotificationDispatcher
from hostel_booking.services.payment_service import (
    PaymentService,
    SettlementOutcome,
    WebhookResult,
)
from hostel_booking.services.room_service import RoomService
from hostel_booking.services.shuttle_service import ShuttleBookingService

__all__ = [
    "NotificationDispatcher",
    "PaymentService",
    "RoomBookingService",
    "RoomService",
    "SettlementOutcome",
    "ShuttleBookingService",
    "WebhookResult",
]
