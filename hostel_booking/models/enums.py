"""
Database enums shared by models, schemas and services.
"""

import enum


class UserRole(str, enum.Enum):
    """User role enumeration."""
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    STUDENT = "student"


ADMIN_ROLES = frozenset({UserRole.ADMIN, UserRole.SUPER_ADMIN})


class RoomStatus(str, enum.Enum):
    """Room availability status."""
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"
    UNAVAILABLE = "unavailable"


class BookingStatus(str, enum.Enum):
    """Booking lifecycle status."""
    PENDING = "pending"
    APPROVED = "approved"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_BOOKING_STATUSES


BLOCKING_BOOKING_STATUSES = frozenset({
    BookingStatus.PENDING,
    BookingStatus.APPROVED,
    BookingStatus.ACTIVE,
})

TERMINAL_BOOKING_STATUSES = frozenset({
    BookingStatus.COMPLETED,
    BookingStatus.CANCELLED,
    BookingStatus.REJECTED,
})


class PaymentStatus(str, enum.Enum):
    """Payment status. Both non-pending states are terminal."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentType(str, enum.Enum):
    """What a payment is for."""
    ROOM_BOOKING = "room_booking"
    OTHER_FEES = "other_fees"


class PaymentMethod(str, enum.Enum):
    """Payment channel."""
    PAYSTACK = "paystack"
    MOBILE_MONEY = "mobile_money"
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"


class ShuttleRouteStatus(str, enum.Enum):
    """Shuttle route operational status."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class ShuttleBookingStatus(str, enum.Enum):
    """Shuttle booking status."""
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
