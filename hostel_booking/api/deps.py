"""
FastAPI dependencies: database session, caller identity and services.

Services are built per request from these providers, so tests can swap
any of them through ``app.dependency_overrides``.

Example usage in a router:
    @router.get("/bookings")
    def list_bookings(
        current_user: CurrentUser = Depends(deps.get_current_user),
        service: RoomBookingService = Depends(deps.get_room_booking_service),
    ):
        ...
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from hostel_booking.core.exceptions import AuthenticationError, AuthorizationError
from hostel_booking.core.logging import user_id as user_id_var
from hostel_booking.core.security import CurrentUser, decode_access_token, subject_from_payload
from hostel_booking.db.session import get_db
from hostel_booking.integrations.paystack import PaystackClient
from hostel_booking.models.user import User
from hostel_booking.services.booking_service import RoomBookingService
from hostel_booking.services.notification_service import NotificationDispatcher
from hostel_booking.services.payment_service import PaymentService
from hostel_booking.services.room_service import RoomService
from hostel_booking.services.shuttle_service import ShuttleBookingService

bearer_scheme = HTTPBearer(auto_error=False)


# --- Authentication & Authorization -------------------------------------------

def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> CurrentUser:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Unauthorized - No token provided")

    payload = decode_access_token(credentials.credentials)
    user = db.get(User, subject_from_payload(payload))
    if user is None:
        raise AuthenticationError("Unauthorized - User not found")

    user_id_var.set(str(user.id))
    return CurrentUser(id=user.id, email=user.email, role=user.role)


def require_admin(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not current_user.is_admin:
        raise AuthorizationError("Forbidden - Insufficient permissions")
    return current_user


# --- Integrations --------------------------------------------------------------

def get_payment_gateway() -> PaystackClient:
    return PaystackClient()


def get_notifier() -> NotificationDispatcher:
    return NotificationDispatcher()


# --- Services ------------------------------------------------------------------

def get_room_service(db: Session = Depends(get_db)) -> RoomService:
    return RoomService(db)


def get_room_booking_service(
    db: Session = Depends(get_db),
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> RoomBookingService:
    return RoomBookingService(db, notifier=notifier)


def get_shuttle_service(db: Session = Depends(get_db)) -> ShuttleBookingService:
    return ShuttleBookingService(db)


def get_payment_service(
    db: Session = Depends(get_db),
    gateway: PaystackClient = Depends(get_payment_gateway),
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> PaymentService:
    return PaymentService(db, gateway=gateway, notifier=notifier)


__all__ = [
    "get_db",
    "get_current_user",
    "require_admin",
    "get_payment_gateway",
    "get_notifier",
    "get_room_service",
    "get_room_booking_service",
    "get_shuttle_service",
    "get_payment_service",
]
