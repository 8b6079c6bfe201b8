"""
Room booking service.

Creating a booking locks the room row for the rest of the transaction, so
the overlap check and the insert it guards run as one unit per room and
two concurrent requests for intersecting dates cannot both succeed.
"""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple, Union
from uuid import UUID

from hostel_booking.core.exceptions import (
    AuthorizationError,
    BookingConflictError,
    ConflictError,
    ErrorCode,
    ResourceNotFoundError,
    ValidationError,
)
from hostel_booking.core.security import is_admin_role
from hostel_booking.models.booking import Booking
from hostel_booking.models.enums import BookingStatus, RoomStatus, UserRole
from hostel_booking.models.user import User
from hostel_booking.repositories.booking_repository import BookingRepository
from hostel_booking.repositories.room_repository import RoomRepository
from hostel_booking.services.base_service import BaseService
from hostel_booking.services.notification_service import NotificationDispatcher
from hostel_booking.utils.date_utils import month_span

# Admin-driven transitions. Settlement moves pending -> active on its own.
ALLOWED_TRANSITIONS: Dict[BookingStatus, frozenset] = {
    BookingStatus.PENDING: frozenset({BookingStatus.APPROVED, BookingStatus.REJECTED}),
    BookingStatus.APPROVED: frozenset({BookingStatus.ACTIVE, BookingStatus.CANCELLED}),
    BookingStatus.ACTIVE: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.REJECTED: frozenset(),
}

NON_CANCELLABLE_STATUSES = frozenset({
    BookingStatus.CANCELLED,
    BookingStatus.COMPLETED,
    BookingStatus.REJECTED,
})


def compute_duration_months(check_in: date, check_out: date) -> int:
    return month_span(check_in, check_out)


class RoomBookingService(BaseService):
    """
    Room booking workflows: create, cancel, admin status changes and reads.
    """

    def __init__(
        self,
        db_session,
        notifier: Optional[NotificationDispatcher] = None,
        **kwargs,
    ):
        super().__init__(db_session, **kwargs)
        self.rooms = RoomRepository(db_session)
        self.bookings = BookingRepository(db_session)
        self.notifier = notifier

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    def _validate_dates(self, check_in: date, check_out: date) -> None:
        if check_in < self.today():
            raise ValidationError(
                "Check-in date cannot be in the past",
                field_errors=[{"field": "check_in_date", "message": "Check-in date cannot be in the past"}],
                error_code=ErrorCode.INVALID_DATE_RANGE,
            )
        if check_out <= check_in:
            raise ValidationError(
                "Check-out date must be after check-in date",
                field_errors=[{"field": "check_out_date", "message": "Check-out date must be after check-in date"}],
                error_code=ErrorCode.INVALID_DATE_RANGE,
            )

    def create_booking(
        self,
        user_id: UUID,
        room_id: UUID,
        check_in: date,
        check_out: date,
        notes: Optional[str] = None,
    ) -> Booking:
        """
        Reserve ``room_id`` for [check_in, check_out].

        Raises:
            ValidationError: check-in in the past or check-out not after check-in
            ResourceNotFoundError: room missing or deleted
            ConflictError: room not bookable, or dates overlap a held booking
        """
        self._validate_dates(check_in, check_out)

        with self.transaction():
            room = self.rooms.get_by_id(room_id, for_update=True)

            if room.status != RoomStatus.AVAILABLE:
                raise ConflictError(
                    "Room is not available",
                    ErrorCode.ROOM_UNAVAILABLE,
                    {"room_id": str(room.id), "status": room.status.value},
                )

            conflicting = self.bookings.find_conflicting(room.id, check_in, check_out)
            if conflicting is not None:
                self._logger.info(
                    "Booking rejected: dates overlap",
                    extra={"room_id": str(room.id), "conflicting_booking_id": str(conflicting.id)},
                )
                raise BookingConflictError(room_id=room.id, conflicting_booking_id=conflicting.id)

            duration = compute_duration_months(check_in, check_out)
            total = Decimal(room.price_per_month) * duration

            booking = self.bookings.add(
                Booking(
                    user_id=user_id,
                    room_id=room.id,
                    check_in_date=check_in,
                    check_out_date=check_out,
                    duration_months=duration,
                    total_amount=total,
                    amount_paid=Decimal("0"),
                    outstanding_balance=total,
                    status=BookingStatus.PENDING,
                    notes=notes,
                )
            )

        self._logger.info(
            "Booking created",
            extra={
                "booking_id": str(booking.id),
                "room_id": str(room_id),
                "duration_months": duration,
            },
        )

        if self.notifier is not None:
            user = self.db.get(User, user_id)
            self.notifier.send_booking_confirmation(user.email if user else None, booking)

        return booking

    # -------------------------------------------------------------------------
    # Cancel / status changes
    # -------------------------------------------------------------------------

    def cancel_booking(
        self,
        booking_id: UUID,
        actor_id: UUID,
        actor_role: Union[UserRole, str],
    ) -> Dict[str, object]:
        """
        Cancel a booking on behalf of its owner or an admin.

        The refund owed is whatever has been paid so far; no money moves here.
        """
        with self.transaction():
            booking = self.bookings.get_by_id(booking_id, for_update=True)

            if booking.user_id != actor_id and not is_admin_role(actor_role):
                raise AuthorizationError("You can only cancel your own bookings")

            if booking.status in NON_CANCELLABLE_STATUSES:
                raise ValidationError(
                    f"Cannot cancel a booking that is {booking.status.value}",
                    error_code=ErrorCode.INVALID_STATE_TRANSITION,
                )

            booking.status = BookingStatus.CANCELLED
            refund_amount = Decimal(booking.amount_paid or 0)

        self._logger.info(
            "Booking cancelled",
            extra={"booking_id": str(booking_id), "refund_amount": str(refund_amount)},
        )
        return {
            "booking_id": booking.id,
            "refund_amount": refund_amount,
            "refund_date": self.today(),
        }

    def update_booking_status(
        self,
        booking_id: UUID,
        new_status: BookingStatus,
        notes: Optional[str] = None,
    ) -> Booking:
        """
        Admin status change, restricted to ``ALLOWED_TRANSITIONS``.

        Raises:
            ValidationError: transition not allowed from the current status
        """
        new_status = BookingStatus(new_status)
        with self.transaction():
            booking = self.bookings.get_by_id(booking_id, for_update=True)
            current = booking.status

            if new_status not in ALLOWED_TRANSITIONS[current]:
                raise ValidationError(
                    f"Cannot change booking status from {current.value} to {new_status.value}",
                    error_code=ErrorCode.INVALID_STATE_TRANSITION,
                )

            booking.status = new_status
            if notes is not None:
                booking.notes = notes

        self._logger.info(
            "Booking status changed",
            extra={
                "booking_id": str(booking_id),
                "from_status": current.value,
                "to_status": new_status.value,
            },
        )
        return booking

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_booking(
        self,
        booking_id: UUID,
        actor_id: UUID,
        actor_role: Union[UserRole, str],
    ) -> Booking:
        booking = self.bookings.find_by_id(booking_id)
        if booking is None or (booking.user_id != actor_id and not is_admin_role(actor_role)):
            # other users' bookings are reported as missing
            raise ResourceNotFoundError("Booking", str(booking_id))
        return booking

    def list_bookings(
        self,
        user_id: UUID,
        status: Optional[BookingStatus] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Booking], int]:
        return self.bookings.list_for_user(user_id, status=status, page=page, limit=limit)
