"""
Shuttle seat booking service.

Availability is always recomputed from the bookings table. Booking locks
the route row so the seat count read and the insert cannot interleave
with another booking on the same route.
"""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from hostel_booking.core.exceptions import (
    ConflictError,
    ErrorCode,
    InsufficientSeatsError,
    ResourceNotFoundError,
    ValidationError,
)
from hostel_booking.models.enums import ShuttleBookingStatus, ShuttleRouteStatus
from hostel_booking.models.shuttle import ShuttleBooking, ShuttleRoute
from hostel_booking.repositories.shuttle_repository import (
    ShuttleBookingRepository,
    ShuttleRouteRepository,
)
from hostel_booking.services.base_service import BaseService
from hostel_booking.utils.qr import boarding_pass_payload, render_qr_data_url


class ShuttleBookingService(BaseService):
    def __init__(self, db_session, qr_renderer=render_qr_data_url, **kwargs):
        super().__init__(db_session, **kwargs)
        self.routes = ShuttleRouteRepository(db_session)
        self.bookings = ShuttleBookingRepository(db_session)
        self.qr_renderer = qr_renderer

    # -------------------------------------------------------------------------
    # Availability
    # -------------------------------------------------------------------------

    def _available(self, route: ShuttleRoute, booking_date: date) -> Tuple[int, int]:
        booked = self.bookings.booked_seats(route.id, booking_date)
        return booked, max(0, route.total_seats - booked)

    def get_availability(self, route_id: UUID, booking_date: date) -> Dict[str, object]:
        route = self.routes.get_by_id(route_id)
        booked, available = self._available(route, booking_date)
        return {
            "route_id": route.id,
            "booking_date": booking_date,
            "total_seats": route.total_seats,
            "booked_seats": booked,
            "available_seats": available,
        }

    def list_routes(
        self,
        route_from: Optional[str] = None,
        route_to: Optional[str] = None,
        booking_date: Optional[date] = None,
    ) -> List[Tuple[ShuttleRoute, Optional[int]]]:
        """Active routes, each paired with its free seats on ``booking_date`` if given."""
        routes = self.routes.list_routes(route_from=route_from, route_to=route_to)
        if booking_date is None:
            return [(route, None) for route in routes]
        return [(route, self._available(route, booking_date)[1]) for route in routes]

    # -------------------------------------------------------------------------
    # Booking
    # -------------------------------------------------------------------------

    def book_shuttle(
        self,
        user_id: UUID,
        route_id: UUID,
        booking_date: date,
        seats: int = 1,
    ) -> ShuttleBooking:
        """
        Reserve ``seats`` on ``route_id`` for ``booking_date``.

        Raises:
            ValidationError: seats below one or a past date
            ResourceNotFoundError: route missing
            ConflictError: route inactive or not enough free seats
        """
        if seats < 1:
            raise ValidationError(
                "At least one seat must be booked",
                field_errors=[{"field": "seats", "message": "At least one seat must be booked"}],
            )
        if booking_date < self.today():
            raise ValidationError(
                "Booking date cannot be in the past",
                field_errors=[{"field": "booking_date", "message": "Booking date cannot be in the past"}],
                error_code=ErrorCode.INVALID_DATE_RANGE,
            )

        with self.transaction():
            route = self.routes.get_by_id(route_id, for_update=True)
            if route.status != ShuttleRouteStatus.ACTIVE:
                raise ConflictError(
                    "Shuttle route is not active",
                    ErrorCode.CONFLICT,
                    {"route_id": str(route.id)},
                )

            _, available = self._available(route, booking_date)
            if seats > available:
                self._logger.info(
                    "Shuttle booking rejected: not enough seats",
                    extra={"route_id": str(route.id), "requested": seats, "available": available},
                )
                raise InsufficientSeatsError(requested=seats, available=available)

            booking = self.bookings.add(
                ShuttleBooking(
                    user_id=user_id,
                    route_id=route.id,
                    booking_date=booking_date,
                    seats_booked=seats,
                    total_price=Decimal(route.price_per_seat) * seats,
                    status=ShuttleBookingStatus.CONFIRMED,
                )
            )
            booking.qr_code = self.qr_renderer(
                boarding_pass_payload(booking.id, route.id, booking_date, seats)
            )
            self.db.flush()

        self._logger.info(
            "Shuttle booked",
            extra={"booking_id": str(booking.id), "route_id": str(route_id), "seats": seats},
        )
        return booking

    def cancel_shuttle_booking(self, booking_id: UUID, user_id: UUID) -> Dict[str, object]:
        """Cancel the caller's own booking. Seats free up because the sum skips cancelled rows."""
        with self.transaction():
            booking = self.bookings.find_for_user(booking_id, user_id)
            if booking is None:
                raise ResourceNotFoundError("Shuttle booking", str(booking_id))
            if booking.status == ShuttleBookingStatus.CANCELLED:
                raise ValidationError(
                    "Booking is already cancelled",
                    error_code=ErrorCode.INVALID_STATE_TRANSITION,
                )
            booking.status = ShuttleBookingStatus.CANCELLED
            refund = Decimal(booking.total_price)

        self._logger.info("Shuttle booking cancelled", extra={"booking_id": str(booking_id)})
        return {"booking_id": booking.id, "refund_amount": refund}

    def list_user_bookings(self, user_id: UUID) -> List[ShuttleBooking]:
        return self.bookings.list_for_user(user_id)
