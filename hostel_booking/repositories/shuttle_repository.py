"""
Shuttle repositories: routes and per-date seat bookings.
"""

from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from hostel_booking.models.enums import ShuttleBookingStatus, ShuttleRouteStatus
from hostel_booking.models.shuttle import ShuttleBooking, ShuttleRoute
from hostel_booking.repositories.base_repository import BaseRepository


class ShuttleRouteRepository(BaseRepository[ShuttleRoute]):
    resource_name = "Shuttle route"

    def __init__(self, db: Session):
        super().__init__(ShuttleRoute, db)

    def list_routes(
        self,
        route_from: Optional[str] = None,
        route_to: Optional[str] = None,
        status: Optional[ShuttleRouteStatus] = ShuttleRouteStatus.ACTIVE,
    ) -> List[ShuttleRoute]:
        stmt = self._base_query()
        if route_from:
            stmt = stmt.where(ShuttleRoute.route_from.ilike(f"%{route_from}%"))
        if route_to:
            stmt = stmt.where(ShuttleRoute.route_to.ilike(f"%{route_to}%"))
        if status is not None:
            stmt = stmt.where(ShuttleRoute.status == status)
        stmt = stmt.order_by(ShuttleRoute.departure_time)
        return list(self.db.execute(stmt).scalars().all())


class ShuttleBookingRepository(BaseRepository[ShuttleBooking]):
    resource_name = "Shuttle booking"

    def __init__(self, db: Session):
        super().__init__(ShuttleBooking, db)

    def booked_seats(self, route_id: UUID, booking_date: date) -> int:
        """Seats held on ``route_id`` for ``booking_date`` by non-cancelled bookings."""
        stmt = select(func.coalesce(func.sum(ShuttleBooking.seats_booked), 0)).where(
            ShuttleBooking.route_id == route_id,
            ShuttleBooking.booking_date == booking_date,
            ShuttleBooking.status != ShuttleBookingStatus.CANCELLED,
        )
        return int(self.db.execute(stmt).scalar_one())

    def find_for_user(self, booking_id: UUID, user_id: UUID) -> Optional[ShuttleBooking]:
        stmt = select(ShuttleBooking).where(
            ShuttleBooking.id == booking_id,
            ShuttleBooking.user_id == user_id,
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def list_for_user(self, user_id: UUID) -> List[ShuttleBooking]:
        stmt = (
            select(ShuttleBooking)
            .where(ShuttleBooking.user_id == user_id)
            .order_by(ShuttleBooking.booking_date.desc(), ShuttleBooking.created_at.desc())
        )
        return list(self.db.execute(stmt).scalars().all())
