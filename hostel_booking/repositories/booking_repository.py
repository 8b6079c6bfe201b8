"""
Booking repository: overlap detection, listings and balance aggregates.
"""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from hostel_booking.models.booking import Booking
from hostel_booking.models.enums import BLOCKING_BOOKING_STATUSES, BookingStatus
from hostel_booking.repositories.base_repository import BaseRepository


class BookingRepository(BaseRepository[Booking]):
    """Data access for room bookings."""

    resource_name = "Booking"

    def __init__(self, db: Session):
        super().__init__(Booking, db)

    def find_conflicting(
        self,
        room_id: UUID,
        check_in: date,
        check_out: date,
    ) -> Optional[Booking]:
        """
        Return one booking on ``room_id`` whose dates intersect the closed
        interval [check_in, check_out], among bookings that still hold the room.
        """
        stmt = (
            self._base_query()
            .where(
                Booking.room_id == room_id,
                Booking.status.in_(BLOCKING_BOOKING_STATUSES),
                Booking.check_in_date <= check_out,
                Booking.check_out_date >= check_in,
            )
            .order_by(Booking.check_in_date)
            .limit(1)
        )
        return self.db.execute(stmt).scalars().first()

    def list_for_user(
        self,
        user_id: UUID,
        status: Optional[BookingStatus] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Booking], int]:
        stmt = self._base_query().where(Booking.user_id == user_id)
        if status is not None:
            stmt = stmt.where(Booking.status == status)
        stmt = stmt.order_by(Booking.created_at.desc())
        return self.paginate(stmt, page, limit)

    def balance_totals(self, user_id: UUID) -> Dict[str, Decimal]:
        """Sum the balance columns over a user's approved and active bookings."""
        stmt = select(
            func.coalesce(func.sum(Booking.total_amount), 0),
            func.coalesce(func.sum(Booking.amount_paid), 0),
            func.coalesce(func.sum(Booking.outstanding_balance), 0),
        ).where(
            Booking.user_id == user_id,
            Booking.is_deleted.is_(False),
            Booking.status.in_([BookingStatus.APPROVED, BookingStatus.ACTIVE]),
        )
        total, paid, outstanding = self.db.execute(stmt).one()
        return {
            "total_amount": Decimal(str(total)),
            "amount_paid": Decimal(str(paid)),
            "outstanding_balance": Decimal(str(outstanding)),
        }
