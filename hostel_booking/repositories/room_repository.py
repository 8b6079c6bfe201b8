"""
Room repository: inventory lookups and filtered listings.
"""

from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from hostel_booking.models.enums import RoomStatus
from hostel_booking.models.room import Room
from hostel_booking.repositories.base_repository import BaseRepository

ROOM_SORTS = {
    "newest": Room.created_at.desc(),
    "price_asc": Room.price_per_month.asc(),
    "price_desc": Room.price_per_month.desc(),
}


class RoomRepository(BaseRepository[Room]):
    """Data access for rooms. Soft-deleted rooms are excluded unless asked for."""

    resource_name = "Room"

    def __init__(self, db: Session):
        super().__init__(Room, db)

    def search(
        self,
        *,
        search: Optional[str] = None,
        room_type: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        status: Optional[RoomStatus] = None,
        sort: str = "newest",
        page: int = 1,
        limit: int = 12,
    ) -> Tuple[List[Room], int]:
        stmt = self._base_query()

        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(
                    Room.room_number.ilike(pattern),
                    Room.description.ilike(pattern),
                )
            )
        if room_type:
            stmt = stmt.where(Room.room_type == room_type)
        if min_price is not None:
            stmt = stmt.where(Room.price_per_month >= min_price)
        if max_price is not None:
            stmt = stmt.where(Room.price_per_month <= max_price)
        if status is not None:
            stmt = stmt.where(Room.status == status)

        stmt = stmt.order_by(ROOM_SORTS.get(sort, ROOM_SORTS["newest"]))
        return self.paginate(stmt, page, limit)
