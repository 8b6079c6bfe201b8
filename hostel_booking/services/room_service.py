"""
Room catalogue queries.
"""

from typing import List, Tuple
from uuid import UUID

from hostel_booking.models.room import Room
from hostel_booking.repositories.room_repository import RoomRepository
from hostel_booking.schemas.room import RoomFilterParams
from hostel_booking.services.base_service import BaseService


class RoomService(BaseService):
    def __init__(self, db_session, **kwargs):
        super().__init__(db_session, **kwargs)
        self.rooms = RoomRepository(db_session)

    def list_rooms(self, filters: RoomFilterParams) -> Tuple[List[Room], int]:
        return self.rooms.search(
            search=filters.search,
            room_type=filters.room_type,
            min_price=filters.min_price,
            max_price=filters.max_price,
            status=filters.status,
            sort=filters.sort,
            page=filters.page,
            limit=filters.limit,
        )

    def get_room(self, room_id: UUID) -> Room:
        return self.rooms.get_by_id(room_id)
