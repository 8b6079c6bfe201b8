"""
Room catalogue endpoints.
"""

from decimal import Decimal
from typing import Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from hostel_booking.api import deps
from hostel_booking.models.enums import RoomStatus
from hostel_booking.schemas.common import PaginatedData, PaginationMeta, SuccessResponse
from hostel_booking.schemas.room import RoomFilterParams, RoomResponse
from hostel_booking.services.room_service import RoomService

router = APIRouter(prefix="/rooms", tags=["Rooms"])


@router.get("", response_model=SuccessResponse[PaginatedData[RoomResponse]])
def list_rooms(
    search: Optional[str] = Query(None, max_length=100),
    room_type: Optional[str] = Query(None, alias="type"),
    min_price: Optional[Decimal] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice", ge=0),
    room_status: Optional[RoomStatus] = Query(None, alias="status"),
    sort: Literal["newest", "price_asc", "price_desc"] = Query("newest"),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    service: RoomService = Depends(deps.get_room_service),
):
    """List rooms with filters and pagination"""
    filters = RoomFilterParams(
        search=search,
        room_type=room_type,
        min_price=min_price,
        max_price=max_price,
        status=room_status,
        sort=sort,
        page=page,
        limit=limit,
    )
    rooms, total = service.list_rooms(filters)
    return SuccessResponse.create(
        data=PaginatedData(
            items=[RoomResponse.model_validate(room) for room in rooms],
            pagination=PaginationMeta.build(page, limit, total),
        )
    )


@router.get("/{room_id}", response_model=SuccessResponse[RoomResponse])
def get_room(
    room_id: UUID,
    service: RoomService = Depends(deps.get_room_service),
):
    """Room detail including free beds"""
    return SuccessResponse.create(data=RoomResponse.model_validate(service.get_room(room_id)))
