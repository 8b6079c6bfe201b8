"""
Room schemas.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import Field

from hostel_booking.models.enums import RoomStatus
from hostel_booking.schemas.common import BaseSchema

__all__ = ["RoomFilterParams", "RoomResponse"]


class RoomFilterParams(BaseSchema):
    """Query parameters for room listings."""

    search: Optional[str] = None
    room_type: Optional[str] = None
    min_price: Optional[Decimal] = Field(default=None, ge=0)
    max_price: Optional[Decimal] = Field(default=None, ge=0)
    status: Optional[RoomStatus] = None
    sort: Literal["newest", "price_asc", "price_desc"] = "newest"
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=12, ge=1, le=100)


class RoomResponse(BaseSchema):
    id: UUID
    room_number: str
    room_type: str
    capacity: int
    current_occupancy: int
    available_beds: int = Field(..., description="capacity - current_occupancy")
    price_per_month: Decimal
    status: RoomStatus
    amenities: Optional[List[str]] = None
    description: Optional[str] = None
    created_at: datetime
