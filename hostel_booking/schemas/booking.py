"""
Booking request and response schemas.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import Field, model_validator

from hostel_booking.models.enums import BookingStatus
from hostel_booking.schemas.common import BaseSchema

__all__ = [
    "BookingCreate",
    "BookingStatusUpdate",
    "BookingResponse",
    "BookingCancellationResponse",
]


class BookingCreate(BaseSchema):
    """
    Room booking request.

    Only the shape is checked here; date rules that depend on today's date
    are enforced by the booking service.
    """

    room_id: UUID = Field(..., description="Room to book")
    check_in_date: date = Field(..., description="First night of the stay")
    check_out_date: date = Field(..., description="Departure date")
    notes: Optional[str] = Field(default=None, max_length=1000)


class BookingStatusUpdate(BaseSchema):
    """Admin status change."""

    status: BookingStatus
    notes: Optional[str] = Field(default=None, max_length=1000)

    @model_validator(mode="after")
    def _reject_pending(self) -> "BookingStatusUpdate":
        if self.status == BookingStatus.PENDING:
            raise ValueError("A booking cannot be moved back to pending")
        return self


class BookingResponse(BaseSchema):
    id: UUID
    user_id: UUID
    room_id: UUID
    check_in_date: date
    check_out_date: date
    duration_months: int
    total_amount: Decimal
    amount_paid: Decimal
    outstanding_balance: Decimal
    status: BookingStatus
    notes: Optional[str] = None
    created_at: datetime


class BookingCancellationResponse(BaseSchema):
    booking_id: UUID
    refund_amount: Decimal
    refund_date: date
