"""
Room booking endpoints.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from hostel_booking.api import deps
from hostel_booking.core.security import CurrentUser
from hostel_booking.models.enums import BookingStatus
from hostel_booking.schemas.booking import (
    BookingCancellationResponse,
    BookingCreate,
    BookingResponse,
    BookingStatusUpdate,
)
from hostel_booking.schemas.common import PaginatedData, PaginationMeta, SuccessResponse
from hostel_booking.services.booking_service import RoomBookingService

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post(
    "",
    response_model=SuccessResponse[BookingResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_booking(
    payload: BookingCreate,
    current_user: CurrentUser = Depends(deps.get_current_user),
    service: RoomBookingService = Depends(deps.get_room_booking_service),
):
    """Book a room for a date range"""
    booking = service.create_booking(
        user_id=current_user.id,
        room_id=payload.room_id,
        check_in=payload.check_in_date,
        check_out=payload.check_out_date,
        notes=payload.notes,
    )
    return SuccessResponse.create(
        message="Booking created successfully",
        data=BookingResponse.model_validate(booking),
    )


@router.get("", response_model=SuccessResponse[PaginatedData[BookingResponse]])
def list_bookings(
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: CurrentUser = Depends(deps.get_current_user),
    service: RoomBookingService = Depends(deps.get_room_booking_service),
):
    bookings, total = service.list_bookings(current_user.id, status=status_filter, page=page, limit=limit)
    return SuccessResponse.create(
        data=PaginatedData(
            items=[BookingResponse.model_validate(b) for b in bookings],
            pagination=PaginationMeta.build(page, limit, total),
        )
    )


@router.get("/{booking_id}", response_model=SuccessResponse[BookingResponse])
def get_booking(
    booking_id: UUID,
    current_user: CurrentUser = Depends(deps.get_current_user),
    service: RoomBookingService = Depends(deps.get_room_booking_service),
):
    booking = service.get_booking(booking_id, current_user.id, current_user.role)
    return SuccessResponse.create(data=BookingResponse.model_validate(booking))


@router.put("/{booking_id}", response_model=SuccessResponse[BookingResponse])
def update_booking_status(
    booking_id: UUID,
    payload: BookingStatusUpdate,
    admin: CurrentUser = Depends(deps.require_admin),
    service: RoomBookingService = Depends(deps.get_room_booking_service),
):
    """Admin status change (approve, reject, activate, complete, cancel)"""
    booking = service.update_booking_status(booking_id, payload.status, payload.notes)
    return SuccessResponse.create(
        message="Booking status updated successfully",
        data=BookingResponse.model_validate(booking),
    )


@router.delete("/{booking_id}", response_model=SuccessResponse[BookingCancellationResponse])
def cancel_booking(
    booking_id: UUID,
    current_user: CurrentUser = Depends(deps.get_current_user),
    service: RoomBookingService = Depends(deps.get_room_booking_service),
):
    result = service.cancel_booking(booking_id, current_user.id, current_user.role)
    return SuccessResponse.create(
        message="Booking cancelled successfully",
        data=BookingCancellationResponse(**result),
    )
