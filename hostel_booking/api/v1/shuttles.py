"""
Shuttle endpoints.
"""

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from hostel_booking.api import deps
from hostel_booking.core.security import CurrentUser
from hostel_booking.schemas.common import SuccessResponse
from hostel_booking.schemas.shuttle import (
    ShuttleAvailabilityResponse,
    ShuttleBookingCreate,
    ShuttleBookingResponse,
    ShuttleCancellationResponse,
    ShuttleRouteResponse,
)
from hostel_booking.services.shuttle_service import ShuttleBookingService

router = APIRouter(prefix="/shuttles", tags=["Shuttles"])


@router.get("/routes", response_model=SuccessResponse[List[ShuttleRouteResponse]])
def list_routes(
    route_from: Optional[str] = Query(None, alias="from"),
    route_to: Optional[str] = Query(None, alias="to"),
    booking_date: Optional[date] = Query(None, alias="date"),
    service: ShuttleBookingService = Depends(deps.get_shuttle_service),
):
    """Active routes; with ``date`` each carries its free seats for that day"""
    routes = service.list_routes(route_from=route_from, route_to=route_to, booking_date=booking_date)
    items = []
    for route, available in routes:
        item = ShuttleRouteResponse.model_validate(route)
        item.available_seats = available
        items.append(item)
    return SuccessResponse.create(data=items)


@router.get(
    "/routes/{route_id}/availability",
    response_model=SuccessResponse[ShuttleAvailabilityResponse],
)
def get_availability(
    route_id: UUID,
    booking_date: date = Query(..., alias="date"),
    service: ShuttleBookingService = Depends(deps.get_shuttle_service),
):
    return SuccessResponse.create(
        data=ShuttleAvailabilityResponse(**service.get_availability(route_id, booking_date))
    )


@router.post(
    "/book",
    response_model=SuccessResponse[ShuttleBookingResponse],
    status_code=status.HTTP_201_CREATED,
)
def book_shuttle(
    payload: ShuttleBookingCreate,
    current_user: CurrentUser = Depends(deps.get_current_user),
    service: ShuttleBookingService = Depends(deps.get_shuttle_service),
):
    booking = service.book_shuttle(
        user_id=current_user.id,
        route_id=payload.route_id,
        booking_date=payload.booking_date,
        seats=payload.seats,
    )
    return SuccessResponse.create(
        message="Shuttle booked successfully",
        data=ShuttleBookingResponse.model_validate(booking),
    )


@router.get("/bookings", response_model=SuccessResponse[List[ShuttleBookingResponse]])
def list_my_shuttle_bookings(
    current_user: CurrentUser = Depends(deps.get_current_user),
    service: ShuttleBookingService = Depends(deps.get_shuttle_service),
):
    bookings = service.list_user_bookings(current_user.id)
    return SuccessResponse.create(data=[ShuttleBookingResponse.model_validate(b) for b in bookings])


@router.delete(
    "/bookings/{booking_id}",
    response_model=SuccessResponse[ShuttleCancellationResponse],
)
def cancel_shuttle_booking(
    booking_id: UUID,
    current_user: CurrentUser = Depends(deps.get_current_user),
    service: ShuttleBookingService = Depends(deps.get_shuttle_service),
):
    result = service.cancel_shuttle_booking(booking_id, current_user.id)
    return SuccessResponse.create(
        message="Shuttle booking cancelled successfully",
        data=ShuttleCancellationResponse(**result),
    )
