"""
API v1 Router - Main Entry Point
Aggregates all v1 API endpoints
"""
from fastapi import APIRouter

from hostel_booking.api.v1 import bookings, payments, rooms, shuttles

router = APIRouter(
    responses={
        400: {"description": "Bad Request"},
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Not Found"},
        409: {"description": "Conflict"},
        500: {"description": "Internal Server Error"},
    }
)

router.include_router(rooms.router)
router.include_router(bookings.router)
router.include_router(shuttles.router)
router.include_router(payments.router)
