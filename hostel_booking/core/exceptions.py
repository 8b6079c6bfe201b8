"""
Custom Exceptions for the Hostel Booking Service

This module defines custom exception classes used throughout the application
for better error handling and debugging. Every exception carries the HTTP
status the API layer should answer with.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    """Standard error codes for the application"""
    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    CONFLICT = "CONFLICT"

    # Authentication & Authorization
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    AUTHORIZATION_FAILED = "AUTHORIZATION_FAILED"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    INVALID_STATE_TRANSITION = "INVALID_STATE_TRANSITION"

    # Business logic errors
    BOOKING_CONFLICT = "BOOKING_CONFLICT"
    ROOM_UNAVAILABLE = "ROOM_UNAVAILABLE"
    INSUFFICIENT_CAPACITY = "INSUFFICIENT_CAPACITY"
    PAYMENT_FAILED = "PAYMENT_FAILED"

    # External service errors
    PAYMENT_GATEWAY_ERROR = "PAYMENT_GATEWAY_ERROR"


class BaseAppException(Exception):
    """
    Base exception class for all application exceptions.

    Provides consistent error handling across the application with
    structured error information.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format"""
        return {
            "error": {
                "message": self.message,
                "code": self.error_code.value,
                "details": self.details,
                "type": self.__class__.__name__
            }
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', error_code='{self.error_code.value}')"


# ========================================
# Request Exceptions
# ========================================

class ValidationError(BaseAppException):
    """Exception raised when input is malformed or out of range"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[List[Dict[str, str]]] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        status_code: int = 400
    ):
        self.field_errors = field_errors or []
        details = {"field_errors": self.field_errors} if self.field_errors else {}
        super().__init__(message, error_code, details, status_code)


class AuthenticationError(BaseAppException):
    """Exception raised when the caller cannot be identified"""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, ErrorCode.AUTHENTICATION_FAILED, None, 401)


class AuthorizationError(BaseAppException):
    """Exception raised when the caller may not act on a resource"""

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message, ErrorCode.AUTHORIZATION_FAILED, None, 403)


class ResourceNotFoundError(BaseAppException):
    """Exception raised when a requested resource is not found"""

    def __init__(
        self,
        resource_type: str = "Resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None
    ):
        if not message:
            message = f"{resource_type} not found"

        details = {
            "resource_type": resource_type,
            "resource_id": str(resource_id) if resource_id is not None else None
        }
        super().__init__(message, ErrorCode.RESOURCE_NOT_FOUND, details, 404)


# ========================================
# Inventory Exceptions
# ========================================

class ConflictError(BaseAppException):
    """Exception raised when inventory state does not allow the operation"""

    def __init__(
        self,
        message: str = "Resource conflict",
        error_code: ErrorCode = ErrorCode.CONFLICT,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, error_code, details, 409)


class BookingConflictError(ConflictError):
    """Exception raised when requested dates overlap an existing booking"""

    def __init__(
        self,
        message: str = "Room is already booked for the selected dates",
        room_id: Optional[str] = None,
        conflicting_booking_id: Optional[str] = None
    ):
        details = {
            "room_id": str(room_id) if room_id else None,
            "conflicting_booking_id": str(conflicting_booking_id) if conflicting_booking_id else None,
        }
        super().__init__(message, ErrorCode.BOOKING_CONFLICT, details)


class InsufficientSeatsError(ConflictError):
    """Exception raised when a shuttle route has fewer free seats than requested"""

    def __init__(self, requested: int, available: int):
        super().__init__(
            "Not enough seats available",
            ErrorCode.INSUFFICIENT_CAPACITY,
            {"requested_seats": requested, "available_seats": available},
        )


# ========================================
# Payment Exceptions
# ========================================

class PaymentVerificationError(BaseAppException):
    """Exception raised when the gateway does not confirm a transaction"""

    def __init__(
        self,
        message: str = "Payment verification failed",
        reference: Optional[str] = None,
        gateway_status: Optional[str] = None
    ):
        details = {"reference": reference, "gateway_status": gateway_status}
        super().__init__(message, ErrorCode.PAYMENT_FAILED, details, 400)


class PaymentGatewayError(BaseAppException):
    """Exception raised when the payment gateway cannot be reached or refuses a call"""

    def __init__(
        self,
        message: str = "Payment gateway request failed",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, ErrorCode.PAYMENT_GATEWAY_ERROR, details, 502)


class WebhookPayloadError(BaseAppException):
    """Exception raised when a webhook body cannot be parsed into an event"""

    def __init__(self, message: str = "Invalid event format"):
        super().__init__(message, ErrorCode.VALIDATION_ERROR, None, 400)


__all__ = [
    "ErrorCode",
    "BaseAppException",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "ResourceNotFoundError",
    "ConflictError",
    "BookingConflictError",
    "InsufficientSeatsError",
    "PaymentVerificationError",
    "PaymentGatewayError",
    "WebhookPayloadError",
]
