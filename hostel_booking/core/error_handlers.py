"""
Exception handlers translating errors into the standard response envelope.
"""

from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from hostel_booking.config.settings import settings
from hostel_booking.core.exceptions import BaseAppException, ErrorCode
from hostel_booking.core.logging import get_logger

logger = get_logger(__name__)


def error_body(
    message: str,
    error_code: str,
    errors: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "message": message, "error_code": error_code}
    if errors:
        body["errors"] = errors
    return body


async def handle_application_exception(request: Request, exception: BaseAppException) -> JSONResponse:
    """Handle custom application exceptions"""
    log = logger.error if exception.status_code >= 500 else logger.warning
    log(
        f"Application exception: {exception.error_code.value} - {exception.message}",
        extra={
            "error_code": exception.error_code.value,
            "details": exception.details,
            "path": request.url.path,
            "method": request.method,
        },
    )

    errors = getattr(exception, "field_errors", None)
    return JSONResponse(
        status_code=exception.status_code,
        content=error_body(exception.message, exception.error_code.value, errors),
    )


async def handle_request_validation_error(request: Request, exception: RequestValidationError) -> JSONResponse:
    """Handle FastAPI request validation errors as 400 with per-field messages"""
    errors = []
    for error in exception.errors():
        # drop the leading "body"/"query"/"path" segment
        loc = [str(part) for part in error.get("loc", ())[1:]]
        errors.append({"field": ".".join(loc) or None, "message": error.get("msg", "Invalid value")})

    logger.warning(
        f"Validation error: {len(errors)} field(s) failed validation",
        extra={"path": request.url.path, "method": request.method},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Validation failed", ErrorCode.VALIDATION_ERROR.value, errors),
    )


async def handle_integrity_error(request: Request, exception: IntegrityError) -> JSONResponse:
    logger.warning(
        f"Integrity constraint violation: {exception.orig}",
        extra={"path": request.url.path, "method": request.method},
    )
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=error_body("Resource conflicts with existing data", ErrorCode.CONFLICT.value),
    )


async def handle_unexpected_exception(request: Request, exception: Exception) -> JSONResponse:
    """Handle unexpected exceptions; details are hidden outside development"""
    logger.exception(
        f"Unhandled exception: {type(exception).__name__}",
        extra={"path": request.url.path, "method": request.method},
    )
    message = "Internal server error" if settings.is_production() else str(exception) or "Internal server error"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(message, ErrorCode.INTERNAL_ERROR.value),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BaseAppException, handle_application_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(IntegrityError, handle_integrity_error)
    app.add_exception_handler(Exception, handle_unexpected_exception)
