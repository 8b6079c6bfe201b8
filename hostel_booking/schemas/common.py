"""
Base schema and the standard API response envelope.

Every endpoint answers with ``{success, message?, data?, errors?}``.
"""

from __future__ import annotations

import math
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

__all__ = [
    "BaseSchema",
    "SuccessResponse",
    "ErrorDetail",
    "ErrorResponse",
    "PaginationMeta",
    "PaginatedData",
]


class BaseSchema(BaseModel):
    """
    Base schema with common Pydantic configuration.

    All application-facing schemas inherit from this so ORM objects can be
    validated directly and strings are stripped consistently.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=False,
        str_strip_whitespace=True,
        validate_assignment=True,
    )


class SuccessResponse(BaseSchema, Generic[T]):
    """Standard success response."""

    success: bool = Field(default=True, description="Success flag")
    message: Optional[str] = Field(default=None, description="Response message")
    data: Optional[T] = Field(default=None, description="Response data")

    @classmethod
    def create(cls, message: Optional[str] = None, data: Optional[T] = None):
        """Create success response."""
        return cls(success=True, message=message, data=data)


class ErrorDetail(BaseSchema):
    """Error detail information."""

    field: Optional[str] = Field(default=None, description="Field name causing error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseSchema):
    """Standard error response."""

    success: bool = Field(default=False, description="Success flag")
    message: str = Field(..., description="Error message")
    errors: Optional[List[ErrorDetail]] = Field(default=None, description="Detailed errors")
    error_code: Optional[str] = Field(default=None, description="Application error code")


class PaginationMeta(BaseSchema):
    """Pagination metadata."""

    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total: int = Field(..., ge=0)
    pages: int = Field(..., ge=0)

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationMeta":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit) if limit else 0)


class PaginatedData(BaseSchema, Generic[T]):
    """A page of items with its metadata."""

    items: List[T] = Field(default_factory=list)
    pagination: PaginationMeta
