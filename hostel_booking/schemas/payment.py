"""
Payment schemas.

This module defines the request bodies for payment initialization and the
response shapes for payments, history, balances and webhook acknowledgements.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import Field, field_validator

from hostel_booking.models.enums import PaymentMethod, PaymentStatus, PaymentType
from hostel_booking.schemas.common import BaseSchema, PaginationMeta

__all__ = [
    "PaymentInitializeRequest",
    "PaymentInitializeResponse",
    "PaymentResponse",
    "PaymentHistoryFilters",
    "PaymentHistorySummary",
    "PaymentHistoryResponse",
    "BalanceResponse",
    "WebhookAck",
    "UnmatchedWebhookEventResponse",
]


class PaymentInitializeRequest(BaseSchema):
    """
    Payment initialization request.

    For ``room_booking`` payments ``reference_id`` is the booking id.
    """

    amount: Decimal = Field(..., description="Amount in major currency units")
    payment_type: PaymentType = Field(..., description="What the payment is for")
    reference_id: Optional[str] = Field(default=None, max_length=100)
    payment_method: PaymentMethod = Field(default=PaymentMethod.PAYSTACK)

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        """Validate payment amount."""
        if v <= 0:
            raise ValueError("Payment amount must be greater than zero")
        return v.quantize(Decimal("0.01"))


class PaymentInitializeResponse(BaseSchema):
    payment_id: UUID
    reference: str
    payment_link: str
    access_code: Optional[str] = None
    amount: Decimal
    currency: str


class PaymentResponse(BaseSchema):
    id: UUID
    user_id: UUID
    booking_id: Optional[UUID] = None
    amount: Decimal
    currency: str
    payment_method: PaymentMethod
    payment_type: PaymentType
    reference_id: Optional[str] = None
    transaction_reference: str
    status: PaymentStatus
    completed_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    failure_reason: Optional[str] = None
    created_at: datetime


class PaymentHistoryFilters(BaseSchema):
    status: Optional[PaymentStatus] = None
    payment_type: Optional[PaymentType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)


class PaymentHistorySummary(BaseSchema):
    total_paid: Decimal
    outstanding_balance: Decimal


class PaymentHistoryResponse(BaseSchema):
    items: List[PaymentResponse]
    pagination: PaginationMeta
    summary: PaymentHistorySummary


class BalanceResponse(BaseSchema):
    total_amount: Decimal
    amount_paid: Decimal
    outstanding_balance: Decimal
    total_payments: Decimal
    last_payment_at: Optional[datetime] = None


class WebhookAck(BaseSchema):
    received: bool = True
    error: Optional[str] = None


class UnmatchedWebhookEventResponse(BaseSchema):
    id: UUID
    event: str
    reference: str
    payload: dict
    received_at: datetime
    resolved_at: Optional[datetime] = None
    resolution_note: Optional[str] = None
