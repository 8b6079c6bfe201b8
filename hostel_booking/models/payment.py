"""
Payment model.

One payment attempt through the gateway. ``transaction_reference`` is the
correlation and idempotency key shared with the gateway; status moves
from pending to completed or failed exactly once.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlalchemy import JSON, CheckConstraint, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_booking.models.base import BaseModel, enum_column
from hostel_booking.models.enums import PaymentMethod, PaymentStatus, PaymentType

if TYPE_CHECKING:
    from hostel_booking.models.booking import Booking
    from hostel_booking.models.user import User


class Payment(BaseModel):
    """
    Payment model for tracking gateway transactions.
    """

    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
    )

    # ==================== Foreign Keys ====================
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    booking_id: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("bookings.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # ==================== Core Payment Details ====================
    amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
        comment="Payment amount in major currency units",
    )
    currency: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
        default="GHS",
        comment="Currency code (ISO 4217)",
    )
    payment_method: Mapped[PaymentMethod] = mapped_column(
        enum_column(PaymentMethod, "payment_method_enum"),
        nullable=False,
        default=PaymentMethod.PAYSTACK,
    )
    payment_type: Mapped[PaymentType] = mapped_column(
        enum_column(PaymentType, "payment_type_enum"),
        nullable=False,
        index=True,
    )
    reference_id: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        comment="Caller supplied reference (booking id, fee code, ...)",
    )

    # ==================== Transaction Details ====================
    transaction_reference: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        index=True,
        comment="Gateway reference, unique idempotency key",
    )
    gateway_response: Mapped[Optional[dict]] = mapped_column(
        JSON,
        nullable=True,
        comment="Last raw gateway payload seen for this payment",
    )

    # ==================== Payment Status ====================
    status: Mapped[PaymentStatus] = mapped_column(
        enum_column(PaymentStatus, "payment_status_enum"),
        nullable=False,
        default=PaymentStatus.PENDING,
        index=True,
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="When payment was successfully completed",
    )
    failed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    failure_reason: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # ==================== Relationships ====================
    user: Mapped["User"] = relationship(back_populates="payments")
    booking: Mapped[Optional["Booking"]] = relationship(back_populates="payments")
