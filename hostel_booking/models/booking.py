"""
Booking model.

A stay in one room over a closed date interval, priced per whole month.
The balance columns are only ever changed by settlement of a completed
payment; see PaymentService.apply_payment_completion.
"""

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_booking.models.base import BaseModel, SoftDeleteMixin, enum_column
from hostel_booking.models.enums import BookingStatus

if TYPE_CHECKING:
    from hostel_booking.models.payment import Payment
    from hostel_booking.models.room import Room
    from hostel_booking.models.user import User


class Booking(BaseModel, SoftDeleteMixin):
    """Room booking with its running balance."""

    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("check_out_date > check_in_date", name="ck_bookings_date_order"),
        CheckConstraint("duration_months >= 1", name="ck_bookings_min_duration"),
        CheckConstraint("amount_paid >= 0", name="ck_bookings_paid_non_negative"),
        CheckConstraint("outstanding_balance >= 0", name="ck_bookings_balance_non_negative"),
        Index("ix_bookings_room_dates", "room_id", "check_in_date", "check_out_date"),
    )

    # ==================== Foreign Keys ====================
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    room_id: Mapped[UUID] = mapped_column(
        ForeignKey("rooms.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    # ==================== Stay ====================
    check_in_date: Mapped[date] = mapped_column(Date, nullable=False)
    check_out_date: Mapped[date] = mapped_column(Date, nullable=False)
    duration_months: Mapped[int] = mapped_column(Integer, nullable=False)

    # ==================== Balance ====================
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
        comment="price_per_month x duration_months",
    )
    amount_paid: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
        default=Decimal("0"),
    )
    outstanding_balance: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
        comment="max(0, total_amount - amount_paid)",
    )

    status: Mapped[BookingStatus] = mapped_column(
        enum_column(BookingStatus, "booking_status_enum"),
        nullable=False,
        default=BookingStatus.PENDING,
        index=True,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ==================== Relationships ====================
    user: Mapped["User"] = relationship(back_populates="bookings")
    room: Mapped["Room"] = relationship(back_populates="bookings")
    payments: Mapped[List["Payment"]] = relationship(back_populates="booking")

    def apply_payment(self, amount: Decimal) -> None:
        """
        Credit a settled payment to this booking.

        Terminal bookings keep their balance frozen; callers check
        ``status.is_terminal`` before crediting.
        """
        self.amount_paid = (self.amount_paid or Decimal("0")) + amount
        self.outstanding_balance = max(Decimal("0"), self.total_amount - self.amount_paid)
        if self.outstanding_balance <= 0 and not self.status.is_terminal:
            self.status = BookingStatus.ACTIVE
