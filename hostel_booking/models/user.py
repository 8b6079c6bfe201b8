"""
User model.

Only the columns the booking and payment flows need: the address
receipts go to and the role used for authorization decisions.
Registration and profile management live in the accounts service.
"""

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_booking.models.base import BaseModel, enum_column
from hostel_booking.models.enums import UserRole

if TYPE_CHECKING:
    from hostel_booking.models.booking import Booking
    from hostel_booking.models.payment import Payment


class User(BaseModel):
    """Account owning bookings and payments."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    first_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    role: Mapped[UserRole] = mapped_column(
        enum_column(UserRole, "user_role_enum"),
        nullable=False,
        default=UserRole.STUDENT,
    )

    bookings: Mapped[List["Booking"]] = relationship(back_populates="user")
    payments: Mapped[List["Payment"]] = relationship(back_populates="user")
