"""
Unmatched webhook events.

Gateway events whose reference matched no payment are kept here for manual
reconciliation instead of being dropped.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from hostel_booking.models.base import BaseModel


class UnmatchedWebhookEvent(BaseModel):
    """Dead-lettered gateway event."""

    __tablename__ = "unmatched_webhook_events"

    event: Mapped[str] = mapped_column(String(100), nullable=False)
    reference: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)
    received_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    resolution_note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @property
    def is_resolved(self) -> bool:
        return self.resolved_at is not None
