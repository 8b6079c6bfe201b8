"""
Repository for dead-lettered gateway webhook events.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from hostel_booking.models.webhook_event import UnmatchedWebhookEvent
from hostel_booking.repositories.base_repository import BaseRepository


class WebhookEventRepository(BaseRepository[UnmatchedWebhookEvent]):
    resource_name = "Webhook event"

    def __init__(self, db: Session):
        super().__init__(UnmatchedWebhookEvent, db)

    def record(self, event: str, reference: str, payload: dict) -> UnmatchedWebhookEvent:
        return self.add(
            UnmatchedWebhookEvent(event=event, reference=reference, payload=payload)
        )

    def list_events(self, include_resolved: bool = False) -> List[UnmatchedWebhookEvent]:
        stmt = self._base_query()
        if not include_resolved:
            stmt = stmt.where(UnmatchedWebhookEvent.resolved_at.is_(None))
        stmt = stmt.order_by(UnmatchedWebhookEvent.received_at.desc())
        return list(self.db.execute(stmt).scalars().all())

    def resolve(
        self,
        event: UnmatchedWebhookEvent,
        note: Optional[str],
        resolved_at: datetime,
    ) -> UnmatchedWebhookEvent:
        event.resolved_at = resolved_at
        event.resolution_note = note
        self.db.flush()
        return event
