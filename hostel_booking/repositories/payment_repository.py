"""
Payment repository.

Status flips out of ``pending`` go through conditional UPDATE statements
whose row count tells the caller whether it won the transition. Two
settlement attempts for one reference can never both see a row count of 1.
"""

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from hostel_booking.core.logging import get_logger
from hostel_booking.models.enums import PaymentStatus, PaymentType
from hostel_booking.models.payment import Payment
from hostel_booking.repositories.base_repository import BaseRepository

logger = get_logger(__name__)


class PaymentRepository(BaseRepository[Payment]):
    """Data access for gateway payments."""

    resource_name = "Payment"

    def __init__(self, db: Session):
        super().__init__(Payment, db)

    # ==================== Lookups ====================

    def find_by_transaction_reference(self, reference: str) -> Optional[Payment]:
        stmt = (
            select(Payment)
            .where(Payment.transaction_reference == reference)
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def list_for_user(
        self,
        user_id: UUID,
        *,
        status: Optional[PaymentStatus] = None,
        payment_type: Optional[PaymentType] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Payment], int]:
        stmt = select(Payment).where(Payment.user_id == user_id)
        if status is not None:
            stmt = stmt.where(Payment.status == status)
        if payment_type is not None:
            stmt = stmt.where(Payment.payment_type == payment_type)
        if start_date is not None:
            stmt = stmt.where(Payment.created_at >= datetime.combine(start_date, time.min))
        if end_date is not None:
            # end_date is inclusive
            stmt = stmt.where(
                Payment.created_at < datetime.combine(end_date + timedelta(days=1), time.min)
            )
        stmt = stmt.order_by(Payment.created_at.desc())
        return self.paginate(stmt, page, limit)

    def total_completed(self, user_id: UUID) -> Decimal:
        stmt = select(func.coalesce(func.sum(Payment.amount), 0)).where(
            Payment.user_id == user_id,
            Payment.status == PaymentStatus.COMPLETED,
        )
        return Decimal(str(self.db.execute(stmt).scalar_one()))

    def last_completed_at(self, user_id: UUID) -> Optional[datetime]:
        stmt = select(func.max(Payment.completed_at)).where(
            Payment.user_id == user_id,
            Payment.status == PaymentStatus.COMPLETED,
        )
        return self.db.execute(stmt).scalar_one()

    # ==================== Guarded Transitions ====================

    def mark_completed_if_pending(
        self,
        reference: str,
        completed_at: datetime,
        gateway_response: Optional[dict] = None,
    ) -> bool:
        """
        Flip ``pending -> completed`` for ``reference``.

        Returns:
            True if this call performed the transition, False if the payment
            was already settled, already failed or does not exist.
        """
        values = {"status": PaymentStatus.COMPLETED, "completed_at": completed_at}
        if gateway_response is not None:
            values["gateway_response"] = gateway_response
        return self._transition_from_pending(reference, values)

    def mark_failed_if_pending(
        self,
        reference: str,
        reason: Optional[str],
        failed_at: datetime,
        gateway_response: Optional[dict] = None,
    ) -> bool:
        """Flip ``pending -> failed`` for ``reference``; same contract as completion."""
        values = {
            "status": PaymentStatus.FAILED,
            "failed_at": failed_at,
            "failure_reason": (reason or "")[:500] or None,
        }
        if gateway_response is not None:
            values["gateway_response"] = gateway_response
        return self._transition_from_pending(reference, values)

    def _transition_from_pending(self, reference: str, values: dict) -> bool:
        stmt = (
            update(Payment)
            .where(
                Payment.transaction_reference == reference,
                Payment.status == PaymentStatus.PENDING,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        won = result.rowcount == 1
        logger.debug(
            "Payment transition attempted",
            extra={
                "reference": reference,
                "target_status": values["status"].value,
                "applied": won,
            },
        )
        return won

    def update_reference(self, payment: Payment, new_reference: str) -> Payment:
        payment.transaction_reference = new_reference
        self.db.flush()
        return payment
