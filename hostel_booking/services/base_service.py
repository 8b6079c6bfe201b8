"""
Base service class providing common functionality for all services.
"""

from contextlib import contextmanager
from datetime import date, datetime
from typing import Callable, Iterator

from sqlalchemy.orm import Session

from hostel_booking.core.logging import get_logger
from hostel_booking.utils.date_utils import now_utc, today_utc


class BaseService:
    """
    Base service with common behaviors:
    - Shared logger and db session
    - Transaction management utilities
    - Injectable clock so date rules are testable
    """

    def __init__(
        self,
        db_session: Session,
        clock: Callable[[], datetime] = now_utc,
        today: Callable[[], date] = today_utc,
    ):
        """
        Initialize base service.

        Args:
            db_session: SQLAlchemy database session
            clock: Returns the current timezone-aware datetime
            today: Returns the current date
        """
        self.db: Session = db_session
        self.clock = clock
        self.today = today
        self._logger = get_logger(self.__class__.__module__).add_context(
            service=self.__class__.__name__
        )

    # -------------------------------------------------------------------------
    # Transaction Management
    # -------------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Context manager for database transactions with automatic rollback.

        Example:
            with self.transaction():
                room = self.rooms.get_by_id(room_id, for_update=True)
                ...
                # commit on success, rollback on exception
        """
        try:
            yield self.db
            self._commit()
        except Exception as e:
            self._rollback()
            self._logger.debug(f"Transaction rolled back: {type(e).__name__}: {e}")
            raise

    def _commit(self) -> None:
        """Commit the current transaction with error handling."""
        try:
            self.db.commit()
            self._logger.debug("Transaction committed successfully")
        except Exception as e:
            self._logger.error(f"Commit failed: {e}", exc_info=True)
            self._rollback()
            raise

    def _rollback(self) -> None:
        """Rollback the current transaction, suppressing rollback errors."""
        try:
            self.db.rollback()
        except Exception as e:
            # Rollback errors must not mask the original error
            self._logger.warning(f"Rollback failed: {e}")
