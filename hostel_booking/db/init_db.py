"""Database initialization utilities."""
from typing import Optional

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from hostel_booking.core.logging import get_logger
from hostel_booking.models import Base

logger = get_logger(__name__)


def init_db(bind: Optional[Engine] = None) -> None:
    """
    Initialize the database by creating all tables.

    Note: This is suitable for development/testing only.
    For production, use migrations instead.
    """
    if bind is None:
        from hostel_booking.db.session import engine as bind

    try:
        existing_tables = inspect(bind).get_table_names()
        Base.metadata.create_all(bind=bind)
        created = len(Base.metadata.tables) - len(existing_tables)
        logger.info(f"Database initialized ({max(created, 0)} tables created)")
    except Exception as e:
        logger.error(f"Error initializing database: {e}")
        raise

