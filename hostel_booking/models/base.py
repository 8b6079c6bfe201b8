"""
Base model configuration for SQLAlchemy ORM.

Provides the declarative base and the mixins shared by all models:
UUID primary keys, timestamps and soft delete.
"""

import enum
from datetime import datetime
from typing import Any, Dict, List, Optional, Type
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, Enum, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Root SQLAlchemy base class."""
    pass


def enum_column(enum_cls: Type[enum.Enum], name: str) -> Enum:
    """Enum column type that stores the enum *values* ("pending") rather than member names"""
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        length=32,
        values_callable=lambda members: [member.value for member in members],
    )


class UUIDMixin:
    """
    Mixin for UUID primary key.

    Provides UUID-based primary key with automatic
    generation using uuid4.
    """

    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=uuid4,
        comment="Unique identifier (UUID v4)",
    )


class TimestampMixin:
    """
    Mixin for automatic timestamp tracking.

    Provides created_at and updated_at fields with
    automatic timezone-aware timestamp management.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        comment="Record creation timestamp (UTC)",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
        comment="Record last update timestamp (UTC)",
    )


class SoftDeleteMixin:
    """
    Mixin for soft delete capability.

    Provides is_deleted flag and deleted_at timestamp
    for logical deletion without data loss.
    """

    is_deleted: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        index=True,
        comment="Soft delete flag",
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Deletion timestamp (UTC)",
    )


class BaseModel(Base, UUIDMixin, TimestampMixin):
    """
    Abstract base model with common fields and methods.
    """

    __abstract__ = True

    def to_dict(self, exclude: Optional[List[str]] = None) -> Dict[str, Any]:
        """
        Convert model instance to dictionary.

        Args:
            exclude: List of column names to exclude

        Returns:
            Dictionary representation of the model
        """
        exclude = exclude or []
        return {
            column.key: getattr(self, column.key)
            for column in self.__table__.columns
            if column.key not in exclude
        }

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"
