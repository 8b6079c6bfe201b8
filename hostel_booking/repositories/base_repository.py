"""
Base repository with standardized CRUD operations and error handling.

Repositories never commit: the owning service decides transaction
boundaries, so a check and the write it guards can share one transaction.
"""

from typing import Any, Generic, List, Optional, Tuple, Type, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from hostel_booking.core.exceptions import ConflictError, ResourceNotFoundError
from hostel_booking.core.logging import get_logger
from hostel_booking.models.base import BaseModel, SoftDeleteMixin

logger = get_logger(__name__)

# Type variable for model classes
ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseRepository(Generic[ModelType]):
    """
    Base repository with standardized operations.
    """

    resource_name: str = "Resource"

    def __init__(self, model: Type[ModelType], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db
        self._is_soft_delete = issubclass(model, SoftDeleteMixin)

    # ==================== Query Helpers ====================

    def _base_query(self, include_deleted: bool = False) -> Select:
        stmt = select(self.model)
        if self._is_soft_delete and not include_deleted:
            stmt = stmt.where(self.model.is_deleted.is_(False))
        return stmt

    # ==================== Create Operations ====================

    def add(self, entity: ModelType) -> ModelType:
        """
        Stage a new entity and flush it so generated columns are populated.

        Raises:
            ConflictError: If a unique constraint is violated
        """
        try:
            self.db.add(entity)
            self.db.flush()
        except IntegrityError as e:
            logger.warning(f"Integrity error creating {self.model.__name__}: {e.orig}")
            raise ConflictError(f"{self.resource_name} conflicts with existing data") from e

        logger.debug(f"Created {self.model.__name__} with id: {entity.id}")
        return entity

    # ==================== Read Operations ====================

    def find_by_id(
        self,
        id: UUID,
        include_deleted: bool = False,
        for_update: bool = False,
    ) -> Optional[ModelType]:
        """
        Find entity by ID.

        Args:
            id: Entity ID
            include_deleted: Include soft-deleted entities
            for_update: Lock the row until the current transaction ends

        Returns:
            Entity or None
        """
        stmt = self._base_query(include_deleted).where(self.model.id == id)
        if for_update:
            # reload so a locked read never returns stale identity-map state
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_id(
        self,
        id: UUID,
        include_deleted: bool = False,
        for_update: bool = False,
    ) -> ModelType:
        """
        Get entity by ID or raise exception.

        Raises:
            ResourceNotFoundError: If entity not found
        """
        entity = self.find_by_id(id, include_deleted=include_deleted, for_update=for_update)
        if entity is None:
            raise ResourceNotFoundError(self.resource_name, str(id))
        return entity

    def paginate(self, stmt: Select, page: int, limit: int) -> Tuple[List[Any], int]:
        """
        Run ``stmt`` for one page and count the full result set.

        Returns:
            (items, total)
        """
        total = self.db.execute(
            select(func.count()).select_from(stmt.order_by(None).subquery())
        ).scalar_one()
        items = self.db.execute(
            stmt.offset((page - 1) * limit).limit(limit)
        ).scalars().all()
        return list(items), total
