"""
Base repository pattern implementation.

This module provides the repository base class and the error hierarchy shared
by every store in the authorization core.
"""

import logging
from abc import ABC
from contextlib import contextmanager
from typing import TypeVar, Generic, Optional, Dict, Any, Type
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

# Type variable for generic entity type
T = TypeVar('T')


class RepositoryError(Exception):
    """Base exception for repository operations."""
    pass


class NotFoundError(RepositoryError):
    """Exception raised when entity is not found."""

    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(f"{entity_type} with id {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class DuplicateError(RepositoryError):
    """Exception raised when attempting to create duplicate entity."""

    def __init__(self, entity_type: str, criteria: Dict[str, Any]):
        super().__init__(f"{entity_type} already exists with criteria: {criteria}")
        self.entity_type = entity_type
        self.criteria = criteria


class StorageError(RepositoryError):
    """Exception raised when the backing store fails or is unreachable."""

    def __init__(self, operation: str):
        super().__init__(f"Storage operation failed: {operation}")
        self.operation = operation


@contextmanager
def storage_guard(db: Session, operation: str):
    """Roll back and re-raise any SQLAlchemy failure as ``StorageError``.

    Callers that need to tell a unique violation apart catch
    ``IntegrityError`` inside the block themselves.
    """
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(f"Storage failure during {operation}: {e}")
        db.rollback()
        raise StorageError(operation) from e


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base repository providing common lookups.

    Args:
        db: SQLAlchemy database session
        model: SQLAlchemy model class
        key: name of the primary key column used by ``get_by_id``
    """

    def __init__(self, db: Session, model: Type[T], key: str = "id"):
        self.db = db
        self.model = model
        self.key = key

    def get_by_id(self, entity_id: Any) -> T:
        """
        Get entity by ID.

        Raises:
            NotFoundError: If entity not found
        """
        entity = self.get_by_id_optional(entity_id)
        if entity is None:
            raise NotFoundError(self.model.__name__, entity_id)
        return entity

    def get_by_id_optional(self, entity_id: Any) -> Optional[T]:
        """Get entity by ID, returning None if not found."""
        return self.db.query(self.model).filter(
            getattr(self.model, self.key) == entity_id
        ).first()

    def exists(self, entity_id: Any) -> bool:
        return self.get_by_id_optional(entity_id) is not None
