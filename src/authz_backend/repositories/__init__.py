"""
Repository pattern implementation for direct database access.
"""

from .base import (
    BaseRepository,
    RepositoryError,
    NotFoundError,
    DuplicateError,
    StorageError,
)
from .user import UserRepository
from .group import GroupDirectory

__all__ = [
    "BaseRepository",
    "RepositoryError",
    "NotFoundError",
    "DuplicateError",
    "StorageError",
    "UserRepository",
    "GroupDirectory",
]
