"""
User repository for direct database access.
"""

import logging
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .base import BaseRepository, DuplicateError, storage_guard
from ..model.auth import User

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Lookups and registration of principals."""

    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def create_user(self, email: str, name: str) -> User:
        """
        Register a new user.

        Raises:
            DuplicateError: If the email is already taken
        """
        with storage_guard(self.db, "create user"):
            user = User(email=email, name=name)
            self.db.add(user)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                raise DuplicateError("User", {"email": email})
            self.db.refresh(user)

        logger.info(f"Created user {user.id} ({email})")
        return user
