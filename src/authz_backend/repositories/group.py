"""
Read side of the group directory, plus group registration.

Groups are only scoping keys for capabilities; a deleted group can no longer
be used as a scope.
"""

import logging
from typing import Optional
from sqlalchemy.orm import Session

from .base import BaseRepository, NotFoundError, storage_guard
from ..model.group import Group

logger = logging.getLogger(__name__)


class GroupDirectory(BaseRepository[Group]):

    def __init__(self, db: Session):
        super().__init__(db, Group)

    def get_active_group(self, group_id: str) -> Group:
        """
        Raises:
            NotFoundError: If the group does not exist or is deleted
        """
        with storage_guard(self.db, "load group"):
            group = self.get_by_id_optional(group_id)
        if group is None or group.state == 'deleted':
            raise NotFoundError("Group", group_id)
        return group

    def create_group(self, name: str, created_by: str, parent_id: Optional[str] = None) -> Group:
        """Register a group and give its creator the ``created_group`` role inside it."""
        from ..permissions.roles import CREATED_GROUP_ROLE_KEY, apply_role

        if parent_id is not None:
            self.get_active_group(parent_id)

        with storage_guard(self.db, "create group"):
            group = Group(name=name, parent_id=parent_id, created_by=created_by, updated_by=created_by)
            self.db.add(group)
            self.db.commit()
            self.db.refresh(group)

        logger.info(f"Created group {group.id} ({name}) for user {created_by}")

        applied = apply_role(self.db, CREATED_GROUP_ROLE_KEY, created_by, group.id, actor_id=created_by, missing_ok=True)
        logger.debug(f"Applied {applied} bits of role {CREATED_GROUP_ROLE_KEY} to {created_by} in group {group.id}")

        return group

    def delete_group(self, group_id: str, deleted_by: str) -> Group:
        """Mark a group deleted; its capabilities stay stored but the scope becomes unusable."""
        group = self.get_active_group(group_id)
        with storage_guard(self.db, "delete group"):
            group.state = 'deleted'
            group.updated_by = deleted_by
            self.db.commit()
            self.db.refresh(group)
        logger.info(f"Deleted group {group_id}")
        return group
