"""
Delegation enforcer.

A grantor hands a subset of its own authority to another user. Each requested
bit is written on its own; bits the grantor has no authority for are skipped
and only reflected in the returned count.
"""

import logging
from typing import List, Optional
from sqlalchemy.orm import Session

from authz_backend.interface.permissions import CapabilityBit, NewPermission, RequestedBits
from authz_backend.permissions.catalog import ResourceCatalog
from authz_backend.permissions.store import GrantStore
from authz_backend.repositories.group import GroupDirectory
from authz_backend.repositories.user import UserRepository

logger = logging.getLogger(__name__)


class DelegationEnforcer:

    def __init__(self, db: Session, store: Optional[GrantStore] = None, catalog: Optional[ResourceCatalog] = None):
        self.db = db
        self.store = store or GrantStore(db)
        self.catalog = catalog or ResourceCatalog(db)

    def _check_target(self, grantee_id: str, group_id: Optional[str]):
        UserRepository(self.db).get_by_id(grantee_id)
        if group_id is not None:
            GroupDirectory(self.db).get_active_group(group_id)

    def set_permission(
        self,
        grantor_id: str,
        grantee_id: str,
        resource_key: str,
        group_id: Optional[str],
        requested: List[RequestedBits],
    ) -> int:
        """Write the requested bits the grantor may confer; return how many were written.

        Raises:
            NotFoundError: If the grantee, the group or the resource does not exist
        """
        self._check_target(grantee_id, group_id)
        allowed = self.catalog.allowed_kinds(resource_key)
        applied = 0

        for entry in requested:
            if entry.kind not in allowed:
                logger.debug(f"Skipping {resource_key}.{entry.kind.value}: kind not allowed on resource")
                continue

            for bit, value in entry.requested().items():
                if bit == CapabilityBit.super_delegate:
                    logger.debug(f"Skipping {resource_key}.{entry.kind.value}.super_delegate for {grantee_id}")
                    continue

                if self.store.conditional_set_bit(grantor_id, grantee_id, resource_key, group_id, entry.kind, bit, value):
                    applied += 1
                else:
                    logger.debug(
                        f"{grantor_id} lacks authority for {resource_key}.{entry.kind.value}.{bit.value} "
                        f"in scope {group_id or 'global'}"
                    )

        if applied:
            logger.info(f"{grantor_id} set {applied} bit(s) of {resource_key} on {grantee_id} in scope {group_id or 'global'}")

        return applied

    def apply(
        self,
        grantor_id: str,
        grantee_id: str,
        group_id: Optional[str],
        new_permissions: List[NewPermission],
    ) -> List[str]:
        """Delegate a batch; returns the resource keys where at least one bit was written.

        The grantee, the group and every resource key are checked before any write.
        """
        self._check_target(grantee_id, group_id)
        for permission in new_permissions:
            self.catalog.get_resource(permission.resource_key)

        updated = []
        for permission in new_permissions:
            applied = self.set_permission(grantor_id, grantee_id, permission.resource_key, group_id, permission.bits)
            if applied and permission.resource_key not in updated:
                updated.append(permission.resource_key)
        return updated
