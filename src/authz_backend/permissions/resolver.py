"""
Permission resolver.

Turns stored capability rows into the read-only ``PermissionInfo`` projection
and answers single-resource lookups for the gate and the delegation path.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple
from sqlalchemy.orm import Session

from authz_backend.interface.permissions import (
    AccessKind,
    AccessKindBits,
    CapabilityBitset,
    OrderDir,
    PermissionInfo,
)
from authz_backend.permissions.catalog import ResourceCatalog, ordered_kinds
from authz_backend.permissions.store import GrantStore, covering_scopes, scope_key
from authz_backend.settings import settings

logger = logging.getLogger(__name__)


class PermissionResolver:

    def __init__(self, db: Session, store: Optional[GrantStore] = None, catalog: Optional[ResourceCatalog] = None):
        self.db = db
        self.store = store or GrantStore(db)
        self.catalog = catalog or ResourceCatalog(db)

    def resolve(
        self,
        user_id: str,
        group_id: Optional[str] = None,
        resource_filter: Optional[Iterable[str]] = None,
        restrict_to_group_scope: bool = False,
        page: int = 0,
        page_size: Optional[int] = None,
        order: OrderDir = OrderDir.DESC,
    ) -> Tuple[List[PermissionInfo], int]:
        """List the user's permissions in a scope.

        Without a group only global grants count. With a group, either only
        that group's rows (``restrict_to_group_scope``) or the per-bit OR of
        global and group rows.
        """
        page_size = page_size or settings.DEFAULT_PAGE_SIZE
        resource_filter = list(resource_filter) if resource_filter is not None else None

        if group_id is None:
            scopes = covering_scopes(None)
        elif restrict_to_group_scope:
            scopes = [scope_key(group_id)]
        else:
            scopes = covering_scopes(group_id)

        total_count = self.store.count_granted_resources(user_id, scopes, resource_filter)
        keys = self.store.page_granted_resources(user_id, scopes, resource_filter, page * page_size, page_size, order)
        if not keys:
            return [], total_count

        bitsets = self.store.merged_bitsets(user_id, scopes, keys)
        resources = {resource.key: resource for resource in self.catalog.get_many(keys)}

        permission_list = []
        for key in keys:
            resource = resources[key]
            allowed = ordered_kinds(AccessKind(entry.access_kind) for entry in resource.access_kinds)
            stored = bitsets.get(key, {})
            permission_list.append(PermissionInfo(
                resource_key=key,
                display_name=resource.display_name,
                access_kinds=[AccessKindBits.from_bitset(kind, stored.get(kind, CapabilityBitset())) for kind in allowed],
                group_id=group_id,
            ))

        return permission_list, total_count

    def capabilities_for(self, user_id: str, resource_key: str, group_id: Optional[str] = None) -> Dict[AccessKind, CapabilityBitset]:
        """Bitsets per allowed access kind for one resource, global OR group."""
        allowed = ordered_kinds(self.catalog.allowed_kinds(resource_key))
        stored = self.store.merged_bitsets(user_id, covering_scopes(group_id), [resource_key]).get(resource_key, {})
        return {kind: stored.get(kind, CapabilityBitset()) for kind in allowed}

    def effective_access_kinds(self, user_id: str, resource_keys: Iterable[str], group_id: Optional[str] = None) -> Dict[str, List[AccessKind]]:
        """Per resource, the access kinds the user holds ``act`` for in the scope."""
        resource_keys = list(resource_keys)
        merged = self.store.merged_bitsets(user_id, covering_scopes(group_id), resource_keys)
        return {
            key: ordered_kinds(kind for kind, bitset in merged.get(key, {}).items() if bitset.act)
            for key in resource_keys
        }
