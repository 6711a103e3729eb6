"""
Role templates: named sets of capability bitsets per (resource, access kind)
applied administratively to a user at a scope.
"""

import logging
from typing import Optional
from sqlalchemy.orm import Session

from authz_backend.interface.permissions import AccessKind, CapabilityBitset
from authz_backend.model.permission import Role, RoleCapability
from authz_backend.permissions.catalog import ResourceCatalog
from authz_backend.permissions.store import GrantStore
from authz_backend.repositories.base import DuplicateError, NotFoundError, storage_guard

logger = logging.getLogger(__name__)

CREATED_GROUP_ROLE_KEY = "created_group"


def get_role(db: Session, role_key: str) -> Optional[Role]:
    with storage_guard(db, "load role"):
        return db.query(Role).filter(Role.key == role_key).first()


def create_role(db: Session, key: str, name: str) -> Role:
    if get_role(db, key) is not None:
        raise DuplicateError("Role", {"key": key})

    with storage_guard(db, "create role"):
        role = Role(key=key, name=name)
        db.add(role)
        db.commit()
        db.refresh(role)

    logger.info(f"Created role {key}")
    return role


def set_role_capability(db: Session, role_key: str, resource_key: str, kind: AccessKind, bitset: CapabilityBitset) -> RoleCapability:
    if get_role(db, role_key) is None:
        raise NotFoundError("Role", role_key)
    if kind not in ResourceCatalog(db).allowed_kinds(resource_key):
        raise ValueError(f"Access kind {kind.value} is not allowed on resource {resource_key}")

    with storage_guard(db, "set role capability"):
        entry = db.query(RoleCapability).filter(
            RoleCapability.role_key == role_key,
            RoleCapability.resource_key == resource_key,
            RoleCapability.access_kind == kind.value,
        ).first()

        if entry is None:
            entry = RoleCapability(role_key=role_key, resource_key=resource_key, access_kind=kind.value)
            db.add(entry)

        entry.act = bitset.act
        entry.delegate = bitset.delegate
        entry.super_delegate = bitset.super_delegate
        db.commit()
        db.refresh(entry)

    return entry


def apply_role(
    db: Session,
    role_key: str,
    user_id: str,
    group_id: Optional[str] = None,
    actor_id: Optional[str] = None,
    missing_ok: bool = False,
) -> int:
    """Write the role's template bits for ``user_id`` at the scope, bypassing delegation checks.

    Returns the number of bits written.
    """
    role = get_role(db, role_key)
    if role is None:
        if missing_ok:
            logger.debug(f"Role {role_key} not seeded, nothing applied to {user_id}")
            return 0
        raise NotFoundError("Role", role_key)

    store = GrantStore(db)
    applied = 0
    for entry in role.role_capabilities:
        bitset = CapabilityBitset(act=entry.act, delegate=entry.delegate, super_delegate=entry.super_delegate)
        applied += store.set_bits(user_id, entry.resource_key, group_id, AccessKind(entry.access_kind), bitset, actor_id)

    logger.info(f"Applied role {role_key} to {user_id} in scope {group_id or 'global'} ({applied} bits)")
    return applied
