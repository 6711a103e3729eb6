"""
Capability grant store.

Rows of ``user_capability`` hold one act/delegate/super_delegate bitset per
(user, resource, scope, access kind). Every write commits on its own; the
delegated write path carries the grantor's authority check inside the
statement itself so it is evaluated at write time.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence
from sqlalchemy import Boolean, String, and_, exists, func, insert, literal, or_, select, true, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from authz_backend.interface.permissions import (
    AccessKind,
    CapabilityBit,
    CapabilityBitset,
    GRANTING_AUTHORITY,
    OrderDir,
)
from authz_backend.model.permission import GLOBAL_SCOPE, UserCapability
from authz_backend.repositories.base import storage_guard

logger = logging.getLogger(__name__)

_capability = UserCapability.__table__


def scope_key(group_id: Optional[str]) -> str:
    return GLOBAL_SCOPE if group_id is None else str(group_id)


def covering_scopes(group_id: Optional[str]) -> List[str]:
    """Scopes whose grants apply to ``group_id``: global covers every group."""
    if group_id is None:
        return [GLOBAL_SCOPE]
    return [GLOBAL_SCOPE, str(group_id)]


def bitset_of(row: UserCapability) -> CapabilityBitset:
    return CapabilityBitset(act=row.act, delegate=row.delegate, super_delegate=row.super_delegate)


class GrantStore:

    def __init__(self, db: Session):
        self.db = db

    # Reads

    def rows(
        self,
        user_id: str,
        scopes: Sequence[str],
        resource_keys: Optional[Iterable[str]] = None,
    ) -> List[UserCapability]:
        with storage_guard(self.db, "load capabilities"):
            query = self.db.query(UserCapability).filter(
                UserCapability.user_id == user_id,
                UserCapability.scope_key.in_(list(scopes)),
            )
            if resource_keys is not None:
                query = query.filter(UserCapability.resource_key.in_(list(resource_keys)))
            return query.all()

    def merged_bitsets(
        self,
        user_id: str,
        scopes: Sequence[str],
        resource_keys: Optional[Iterable[str]] = None,
    ) -> Dict[str, Dict[AccessKind, CapabilityBitset]]:
        """Per resource and access kind, the OR of the bitsets stored across ``scopes``."""
        merged: Dict[str, Dict[AccessKind, CapabilityBitset]] = {}
        for row in self.rows(user_id, scopes, resource_keys):
            kinds = merged.setdefault(row.resource_key, {})
            kind = AccessKind(row.access_kind)
            current = kinds.get(kind)
            kinds[kind] = bitset_of(row) if current is None else current.merge(bitset_of(row))
        return merged

    def _granted_keys_query(self, user_id: str, scopes: Sequence[str], resource_filter: Optional[Iterable[str]]):
        query = self.db.query(UserCapability.resource_key).filter(
            UserCapability.user_id == user_id,
            UserCapability.scope_key.in_(list(scopes)),
        )
        if resource_filter is not None:
            query = query.filter(UserCapability.resource_key.in_(list(resource_filter)))
        return query.distinct()

    def count_granted_resources(self, user_id: str, scopes: Sequence[str], resource_filter: Optional[Iterable[str]] = None) -> int:
        with storage_guard(self.db, "count capabilities"):
            return self._granted_keys_query(user_id, scopes, resource_filter).count()

    def page_granted_resources(
        self,
        user_id: str,
        scopes: Sequence[str],
        resource_filter: Optional[Iterable[str]],
        offset: int,
        limit: int,
        order: OrderDir = OrderDir.DESC,
    ) -> List[str]:
        ordering = UserCapability.resource_key.asc() if order == OrderDir.ASC else UserCapability.resource_key.desc()
        with storage_guard(self.db, "page capabilities"):
            keys = (
                self._granted_keys_query(user_id, scopes, resource_filter)
                .order_by(ordering)
                .offset(offset)
                .limit(limit)
                .all()
            )
        return [key for (key,) in keys]

    # Writes

    def _authority(self, grantor_id: str, resource_key: str, group_id: Optional[str], kind: AccessKind, bit: CapabilityBit):
        grantor = _capability.alias("grantor")
        holders = GRANTING_AUTHORITY.get(bit, ())
        if not holders:
            return None
        return exists().where(
            grantor.c.user_id == grantor_id,
            grantor.c.resource_key == resource_key,
            grantor.c.access_kind == kind.value,
            grantor.c.scope_key.in_(covering_scopes(group_id)),
            or_(*[grantor.c[held.value] == true() for held in holders]),
        )

    def _write(
        self,
        user_id: str,
        resource_key: str,
        group_id: Optional[str],
        kind: AccessKind,
        bit: CapabilityBit,
        value: bool,
        actor_id: Optional[str],
        authority=None,
    ) -> bool:
        key = scope_key(group_id)
        target = and_(
            _capability.c.user_id == user_id,
            _capability.c.resource_key == resource_key,
            _capability.c.scope_key == key,
            _capability.c.access_kind == kind.value,
        )
        conditions = [target] if authority is None else [target, authority]

        stmt_update = (
            update(_capability)
            .where(*conditions)
            .values({bit.value: value, "updated_by": actor_id, "updated_at": func.now()})
        )

        source = select(
            literal(user_id, String),
            literal(resource_key, String),
            literal(key, String),
            literal(kind.value, String),
            literal(group_id, String),
            literal(value, Boolean),
            literal(actor_id, String),
            literal(actor_id, String),
        )
        if authority is not None:
            source = source.where(authority)
        stmt_insert = insert(_capability).from_select(
            ["user_id", "resource_key", "scope_key", "access_kind", "group_id", bit.value, "created_by", "updated_by"],
            source,
        )

        with storage_guard(self.db, "write capability"):
            if self.db.execute(stmt_update).rowcount:
                self.db.commit()
                return True
            if not value:
                # Clearing a bit on a missing row changes nothing
                self.db.rollback()
                return False
            try:
                written = self.db.execute(stmt_insert).rowcount > 0
                self.db.commit()
                return written
            except IntegrityError:
                self.db.rollback()
                # Only a row created concurrently is retried; other violations propagate
                if self.db.execute(select(_capability.c.user_id).where(target)).first() is None:
                    raise
                written = self.db.execute(stmt_update).rowcount > 0
                self.db.commit()
                return written

    def conditional_set_bit(
        self,
        grantor_id: str,
        grantee_id: str,
        resource_key: str,
        group_id: Optional[str],
        kind: AccessKind,
        bit: CapabilityBit,
        value: bool,
    ) -> bool:
        """Write one bit on the grantee if the grantor holds authority for it at a covering scope.

        Returns whether the bit was written. ``super_delegate`` is never written here.
        """
        authority = self._authority(grantor_id, resource_key, group_id, kind, bit)
        if authority is None:
            return False
        return self._write(grantee_id, resource_key, group_id, kind, bit, value, grantor_id, authority)

    def set_bits(
        self,
        user_id: str,
        resource_key: str,
        group_id: Optional[str],
        kind: AccessKind,
        bitset: CapabilityBitset,
        actor_id: Optional[str] = None,
    ) -> int:
        """Administrative write of every set bit of ``bitset``, no authority check."""
        applied = 0
        for bit in CapabilityBit:
            if bitset.has(bit):
                applied += int(self._write(user_id, resource_key, group_id, kind, bit, True, actor_id))
        return applied
