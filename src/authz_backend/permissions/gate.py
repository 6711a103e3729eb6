"""
Authorization gate.

The single integration point other subsystems use: a request is rejected with
401 without a principal, with 403 without ``act`` on the resource in the
scope, and otherwise carries an ``Authorization`` for finer checks.
"""

import logging
from typing import Dict, Iterable, Optional
from fastapi import Depends, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session

from authz_backend.api.exceptions import ForbiddenException, UnauthorizedException
from authz_backend.database import get_db
from authz_backend.interface.permissions import AccessKind, CapabilityBitset
from authz_backend.permissions.auth import get_current_principal
from authz_backend.permissions.principal import Principal
from authz_backend.permissions.resolver import PermissionResolver
from authz_backend.repositories.group import GroupDirectory

logger = logging.getLogger(__name__)


class Authorization(BaseModel):
    user_id: str
    resource_key: str
    group_id: Optional[str] = None
    capabilities: Dict[AccessKind, CapabilityBitset]

    def bits(self, kind: AccessKind) -> CapabilityBitset:
        return self.capabilities.get(kind, CapabilityBitset())

    def permits(self, kind: AccessKind) -> bool:
        return self.bits(kind).act


class AuthorizationGate:

    def __init__(self, db: Session, resolver: Optional[PermissionResolver] = None):
        self.db = db
        self.resolver = resolver or PermissionResolver(db)

    def authorize(
        self,
        principal: Optional[Principal],
        resource_key: str,
        group_id: Optional[str] = None,
        required_kinds: Iterable[AccessKind] = (),
    ) -> Authorization:
        """
        Raises:
            UnauthorizedException: No principal
            ForbiddenException: A required kind (or, with none given, every kind) lacks ``act``
            NotFoundError: Unknown resource or unusable group scope
        """
        if principal is None or principal.user_id is None:
            raise UnauthorizedException()

        if group_id is not None:
            GroupDirectory(self.db).get_active_group(group_id)

        capabilities = self.resolver.capabilities_for(principal.user_id, resource_key, group_id)
        required = list(required_kinds)

        if required:
            allowed = all(capabilities.get(kind, CapabilityBitset()).act for kind in required)
        else:
            allowed = any(bitset.act for bitset in capabilities.values())

        if not allowed:
            logger.warning(
                f"Denied {principal.user_id} on {resource_key} "
                f"({', '.join(kind.value for kind in required) or 'any'}) in scope {group_id or 'global'}"
            )
            raise ForbiddenException()

        return Authorization(
            user_id=principal.user_id,
            resource_key=resource_key,
            group_id=group_id,
            capabilities=capabilities,
        )


def request_group_id(request: Request, group_param: Optional[str]) -> Optional[str]:
    if group_param is None:
        return None
    return request.path_params.get(group_param) or request.query_params.get(group_param)


class RequirePermission:
    """FastAPI dependency gating a route on ``act`` for the given access kinds.

    ``group_param`` names a path or query parameter carrying the group scope.
    """

    def __init__(self, resource_key: str, *kinds: AccessKind, group_param: Optional[str] = None):
        self.resource_key = resource_key
        self.kinds = kinds
        self.group_param = group_param

    def __call__(
        self,
        request: Request,
        principal: Principal = Depends(get_current_principal),
        db: Session = Depends(get_db),
    ) -> Authorization:
        authorization = AuthorizationGate(db).authorize(
            principal,
            self.resource_key,
            request_group_id(request, self.group_param),
            self.kinds,
        )
        request.state.authorization = authorization
        return authorization
