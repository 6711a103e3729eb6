"""
Authorization core: resource catalog, capability grants, resolution,
delegation and request gating.
"""

from authz_backend.permissions.principal import Principal
from authz_backend.permissions.store import GrantStore, covering_scopes, scope_key
from authz_backend.permissions.catalog import ResourceCatalog
from authz_backend.permissions.resolver import PermissionResolver
from authz_backend.permissions.delegation import DelegationEnforcer
from authz_backend.permissions.auth import create_access_token, get_current_principal
from authz_backend.permissions.gate import Authorization, AuthorizationGate, RequirePermission
from authz_backend.permissions.route_config import authorize_route, get_route_permission_config
from authz_backend.permissions.roles import CREATED_GROUP_ROLE_KEY, apply_role, create_role, set_role_capability

__all__ = [
    "Principal",
    "GrantStore",
    "covering_scopes",
    "scope_key",
    "ResourceCatalog",
    "PermissionResolver",
    "DelegationEnforcer",
    "create_access_token",
    "get_current_principal",
    "Authorization",
    "AuthorizationGate",
    "RequirePermission",
    "authorize_route",
    "get_route_permission_config",
    "CREATED_GROUP_ROLE_KEY",
    "apply_role",
    "create_role",
    "set_role_capability",
]
