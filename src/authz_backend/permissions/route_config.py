"""
Route permission configuration.

A YAML file maps (path template, HTTP method) to the resource, the required
access kinds and the optional parameter carrying the group scope:

    resources:
      - key: permission
        routes:
          - path: /groups/{group_id}/users/{user_id}/permissions
            method: GET
            param: group_id
            required_access_kinds: [Read]

Routes without an entry only require an authenticated principal.
"""

import logging
from functools import lru_cache
from typing import Dict, List, Optional, Pattern, Tuple
import yaml
from fastapi import Depends, Request
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session
from starlette.routing import compile_path

from authz_backend.database import get_db
from authz_backend.interface.permissions import AccessKind
from authz_backend.permissions.auth import get_current_principal
from authz_backend.permissions.gate import Authorization, AuthorizationGate
from authz_backend.permissions.principal import Principal
from authz_backend.settings import settings

logger = logging.getLogger(__name__)


class RouteEntry(BaseModel):
    path: str
    method: str
    param: Optional[str] = None
    required_access_kinds: List[AccessKind] = Field(default_factory=list)


class ResourceRoutes(BaseModel):
    key: str
    routes: List[RouteEntry] = Field(default_factory=list)


class RoutePermission(BaseModel):
    resource_key: str
    group_param: Optional[str] = None
    required_access_kinds: List[AccessKind] = Field(default_factory=list)


class RoutePermissionConfig:

    def __init__(self, resources: List[ResourceRoutes]):
        self._routes: List[Tuple[Pattern, Dict[str, RoutePermission]]] = []
        by_path: Dict[str, Dict[str, RoutePermission]] = {}

        for resource in resources:
            for route in resource.routes:
                methods = by_path.setdefault(route.path, {})
                methods[route.method.upper()] = RoutePermission(
                    resource_key=resource.key,
                    group_param=route.param,
                    required_access_kinds=route.required_access_kinds,
                )

        for path, methods in by_path.items():
            regex, _, _ = compile_path(path)
            self._routes.append((regex, methods))

    @classmethod
    def from_file(cls, path: str) -> "RoutePermissionConfig":
        with open(path, "r") as file:
            raw = yaml.safe_load(file) or {}
        resources = [ResourceRoutes(**entry) for entry in raw.get("resources", [])]
        logger.info(f"Loaded route permissions for {len(resources)} resources from {path}")
        return cls(resources)

    def lookup(self, path: str, method: str) -> Optional[Tuple[RoutePermission, Dict[str, str]]]:
        for regex, methods in self._routes:
            match = regex.match(path)
            if match and method.upper() in methods:
                return methods[method.upper()], match.groupdict()
        return None


@lru_cache(maxsize=1)
def get_route_permission_config() -> RoutePermissionConfig:
    return RoutePermissionConfig.from_file(settings.ROUTE_PERMISSIONS_CONFIG)


def authorize_route(
    request: Request,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    config: RoutePermissionConfig = Depends(get_route_permission_config),
) -> Optional[Authorization]:
    """Gate the current request according to the route permission config."""
    entry = config.lookup(request.url.path, request.method)
    if entry is None:
        return None

    permission, path_params = entry
    group_id = None
    if permission.group_param is not None:
        group_id = path_params.get(permission.group_param) or request.query_params.get(permission.group_param)

    authorization = AuthorizationGate(db).authorize(
        principal,
        permission.resource_key,
        group_id,
        permission.required_access_kinds,
    )
    request.state.authorization = authorization
    return authorization
