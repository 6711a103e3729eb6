from typing import Annotated, List, Optional
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from authz_backend.api.queries import list_query, resource_filter_query
from authz_backend.api.user import permission_list_response
from authz_backend.database import get_db
from authz_backend.interface.base import ListQuery
from authz_backend.interface.permissions import PermissionListResponse
from authz_backend.permissions.auth import get_current_principal
from authz_backend.permissions.gate import Authorization
from authz_backend.permissions.principal import Principal
from authz_backend.permissions.route_config import authorize_route
from authz_backend.repositories.group import GroupDirectory
from authz_backend.repositories.user import UserRepository

groups_router = APIRouter()

@groups_router.get("/{group_id}/user/permissions", response_model=PermissionListResponse)
def list_own_group_permissions(
    group_id: str,
    response: Response,
    principal: Annotated[Principal, Depends(get_current_principal)],
    params: ListQuery = Depends(list_query),
    resource_filter: Optional[List[str]] = Depends(resource_filter_query),
    db: Session = Depends(get_db),
):
    """The caller's permissions stored for this group only."""
    GroupDirectory(db).get_active_group(group_id)
    return permission_list_response(
        response, db, principal.get_user_id_or_throw(), group_id, params, resource_filter, group_only=True
    )

@groups_router.get("/{group_id}/users/{user_id}/permissions", response_model=PermissionListResponse)
def list_user_group_permissions(
    group_id: str,
    user_id: str,
    response: Response,
    authorization: Annotated[Optional[Authorization], Depends(authorize_route)],
    params: ListQuery = Depends(list_query),
    resource_filter: Optional[List[str]] = Depends(resource_filter_query),
    group_only: bool = Query(False),
    db: Session = Depends(get_db),
):
    """Another user's permissions in the group, merged with their global ones unless ``group_only``."""
    GroupDirectory(db).get_active_group(group_id)
    UserRepository(db).get_by_id(user_id)
    return permission_list_response(response, db, user_id, group_id, params, resource_filter, group_only=group_only)
