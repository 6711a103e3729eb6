from typing import Annotated, List, Optional
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from authz_backend.api.queries import list_query, resource_filter_query
from authz_backend.database import get_db
from authz_backend.interface.base import ListQuery
from authz_backend.interface.permissions import PermissionListResponse
from authz_backend.interface.users import UserGet
from authz_backend.permissions.auth import get_current_principal
from authz_backend.permissions.principal import Principal
from authz_backend.permissions.resolver import PermissionResolver
from authz_backend.repositories.user import UserRepository

user_router = APIRouter()

def permission_list_response(
    response: Response,
    db: Session,
    user_id: str,
    group_id: Optional[str],
    params: ListQuery,
    resource_filter: Optional[List[str]],
    group_only: bool = False,
) -> PermissionListResponse:
    permission_list, total_count = PermissionResolver(db).resolve(
        user_id,
        group_id=group_id,
        resource_filter=resource_filter,
        restrict_to_group_scope=group_only,
        page=params.page,
        page_size=params.limit,
        order=params.order,
    )
    response.headers["X-Total-Count"] = str(total_count)
    return PermissionListResponse(permission_list=permission_list, total_count=total_count)

@user_router.get("", response_model=UserGet)
def get_current_user(
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Session = Depends(get_db)
):
    """Get the current authenticated user"""
    return UserRepository(db).get_by_id(principal.get_user_id_or_throw())

@user_router.get("/permissions", response_model=PermissionListResponse)
def list_own_permissions(
    response: Response,
    principal: Annotated[Principal, Depends(get_current_principal)],
    params: ListQuery = Depends(list_query),
    resource_filter: Optional[List[str]] = Depends(resource_filter_query),
    db: Session = Depends(get_db),
):
    """The caller's global permissions."""
    return permission_list_response(response, db, principal.get_user_id_or_throw(), None, params, resource_filter)
