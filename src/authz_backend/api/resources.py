from typing import Annotated, List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from authz_backend.api.queries import list_query, resource_filter_query
from authz_backend.database import get_db
from authz_backend.interface.base import ListQuery
from authz_backend.interface.permissions import AccessKind
from authz_backend.interface.resources import ResourceCreate, ResourceGet, ResourceList, ResourceListResponse
from authz_backend.permissions.auth import get_current_principal
from authz_backend.permissions.catalog import ResourceCatalog, ordered_kinds
from authz_backend.permissions.gate import Authorization
from authz_backend.permissions.principal import Principal
from authz_backend.permissions.resolver import PermissionResolver
from authz_backend.permissions.route_config import authorize_route
from authz_backend.repositories.group import GroupDirectory

resources_router = APIRouter()

def _allowed(resource) -> List[AccessKind]:
    return ordered_kinds(AccessKind(entry.access_kind) for entry in resource.access_kinds)

@resources_router.get("", response_model=ResourceListResponse)
def list_resources(
    response: Response,
    principal: Annotated[Principal, Depends(get_current_principal)],
    authorization: Annotated[Optional[Authorization], Depends(authorize_route)],
    params: ListQuery = Depends(list_query),
    resource_filter: Optional[List[str]] = Depends(resource_filter_query),
    group_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    if group_id is not None:
        GroupDirectory(db).get_active_group(group_id)

    items, total_count = ResourceCatalog(db).list_resources(resource_filter, params.offset, params.limit, params.order)
    effective = PermissionResolver(db).effective_access_kinds(
        principal.get_user_id_or_throw(), [item.key for item in items], group_id
    )

    response.headers["X-Total-Count"] = str(total_count)
    return ResourceListResponse(
        resources=[
            ResourceList(
                key=item.key,
                display_name=item.display_name,
                access_kinds=_allowed(item),
                effective_access_kinds=effective.get(item.key, []),
            )
            for item in items
        ],
        total_count=total_count,
    )

@resources_router.post("", response_model=ResourceGet, status_code=status.HTTP_201_CREATED)
def create_resource(
    payload: ResourceCreate,
    principal: Annotated[Principal, Depends(get_current_principal)],
    authorization: Annotated[Optional[Authorization], Depends(authorize_route)],
    db: Session = Depends(get_db),
):
    resource = ResourceCatalog(db).create_resource(
        payload.key, payload.display_name, payload.access_kinds, created_by=principal.user_id
    )
    return ResourceGet(
        key=resource.key,
        display_name=resource.display_name,
        access_kinds=_allowed(resource),
        created_at=resource.created_at,
    )
