from typing import Annotated, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from authz_backend.database import get_db
from authz_backend.interface.permissions import DelegatePermissionsRequest, DelegatePermissionsResponse
from authz_backend.permissions.delegation import DelegationEnforcer
from authz_backend.permissions.gate import Authorization
from authz_backend.permissions.principal import Principal
from authz_backend.permissions.auth import get_current_principal
from authz_backend.permissions.route_config import authorize_route

users_router = APIRouter()

@users_router.post("/{user_id}/permissions", response_model=DelegatePermissionsResponse, status_code=status.HTTP_201_CREATED)
def delegate_permissions(
    user_id: str,
    payload: DelegatePermissionsRequest,
    principal: Annotated[Principal, Depends(get_current_principal)],
    authorization: Annotated[Optional[Authorization], Depends(authorize_route)],
    group_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """Hand the caller's delegable bits to another user; lists resources where a bit was written."""
    updated = DelegationEnforcer(db).apply(
        principal.get_user_id_or_throw(),
        user_id,
        group_id,
        payload.new_permissions,
    )
    return DelegatePermissionsResponse(updated_permissions=updated)
