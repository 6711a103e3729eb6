from .permissions import (
    AccessKind,
    CapabilityBit,
    CapabilityBitset,
    PermissionInfo,
    PermissionListResponse,
    DelegatePermissionsRequest,
    DelegatePermissionsResponse,
)
from .base import ListQuery
from .resources import ResourceCreate, ResourceGet, ResourceList, ResourceListResponse
from .users import UserGet
