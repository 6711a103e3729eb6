from .base import Base, metadata
from .auth import User
from .group import Group
from .permission import (
    GLOBAL_SCOPE,
    Resource,
    ResourceAccessKind,
    UserCapability,
    Role,
    RoleCapability,
)

# Import all models to ensure relationships are properly set up
from . import auth, group, permission

__all__ = [
    'Base',
    'metadata',
    'User',
    'Group',
    'GLOBAL_SCOPE',
    'Resource',
    'ResourceAccessKind',
    'UserCapability',
    'Role',
    'RoleCapability',
]
