"""
Idempotent seeding of resources, role templates and an administrator from a
YAML file:

    resources:
      - key: task
        display_name: Task
        access_kinds: [Read, Write, Create, Delete]
    roles:
      - key: created_group
        name: Group creator
        capabilities:
          - resource: group
            kind: Read
            act: true
            delegate: true
"""

import logging
from typing import List, Optional
import yaml
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from authz_backend.interface.permissions import AccessKind, CapabilityBitset
from authz_backend.model.auth import User
from authz_backend.permissions.catalog import ResourceCatalog
from authz_backend.permissions.roles import create_role, get_role, set_role_capability
from authz_backend.permissions.store import GrantStore
from authz_backend.repositories.user import UserRepository

logger = logging.getLogger(__name__)


class SeedResource(BaseModel):
    key: str
    display_name: str
    access_kinds: List[AccessKind]


class SeedRoleCapability(BaseModel):
    resource: str
    kind: AccessKind
    act: bool = False
    delegate: bool = False
    super_delegate: bool = False


class SeedRole(BaseModel):
    key: str
    name: str
    capabilities: List[SeedRoleCapability] = Field(default_factory=list)


class SeedConfig(BaseModel):
    resources: List[SeedResource] = Field(default_factory=list)
    roles: List[SeedRole] = Field(default_factory=list)

    @classmethod
    def from_file(cls, path: str) -> "SeedConfig":
        with open(path, "r") as file:
            return cls(**(yaml.safe_load(file) or {}))


def seed_resources(db: Session, config: SeedConfig) -> int:
    catalog = ResourceCatalog(db)
    created = 0
    for entry in config.resources:
        if catalog.exists(entry.key):
            continue
        catalog.create_resource(entry.key, entry.display_name, entry.access_kinds)
        created += 1
    return created


def seed_roles(db: Session, config: SeedConfig) -> int:
    created = 0
    for entry in config.roles:
        if get_role(db, entry.key) is None:
            create_role(db, entry.key, entry.name)
            created += 1
        for capability in entry.capabilities:
            set_role_capability(
                db,
                entry.key,
                capability.resource,
                capability.kind,
                CapabilityBitset(act=capability.act, delegate=capability.delegate, super_delegate=capability.super_delegate),
            )
    return created


def seed_admin(db: Session, email: str, name: Optional[str] = None) -> User:
    """Create (or reuse) ``email`` and give it every bit globally on every resource."""
    users = UserRepository(db)
    admin = users.get_by_email(email) or users.create_user(email, name or "Administrator")

    store = GrantStore(db)
    full = CapabilityBitset(act=True, delegate=True, super_delegate=True)
    resources, _ = ResourceCatalog(db).list_resources(limit=10_000)
    for resource in resources:
        for entry in resource.access_kinds:
            store.set_bits(admin.id, resource.key, None, AccessKind(entry.access_kind), full, actor_id=admin.id)

    logger.info(f"Administrator {email} holds every capability on {len(resources)} resources")
    return admin


def seed(db: Session, path: str, admin_email: Optional[str] = None) -> Optional[User]:
    config = SeedConfig.from_file(path)
    resources = seed_resources(db, config)
    roles = seed_roles(db, config)
    logger.info(f"Seeded {resources} resources and {roles} roles from {path}")

    if admin_email:
        return seed_admin(db, admin_email)
    return None
