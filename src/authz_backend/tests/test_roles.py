"""
Tests for role templates, group creation and seeding.
"""

import pytest

from authz_backend.interface.permissions import AccessKind, CapabilityBitset
from authz_backend.permissions.resolver import PermissionResolver
from authz_backend.permissions.roles import CREATED_GROUP_ROLE_KEY, apply_role, create_role, set_role_capability
from authz_backend.repositories.base import DuplicateError, NotFoundError
from authz_backend.repositories.group import GroupDirectory
from authz_backend.seeder import SeedConfig, seed
from authz_backend.settings import settings


@pytest.fixture
def creator_role(db, resources):
    create_role(db, CREATED_GROUP_ROLE_KEY, "Group creator")
    set_role_capability(db, CREATED_GROUP_ROLE_KEY, "permission", AccessKind.Read, CapabilityBitset(act=True, super_delegate=True))
    set_role_capability(db, CREATED_GROUP_ROLE_KEY, "task", AccessKind.Delete, CapabilityBitset(act=True))
    return CREATED_GROUP_ROLE_KEY


def test_duplicate_role(db, creator_role):
    with pytest.raises(DuplicateError):
        create_role(db, creator_role, "Again")


def test_role_capability_kind_must_be_allowed(db, creator_role):
    with pytest.raises(ValueError):
        set_role_capability(db, creator_role, "task", AccessKind.Write, CapabilityBitset(act=True))


def test_role_capability_is_replaced(db, creator_role):
    entry = set_role_capability(db, creator_role, "task", AccessKind.Delete, CapabilityBitset(delegate=True))
    assert (entry.act, entry.delegate) == (False, True)


def test_apply_role_writes_template(db, creator_role, make_user):
    user = make_user("dora")

    applied = apply_role(db, creator_role, user.id)

    capabilities = PermissionResolver(db).capabilities_for(user.id, "permission")
    assert applied == 3
    assert capabilities[AccessKind.Read] == CapabilityBitset(act=True, super_delegate=True)
    assert PermissionResolver(db).capabilities_for(user.id, "task")[AccessKind.Delete].act


def test_apply_unknown_role(db, resources, make_user):
    user = make_user("erin")
    with pytest.raises(NotFoundError):
        apply_role(db, "missing", user.id)
    assert apply_role(db, "missing", user.id, missing_ok=True) == 0


def test_group_creator_gets_role_in_new_group(db, creator_role, make_user):
    user = make_user("frank")

    group = GroupDirectory(db).create_group("Course 1", user.id)

    resolver = PermissionResolver(db)
    assert resolver.capabilities_for(user.id, "permission", group.id)[AccessKind.Read].super_delegate
    assert not resolver.capabilities_for(user.id, "permission")[AccessKind.Read].act


def test_group_parent_must_be_active(db, make_user):
    user = make_user("gina")
    directory = GroupDirectory(db)
    parent = directory.create_group("Parent", user.id)

    child = directory.create_group("Child", user.id, parent_id=parent.id)
    assert child.parent_id == parent.id

    directory.delete_group(parent.id, user.id)
    with pytest.raises(NotFoundError):
        directory.create_group("Orphan", user.id, parent_id=parent.id)


def test_seed_is_idempotent_and_creates_admin(db):
    admin = seed(db, settings.SEED_CONFIG, admin_email="admin@example.com")
    seed(db, settings.SEED_CONFIG, admin_email="admin@example.com")

    config = SeedConfig.from_file(settings.SEED_CONFIG)
    resolver = PermissionResolver(db)
    permission_list, total_count = resolver.resolve(admin.id, page_size=100)

    assert total_count == len(config.resources)
    for info in permission_list:
        assert all(entry.act and entry.delegate and entry.super_delegate for entry in info.access_kinds)


def test_seeded_created_group_role(db, make_user):
    seed(db, settings.SEED_CONFIG)
    user = make_user("hank")

    group = GroupDirectory(db).create_group("Seeded", user.id)

    permission_list, _ = PermissionResolver(db).resolve(user.id, group_id=group.id, restrict_to_group_scope=True, page_size=100)
    assert "permission" in {info.resource_key for info in permission_list}
