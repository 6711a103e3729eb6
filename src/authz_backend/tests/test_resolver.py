"""
Tests for permission resolution: scope selection, union of global and group
grants, and paging totals.
"""

import pytest
from unittest.mock import MagicMock
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from authz_backend.interface.permissions import AccessKind, OrderDir
from authz_backend.permissions.resolver import PermissionResolver
from authz_backend.repositories.base import NotFoundError, StorageError


@pytest.fixture
def resolver(db):
    return PermissionResolver(db)


@pytest.fixture
def x(make_user):
    return make_user("xavier")


def test_global_read_grant(resources, resolver, grant, x):
    grant(x.id, "task", AccessKind.Read, act=True)

    permission_list, total_count = resolver.resolve(x.id)

    assert total_count == 1
    assert len(permission_list) == 1
    info = permission_list[0]
    assert info.resource_key == "task"
    assert info.display_name == "Tasks"
    assert info.group_id is None
    assert [entry.kind for entry in info.access_kinds] == [AccessKind.Read, AccessKind.Create, AccessKind.Delete]
    assert info.bits(AccessKind.Read).act is True
    assert info.bits(AccessKind.Create).act is False
    assert info.bits(AccessKind.Read).delegate is False


def test_no_grants_is_empty(resources, resolver, x):
    assert resolver.resolve(x.id) == ([], 0)


def test_group_grant_dominates_global_false(resources, resolver, stored_row, make_group, x):
    g1 = make_group("g1", x.id)
    stored_row(x.id, "task", AccessKind.Read, act=False)
    stored_row(x.id, "task", AccessKind.Read, group_id=g1.id, act=True)

    permission_list, _ = resolver.resolve(x.id, group_id=g1.id, restrict_to_group_scope=False)

    assert len(permission_list) == 1
    assert permission_list[0].bits(AccessKind.Read).act is True
    assert permission_list[0].group_id == g1.id

    global_list, _ = resolver.resolve(x.id)
    assert global_list[0].bits(AccessKind.Read).act is False


def test_global_grant_covers_any_group(resources, resolver, grant, make_group, x):
    g1 = make_group("g1", x.id)
    g2 = make_group("g2", x.id)
    grant(x.id, "task", AccessKind.Delete, act=True)

    for group in (g1, g2):
        permission_list, total_count = resolver.resolve(x.id, group_id=group.id)
        assert total_count == 1
        assert permission_list[0].bits(AccessKind.Delete).act is True
        assert permission_list[0].group_id == group.id


def test_group_only_ignores_global(resources, resolver, grant, make_group, x):
    g1 = make_group("g1", x.id)
    grant(x.id, "task", AccessKind.Read, act=True)
    grant(x.id, "permission", AccessKind.Write, group_id=g1.id, act=True)

    permission_list, total_count = resolver.resolve(x.id, group_id=g1.id, restrict_to_group_scope=True)

    assert total_count == 1
    assert [info.resource_key for info in permission_list] == ["permission"]
    assert permission_list[0].group_id == g1.id


def test_group_grant_not_visible_globally_or_in_other_group(resources, resolver, grant, make_group, x):
    g1 = make_group("g1", x.id)
    g2 = make_group("g2", x.id)
    grant(x.id, "task", AccessKind.Read, group_id=g1.id, act=True)

    assert resolver.resolve(x.id) == ([], 0)
    assert resolver.resolve(x.id, group_id=g2.id) == ([], 0)


@pytest.mark.parametrize("limit", [1, 2, 3, 5, 10])
def test_pages_add_up_to_total(catalog, resolver, grant, x, limit):
    keys = [f"resource_{i}" for i in range(7)]
    for key in keys:
        catalog.create_resource(key, key.title(), [AccessKind.Read])
        grant(x.id, key, AccessKind.Read, act=True)

    seen = []
    page = 0
    while True:
        permission_list, total_count = resolver.resolve(x.id, page=page, page_size=limit, order=OrderDir.ASC)
        assert total_count == 7
        if not permission_list:
            break
        seen.extend(info.resource_key for info in permission_list)
        page += 1

    assert seen == sorted(keys)


def test_filter_applies_before_paging(catalog, resolver, grant, x):
    for key in ["a", "b", "c", "d"]:
        catalog.create_resource(key, key.upper(), [AccessKind.Read])
        grant(x.id, key, AccessKind.Read, act=True)

    permission_list, total_count = resolver.resolve(x.id, resource_filter=["a", "c", "d"], page_size=2)

    assert total_count == 3
    assert [info.resource_key for info in permission_list] == ["d", "c"]


def test_capabilities_for(resources, resolver, grant, make_group, x):
    g1 = make_group("g1", x.id)
    grant(x.id, "task", AccessKind.Read, act=True)
    grant(x.id, "task", AccessKind.Create, group_id=g1.id, act=True, delegate=True)

    capabilities = resolver.capabilities_for(x.id, "task", g1.id)

    assert list(capabilities) == [AccessKind.Read, AccessKind.Create, AccessKind.Delete]
    assert capabilities[AccessKind.Read].act
    assert capabilities[AccessKind.Create].delegate
    assert capabilities[AccessKind.Delete].is_empty()

    assert not resolver.capabilities_for(x.id, "task")[AccessKind.Create].act


def test_capabilities_for_unknown_resource(resources, resolver, x):
    with pytest.raises(NotFoundError):
        resolver.capabilities_for(x.id, "missing")


def test_effective_access_kinds(resources, resolver, grant, x):
    grant(x.id, "task", AccessKind.Delete, act=True)
    grant(x.id, "task", AccessKind.Read, act=True)
    grant(x.id, "permission", AccessKind.Read, delegate=True)

    effective = resolver.effective_access_kinds(x.id, ["task", "permission", "task_package"])

    assert effective == {
        "task": [AccessKind.Read, AccessKind.Delete],
        "permission": [],
        "task_package": [],
    }


def test_storage_failure_surfaces_as_storage_error():
    broken = MagicMock(spec=Session)
    broken.query.side_effect = OperationalError("SELECT", {}, Exception("connection refused"))

    with pytest.raises(StorageError):
        PermissionResolver(broken).resolve("someone")

    broken.rollback.assert_called()
