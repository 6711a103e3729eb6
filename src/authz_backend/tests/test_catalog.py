import pytest

from authz_backend.interface.permissions import AccessKind, OrderDir
from authz_backend.repositories.base import DuplicateError, NotFoundError


def test_create_resource(catalog):
    resource = catalog.create_resource("task", "Tasks", [AccessKind.Delete, AccessKind.Create, AccessKind.Read])

    assert resource.key == "task"
    assert {entry.access_kind for entry in resource.access_kinds} == {"Read", "Create", "Delete"}
    assert catalog.allowed_kinds("task") == {AccessKind.Read, AccessKind.Create, AccessKind.Delete}


def test_duplicate_resource_conflicts(resources):
    with pytest.raises(DuplicateError):
        resources.create_resource("task", "Again", [AccessKind.Read])


def test_unknown_resource(catalog):
    with pytest.raises(NotFoundError):
        catalog.get_resource("missing")
    with pytest.raises(NotFoundError):
        catalog.allowed_kinds("missing")


def test_list_resources_paging_and_filter(resources):
    items, total = resources.list_resources(order=OrderDir.ASC, offset=0, limit=2)
    assert total == 3
    assert [item.key for item in items] == ["permission", "task"]

    items, total = resources.list_resources(order=OrderDir.ASC, offset=2, limit=2)
    assert [item.key for item in items] == ["task_package"]

    items, total = resources.list_resources(resource_filter=["task", "unknown"])
    assert total == 1
    assert [item.key for item in items] == ["task"]


def test_list_resources_default_order_is_descending(resources):
    items, _ = resources.list_resources()
    assert [item.key for item in items] == ["task_package", "task", "permission"]
