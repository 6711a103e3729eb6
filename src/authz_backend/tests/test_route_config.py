import pytest

from authz_backend.interface.permissions import AccessKind
from authz_backend.permissions.route_config import RoutePermissionConfig
from authz_backend.settings import settings

CONFIG = """
resources:
  - key: task
    routes:
      - path: /groups/{group_id}/tasks/{task_id}
        method: delete
        param: group_id
        required_access_kinds: [Delete]
      - path: /tasks
        method: GET
        required_access_kinds: [Read]
"""


@pytest.fixture
def config(tmp_path):
    path = tmp_path / "routes.yaml"
    path.write_text(CONFIG)
    return RoutePermissionConfig.from_file(str(path))


def test_lookup_matches_template(config):
    permission, params = config.lookup("/groups/g1/tasks/t9", "DELETE")

    assert permission.resource_key == "task"
    assert permission.group_param == "group_id"
    assert permission.required_access_kinds == [AccessKind.Delete]
    assert params == {"group_id": "g1", "task_id": "t9"}


def test_lookup_misses(config):
    assert config.lookup("/groups/g1/tasks/t9", "GET") is None
    assert config.lookup("/groups/g1/tasks", "DELETE") is None
    assert config.lookup("/unknown", "GET") is None


def test_packaged_config():
    config = RoutePermissionConfig.from_file(settings.ROUTE_PERMISSIONS_CONFIG)

    permission, _ = config.lookup("/resources", "POST")
    assert permission.resource_key == "permission"
    assert permission.required_access_kinds == [AccessKind.Write]

    permission, params = config.lookup("/groups/g1/users/u1/permissions", "GET")
    assert permission.group_param == "group_id"
    assert params["group_id"] == "g1"

    assert config.lookup("/user/permissions", "GET") is None
