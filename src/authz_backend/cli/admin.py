import click

from authz_backend.cli.utils import handle_repository_errors, with_session
from authz_backend.interface.permissions import AccessKind, CapabilityBitset
from authz_backend.permissions.auth import create_access_token
from authz_backend.permissions.catalog import ResourceCatalog, ordered_kinds
from authz_backend.permissions.roles import apply_role
from authz_backend.permissions.store import GrantStore
from authz_backend.repositories.group import GroupDirectory
from authz_backend.repositories.user import UserRepository

KIND_CHOICES = [kind.value for kind in AccessKind]

@click.command()
@click.option("--key", "-k", prompt=True)
@click.option("--name", "-n", "display_name", prompt=True)
@click.option("--kind", "kinds", type=click.Choice(KIND_CHOICES), multiple=True, required=True)
@handle_repository_errors
@with_session
def create_resource(key, display_name, kinds, db):

  resource = ResourceCatalog(db).create_resource(key, display_name, [AccessKind(kind) for kind in kinds])

  click.echo(f"Created resource {click.style(resource.key, fg='green')}")

@click.command()
@click.option("--filter", "-f", "resource_filter", multiple=True)
@handle_repository_errors
@with_session
def list_resources(resource_filter, db):

  items, total_count = ResourceCatalog(db).list_resources(list(resource_filter) or None, limit=10_000)

  for item in items:
    kinds = ", ".join(kind.value for kind in ordered_kinds(AccessKind(entry.access_kind) for entry in item.access_kinds))
    click.echo(f"{item.key:<28} {item.display_name:<32} {kinds}")
  click.echo(f"{total_count} resources")

@click.group()
def resources():
  pass

resources.add_command(create_resource,"create")
resources.add_command(list_resources,"list")

@click.command()
@click.option("--user", "-u", "user_id", required=True)
@click.option("--resource", "-r", "resource_key", required=True)
@click.option("--kind", type=click.Choice(KIND_CHOICES), required=True)
@click.option("--group", "-g", "group_id", default=None)
@click.option("--act", is_flag=True)
@click.option("--delegate", is_flag=True)
@click.option("--super-delegate", "super_delegate", is_flag=True)
@handle_repository_errors
@with_session
def grant(user_id, resource_key, kind, group_id, act, delegate, super_delegate, db):
  """Set capability bits directly, bypassing delegation checks. Bits are only ever added."""

  if not (act or delegate or super_delegate):
    raise click.UsageError("Pass at least one of --act, --delegate, --super-delegate")

  UserRepository(db).get_by_id(user_id)
  if group_id is not None:
    GroupDirectory(db).get_active_group(group_id)

  kind = AccessKind(kind)
  if kind not in ResourceCatalog(db).allowed_kinds(resource_key):
    raise ValueError(f"Access kind {kind.value} is not allowed on resource {resource_key}")

  applied = GrantStore(db).set_bits(
    user_id, resource_key, group_id, kind,
    CapabilityBitset(act=act, delegate=delegate, super_delegate=super_delegate),
  )

  click.echo(f"Applied {applied} bits of {resource_key}.{kind.value} to {user_id}")

@click.command()
@click.argument("role_key")
@click.option("--user", "-u", "user_id", required=True)
@click.option("--group", "-g", "group_id", default=None)
@handle_repository_errors
@with_session
def apply_role_command(role_key, user_id, group_id, db):

  UserRepository(db).get_by_id(user_id)
  if group_id is not None:
    GroupDirectory(db).get_active_group(group_id)

  applied = apply_role(db, role_key, user_id, group_id)

  click.echo(f"Applied {applied} bits of role {role_key} to {user_id}")

@click.group()
def roles():
  pass

roles.add_command(apply_role_command,"apply")

@click.command()
@click.option("--name", "-n", prompt=True)
@click.option("--creator", "-c", "creator_id", required=True)
@click.option("--parent", "-p", "parent_id", default=None)
@handle_repository_errors
@with_session
def create_group(name, creator_id, parent_id, db):

  UserRepository(db).get_by_id(creator_id)
  group = GroupDirectory(db).create_group(name, creator_id, parent_id)

  click.echo(f"Created group {click.style(group.id, fg='green')}")

@click.group()
def groups():
  pass

groups.add_command(create_group,"create")

@click.command()
@click.option("--user", "-u", "user_id", required=True)
@click.option("--expires-in", "expires_in", type=int, default=None)
@handle_repository_errors
@with_session
def token(user_id, expires_in, db):
  """Print a signed access token for development."""

  UserRepository(db).get_by_id(user_id)

  click.echo(create_access_token(user_id, expires_in))
