import click

from authz_backend.cli.utils import handle_repository_errors, with_session
from authz_backend.seeder import seed
from authz_backend.settings import settings

@click.command()
@click.option("--file", "-f", "path", type=click.Path(exists=True, dir_okay=False), default=None, help="Seed YAML file")
@click.option("--admin-email", "admin_email", default=None, help="Create this user with every capability")
@handle_repository_errors
@with_session
def seed_command(path, admin_email, db):
  """Create missing resources and roles, optionally an administrator."""

  admin = seed(db, path or settings.SEED_CONFIG, admin_email)

  click.echo(f"Seeded from {click.style(path or settings.SEED_CONFIG, fg='green')}")
  if admin is not None:
    click.echo(f"Administrator {admin.email} [{admin.id}]")
