import logging
import click

from .admin import grant, groups, resources, roles, token
from .seed import seed_command
from authz_backend.settings import settings

logging.basicConfig(level=settings.LOG_LEVEL)

@click.group()
def cli():
  pass

cli.add_command(seed_command,"seed")
cli.add_command(resources,"resources")
cli.add_command(grant,"grant")
cli.add_command(roles,"roles")
cli.add_command(groups,"groups")
cli.add_command(token,"token")

if __name__ == '__main__':
  cli()
