import functools
import click

from authz_backend.database import get_session_factory
from authz_backend.repositories.base import DuplicateError, NotFoundError, StorageError

def with_session(func):
  @functools.wraps(func)
  def wrapper(*args, **kwargs):
    db = get_session_factory()()
    try:
      return func(*args, db=db, **kwargs)
    finally:
      db.close()

  return wrapper

def handle_repository_errors(func):
  @functools.wraps(func)
  def wrapper(*args, **kwargs):
    try:
      return func(*args, **kwargs)
    except NotFoundError as e:
      click.echo(f"[{click.style('404',fg='red')}] {e}")
    except DuplicateError as e:
      click.echo(f"[{click.style('409',fg='red')}] {e}")
    except ValueError as e:
      click.echo(f"[{click.style('400',fg='red')}] {e}")
    except StorageError as e:
      click.echo(f"[{click.style('500',fg='red')}] {e}")
    raise click.exceptions.Exit(1)

  return wrapper
