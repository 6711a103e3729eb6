"""
Pytest configuration and fixtures for all tests.

Every test runs against a fresh in-memory SQLite database built from the ORM
metadata; a single shared connection keeps the data visible to every session.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from authz_backend.database import get_db
from authz_backend.interface.permissions import AccessKind, CapabilityBitset
from authz_backend.model import Base, UserCapability
from authz_backend.model.permission import GLOBAL_SCOPE
from authz_backend.permissions.auth import create_access_token
from authz_backend.permissions.catalog import ResourceCatalog
from authz_backend.permissions.store import GrantStore
from authz_backend.repositories.group import GroupDirectory
from authz_backend.repositories.user import UserRepository


@pytest.fixture
def engine():
    """Create an isolated in-memory database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def Session(engine):
    """Create session factory."""
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(Session):
    """Create a new database session for a test."""
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db):
    return GrantStore(db)


@pytest.fixture
def catalog(db):
    return ResourceCatalog(db)


@pytest.fixture
def resources(catalog):
    """A handful of catalogued resources shaped like the seeded ones."""
    catalog.create_resource("task", "Tasks", [AccessKind.Create, AccessKind.Read, AccessKind.Delete])
    catalog.create_resource("task_package", "Task package", [AccessKind.Read, AccessKind.Create, AccessKind.Other])
    catalog.create_resource("permission", "Permission", [AccessKind.Read, AccessKind.Write, AccessKind.Other])
    return catalog


@pytest.fixture
def make_user(db):
    users = UserRepository(db)

    def _make(name: str):
        return users.create_user(f"{name}@example.com", name.capitalize())

    return _make


@pytest.fixture
def make_group(db):
    directory = GroupDirectory(db)

    def _make(name: str, creator_id: str):
        return directory.create_group(name, creator_id)

    return _make


@pytest.fixture
def grant(store):
    """Administratively give ``user`` the bits on (resource, kind, scope)."""

    def _grant(user_id, resource_key, kind, group_id=None, **bits):
        return store.set_bits(user_id, resource_key, group_id, kind, CapabilityBitset(**bits))

    return _grant


@pytest.fixture
def stored_row(db):
    """Insert a capability row as-is, including all-false bitsets."""

    def _store(user_id, resource_key, kind, group_id=None, **bits):
        db.add(UserCapability(
            user_id=user_id,
            resource_key=resource_key,
            scope_key=GLOBAL_SCOPE if group_id is None else group_id,
            group_id=group_id,
            access_kind=kind.value,
            act=bits.get("act", False),
            delegate=bits.get("delegate", False),
            super_delegate=bits.get("super_delegate", False),
        ))
        db.commit()

    return _store


def auth_headers(user_id: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture
def client(Session):
    """TestClient bound to the test database."""
    from authz_backend.server import app

    def override_get_db():
        session = Session()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
