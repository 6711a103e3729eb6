from sqlalchemy import (
    Boolean, CheckConstraint, Column, DateTime, ForeignKey, Index, String, func, text
)
from sqlalchemy.orm import relationship

from authz_backend.interface.permissions import ACCESS_KIND_ORDER
from .base import Base


GLOBAL_SCOPE = 'global'

_ACCESS_KIND_CHECK = "access_kind IN ({})".format(
    ", ".join(f"'{kind.value}'" for kind in ACCESS_KIND_ORDER)
)


class Resource(Base):
    __tablename__ = 'resource'

    key = Column(String(255), primary_key=True)
    display_name = Column(String(255), nullable=False)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    created_by = Column(ForeignKey('user.id', ondelete='SET NULL'))

    access_kinds = relationship('ResourceAccessKind', back_populates='resource', cascade='all, delete-orphan', lazy='selectin')


class ResourceAccessKind(Base):
    __tablename__ = 'resource_access_kind'
    __table_args__ = (
        CheckConstraint(_ACCESS_KIND_CHECK, name='resource_access_kind_check'),
    )

    resource_key = Column(ForeignKey('resource.key', ondelete='CASCADE'), primary_key=True, nullable=False)
    access_kind = Column(String(16), primary_key=True, nullable=False)

    resource = relationship('Resource', back_populates='access_kinds')


class UserCapability(Base):
    """One capability bitset of a user for (resource, scope, access kind).

    ``scope_key`` is ``'global'`` or the group id; it carries the uniqueness of
    the scope because ``group_id`` is NULL for global rows.
    """
    __tablename__ = 'user_capability'
    __table_args__ = (
        CheckConstraint(_ACCESS_KIND_CHECK, name='user_capability_access_kind_check'),
        CheckConstraint(
            "(group_id IS NULL AND scope_key = 'global') OR (group_id IS NOT NULL AND scope_key = group_id)",
            name='user_capability_scope_check'
        ),
        Index('user_capability_user_scope_idx', 'user_id', 'scope_key'),
    )

    user_id = Column(ForeignKey('user.id', ondelete='CASCADE'), primary_key=True, nullable=False)
    resource_key = Column(ForeignKey('resource.key', ondelete='CASCADE'), primary_key=True, nullable=False)
    scope_key = Column(String(36), primary_key=True, nullable=False)
    access_kind = Column(String(16), primary_key=True, nullable=False)
    group_id = Column(ForeignKey('group.id', ondelete='CASCADE'))
    act = Column(Boolean, nullable=False, server_default=text("false"))
    delegate = Column(Boolean, nullable=False, server_default=text("false"))
    super_delegate = Column(Boolean, nullable=False, server_default=text("false"))
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(True), nullable=False, server_default=func.now())
    created_by = Column(String(36))
    updated_by = Column(String(36))

    resource = relationship('Resource')


class Role(Base):
    __tablename__ = 'role'

    key = Column(String(255), primary_key=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())

    role_capabilities = relationship('RoleCapability', back_populates='role', cascade='all, delete-orphan')


class RoleCapability(Base):
    __tablename__ = 'role_capability'
    __table_args__ = (
        CheckConstraint(_ACCESS_KIND_CHECK, name='role_capability_access_kind_check'),
    )

    role_key = Column(ForeignKey('role.key', ondelete='CASCADE'), primary_key=True, nullable=False)
    resource_key = Column(ForeignKey('resource.key', ondelete='CASCADE'), primary_key=True, nullable=False)
    access_kind = Column(String(16), primary_key=True, nullable=False)
    act = Column(Boolean, nullable=False, server_default=text("false"))
    delegate = Column(Boolean, nullable=False, server_default=text("false"))
    super_delegate = Column(Boolean, nullable=False, server_default=text("false"))

    role = relationship('Role', back_populates='role_capabilities')
