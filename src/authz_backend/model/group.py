from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, String, func
from sqlalchemy.orm import relationship

from .auth import _new_id
from .base import Base


GROUP_STATES = ('active', 'deleted')


class Group(Base):
    __tablename__ = 'group'
    __table_args__ = (
        CheckConstraint("state IN ('active', 'deleted')", name='group_state_check'),
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(True), nullable=False, server_default=func.now())
    created_by = Column(ForeignKey('user.id', ondelete='SET NULL'))
    updated_by = Column(ForeignKey('user.id', ondelete='SET NULL'))
    name = Column(String(100), nullable=False)
    state = Column(String(16), nullable=False, server_default='active')
    parent_id = Column(ForeignKey('group.id', ondelete='SET NULL'))

    # Parent reference only; permissions are not inherited along it
    parent = relationship('Group', remote_side=[id], back_populates='children')
    children = relationship('Group', back_populates='parent')
