import uuid
from sqlalchemy import Column, DateTime, String, func

from .base import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = 'user'

    id = Column(String(36), primary_key=True, default=_new_id)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(True), nullable=False, server_default=func.now())
    email = Column(String(320), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
