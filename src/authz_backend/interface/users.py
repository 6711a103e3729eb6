from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from authz_backend.interface.base import BaseEntityList

class UserGet(BaseEntityList):
    id: str = Field(description="User unique identifier")
    email: str = Field(description="User's email address")
    name: str = Field(description="User's display name")

    model_config = ConfigDict(from_attributes=True)

class UserCreate(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    name: str = Field(min_length=1, max_length=255)
    id: Optional[str] = None
