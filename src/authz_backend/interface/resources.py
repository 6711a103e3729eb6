from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from authz_backend.interface.permissions import AccessKind

class ResourceCreate(BaseModel):
    key: str = Field(min_length=1, max_length=255, description="Stable resource identifier")
    display_name: str = Field(min_length=1, max_length=255, description="Human readable name")
    access_kinds: List[AccessKind] = Field(min_length=1, description="Access kinds the resource supports")

    @field_validator('key')
    def validate_key(cls, v):
        if not v.strip() or v != v.strip():
            raise ValueError('Resource key cannot contain surrounding whitespace')
        return v

class ResourceGet(BaseModel):
    key: str
    display_name: str
    access_kinds: List[AccessKind]
    created_at: Optional[datetime] = None

class ResourceList(BaseModel):
    key: str
    display_name: str
    access_kinds: List[AccessKind] = Field(default_factory=list, description="Allowed access kinds")
    effective_access_kinds: List[AccessKind] = Field(default_factory=list, description="Kinds the caller may act on in the queried scope")

    model_config = ConfigDict(from_attributes=True)

class ResourceListResponse(BaseModel):
    resources: List[ResourceList]
    total_count: int
