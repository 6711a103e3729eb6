from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from authz_backend.interface.permissions import OrderDir
from authz_backend.settings import settings

class ListQuery(BaseModel):
    page: int = Field(0, ge=0, description="Zero-indexed page")
    limit: int = Field(default_factory=lambda: settings.DEFAULT_PAGE_SIZE, ge=1, description="Page size")
    order: OrderDir = Field(OrderDir.DESC, description="Ordering by key")

    @property
    def offset(self) -> int:
        return self.page * self.limit

def split_list_param(values: Optional[List[str]]) -> Optional[List[str]]:
    """Accept both repeated parameters and comma separated values."""
    if values is None:
        return None
    items = []
    for value in values:
        items.extend(part.strip() for part in value.split(",") if part.strip())
    return items

class BaseEntityList(BaseModel):
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Update timestamp")
