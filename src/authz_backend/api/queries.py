from typing import List, Optional
from fastapi import Query

from authz_backend.interface.base import ListQuery, split_list_param
from authz_backend.interface.permissions import OrderDir
from authz_backend.settings import settings

def list_query(
    page: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    order: OrderDir = Query(OrderDir.DESC),
) -> ListQuery:
    limit = min(limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
    return ListQuery(page=page, limit=limit, order=order)

def resource_filter_query(
    resource_filter: Optional[List[str]] = Query(None, alias="resource_filter[]"),
) -> Optional[List[str]]:
    return split_list_param(resource_filter)
