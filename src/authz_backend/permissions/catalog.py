import logging
from typing import Iterable, List, Optional, Set, Tuple
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from authz_backend.interface.permissions import ACCESS_KIND_ORDER, AccessKind, OrderDir
from authz_backend.model.permission import Resource, ResourceAccessKind
from authz_backend.repositories.base import BaseRepository, DuplicateError, NotFoundError, storage_guard

logger = logging.getLogger(__name__)


def ordered_kinds(kinds: Iterable[AccessKind]) -> List[AccessKind]:
    present = set(kinds)
    return [kind for kind in ACCESS_KIND_ORDER if kind in present]


class ResourceCatalog(BaseRepository[Resource]):
    """Append-only registry of protected resources and their allowed access kinds."""

    def __init__(self, db: Session):
        super().__init__(db, Resource, key="key")

    def create_resource(self, key: str, display_name: str, access_kinds: Iterable[AccessKind], created_by: Optional[str] = None) -> Resource:
        """
        Raises:
            DuplicateError: If a resource with this key already exists
        """
        kinds = ordered_kinds(AccessKind(kind) for kind in access_kinds)

        with storage_guard(self.db, "create resource"):
            if self.get_by_id_optional(key) is not None:
                raise DuplicateError("Resource", {"key": key})

            resource = Resource(key=key, display_name=display_name, created_by=created_by)
            resource.access_kinds = [ResourceAccessKind(access_kind=kind.value) for kind in kinds]
            self.db.add(resource)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                raise DuplicateError("Resource", {"key": key})
            self.db.refresh(resource)

        logger.info(f"Created resource {key} with access kinds {[kind.value for kind in kinds]}")
        return resource

    def get_resource(self, key: str) -> Resource:
        with storage_guard(self.db, "load resource"):
            resource = self.get_by_id_optional(key)
        if resource is None:
            raise NotFoundError("Resource", key)
        return resource

    def allowed_kinds(self, key: str) -> Set[AccessKind]:
        return {AccessKind(entry.access_kind) for entry in self.get_resource(key).access_kinds}

    def get_many(self, keys: Iterable[str]) -> List[Resource]:
        keys = list(keys)
        if not keys:
            return []
        with storage_guard(self.db, "load resources"):
            return self.db.query(Resource).filter(Resource.key.in_(keys)).all()

    def list_resources(
        self,
        resource_filter: Optional[Iterable[str]] = None,
        offset: int = 0,
        limit: int = 200,
        order: OrderDir = OrderDir.DESC,
    ) -> Tuple[List[Resource], int]:
        """Page through the catalog; the count covers the filtered set before paging."""
        ordering = Resource.key.asc() if order == OrderDir.ASC else Resource.key.desc()

        with storage_guard(self.db, "list resources"):
            query = self.db.query(Resource)
            if resource_filter is not None:
                query = query.filter(Resource.key.in_(list(resource_filter)))
            total_count = query.count()
            items = query.order_by(ordering).offset(offset).limit(limit).all()

        return items, total_count
