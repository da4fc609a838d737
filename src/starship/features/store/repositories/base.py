"""Base repository mapping documents to dataclass entities."""

import dataclasses
import logging
import secrets
from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from ..entities.protocols import Document, DocumentCollection, Filter, Sort, Update

logger = logging.getLogger(__name__)


def generate_id() -> str:
    """16 character URL-safe identifier."""
    return secrets.token_urlsafe(12)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DocumentEntity:
    """Mixin for dataclass entities stored as documents."""

    @classmethod
    def from_document(cls, document: Document):
        names = {f.name for f in dataclasses.fields(cls)}
        return cls(**{k: v for k, v in document.items() if k in names})

    def to_document(self) -> Document:
        return dataclasses.asdict(self)


E = TypeVar("E", bound=DocumentEntity)


class DocumentRepository(Generic[E]):
    """Typed access to one collection."""

    def __init__(self, collection: DocumentCollection, entity_class: Type[E]):
        self.collection = collection
        self.entity_class = entity_class

    def _wrap(self, document: Optional[Document]) -> Optional[E]:
        return self.entity_class.from_document(document) if document is not None else None

    async def get(self, entity_id: str) -> Optional[E]:
        return self._wrap(await self.collection.find_by_id(entity_id))

    async def get_many(self, ids: List[str]) -> List[E]:
        docs = await self.collection.find_many({"id": {"$in": list(ids)}})
        return [self.entity_class.from_document(d) for d in docs]

    async def find_one(self, flt: Filter, sort: Optional[Sort] = None) -> Optional[E]:
        return self._wrap(await self.collection.find_one(flt, sort=sort))

    async def find(
        self,
        flt: Optional[Filter] = None,
        sort: Optional[Sort] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[E]:
        docs = await self.collection.find_many(flt, sort=sort, skip=skip, limit=limit)
        return [self.entity_class.from_document(d) for d in docs]

    async def count(self, flt: Optional[Filter] = None) -> int:
        return await self.collection.count(flt)

    async def insert(self, entity: E) -> E:
        return self.entity_class.from_document(await self.collection.insert(entity.to_document()))

    async def update(self, flt: Filter, update: Update, return_updated: bool = True) -> Optional[E]:
        return self._wrap(await self.collection.update_one(flt, update, return_updated))

    async def update_by_id(self, entity_id: str, update: Update) -> Optional[E]:
        return await self.update({"id": entity_id}, update)

    async def delete(self, flt: Filter) -> Optional[E]:
        return self._wrap(await self.collection.find_one_and_delete(flt))

    async def delete_many(self, flt: Filter) -> int:
        return await self.collection.delete_many(flt)


def set_fields(**values: Any) -> Dict[str, Any]:
    """``$set`` update that also bumps ``updated_at``."""
    return {"$set": {**values, "updated_at": utc_now()}}
