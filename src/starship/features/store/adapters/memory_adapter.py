"""In-process entity store adapter.

Used for tests and single-process development. A per-collection
asyncio.Lock turns every conditional update into one atomic step.
"""

import asyncio
import copy
import logging
from typing import Dict, List, Optional

from ..entities.protocols import Document, Filter, Sort, Update, UpdateOperation
from ..utils.documents import apply_update, match_document, paginate, sort_documents
from ....core.exceptions import ConflictError

logger = logging.getLogger(__name__)


class MemoryCollection:
    """Dict-backed document collection."""

    def __init__(self, name: str):
        self.name = name
        self._documents: Dict[str, Document] = {}
        self._lock = asyncio.Lock()

    def _matching(self, flt: Optional[Filter]) -> List[Document]:
        return [doc for doc in self._documents.values() if match_document(doc, flt)]

    async def find_by_id(self, document_id: str) -> Optional[Document]:
        doc = self._documents.get(document_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def find_one(self, flt: Filter, sort: Optional[Sort] = None) -> Optional[Document]:
        found = await self.find_many(flt, sort=sort, limit=1)
        return found[0] if found else None

    async def find_many(
        self,
        flt: Optional[Filter] = None,
        sort: Optional[Sort] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Document]:
        docs = paginate(sort_documents(self._matching(flt), sort), skip, limit)
        return copy.deepcopy(docs)

    async def count(self, flt: Optional[Filter] = None) -> int:
        return len(self._matching(flt))

    async def insert(self, document: Document) -> Document:
        async with self._lock:
            if document["id"] in self._documents:
                raise ConflictError(f"Duplicate id in {self.name}")
            self._documents[document["id"]] = copy.deepcopy(document)
        return copy.deepcopy(document)

    async def update_one(
        self, flt: Filter, update: Update, return_updated: bool = True
    ) -> Optional[Document]:
        async with self._lock:
            for doc in self._documents.values():
                if match_document(doc, flt):
                    updated = apply_update(doc, update, flt)
                    self._documents[doc["id"]] = updated
                    return copy.deepcopy(updated if return_updated else doc)
        return None

    async def update_many(self, flt: Filter, update: Update) -> int:
        return await self.bulk_update([UpdateOperation(flt, update, many=True)])

    async def bulk_update(self, operations: List[UpdateOperation]) -> int:
        async with self._lock:
            # Stage on a copy so a failing operation leaves nothing applied
            staged = dict(self._documents)
            modified = 0
            for operation in operations:
                for doc in list(staged.values()):
                    if match_document(doc, operation.filter):
                        staged[doc["id"]] = apply_update(doc, operation.update, operation.filter)
                        modified += 1
                        if not operation.many:
                            break
            self._documents = staged
        return modified

    async def find_one_and_delete(self, flt: Filter) -> Optional[Document]:
        async with self._lock:
            for doc in self._documents.values():
                if match_document(doc, flt):
                    return self._documents.pop(doc["id"])
        return None

    async def delete_one(self, flt: Filter) -> bool:
        return await self.find_one_and_delete(flt) is not None

    async def delete_many(self, flt: Filter) -> int:
        async with self._lock:
            doomed = [doc["id"] for doc in self._matching(flt)]
            for document_id in doomed:
                del self._documents[document_id]
        return len(doomed)


class MemoryEntityStore:
    """Entity store keeping every collection in process memory."""

    def __init__(self):
        self._collections: Dict[str, MemoryCollection] = {}

    def collection(self, name: str) -> MemoryCollection:
        if name not in self._collections:
            self._collections[name] = MemoryCollection(name)
        return self._collections[name]

    async def connect(self) -> None:
        logger.info("Using in-memory entity store")

    async def close(self) -> None:
        self._collections.clear()

    async def health_check(self) -> bool:
        return True
