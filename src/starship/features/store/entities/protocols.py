"""Entity store protocols.

Every service talks to persistence through these interfaces. Collections
hold plain dict documents keyed by a string ``id``; conditional updates are
single atomic steps so that shared counters and arrays never need a
read-modify-write cycle in the services.
"""

from abc import abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

Document = Dict[str, Any]
Filter = Dict[str, Any]
Update = Dict[str, Any]
Sort = Sequence[Tuple[str, int]]


@dataclass
class UpdateOperation:
    """One entry of a bulk update."""
    filter: Filter
    update: Update
    many: bool = False


@runtime_checkable
class DocumentCollection(Protocol):
    """A named set of documents."""

    name: str

    @abstractmethod
    async def find_by_id(self, document_id: str) -> Optional[Document]:
        ...

    @abstractmethod
    async def find_one(self, flt: Filter, sort: Optional[Sort] = None) -> Optional[Document]:
        ...

    @abstractmethod
    async def find_many(
        self,
        flt: Optional[Filter] = None,
        sort: Optional[Sort] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Document]:
        ...

    @abstractmethod
    async def count(self, flt: Optional[Filter] = None) -> int:
        ...

    @abstractmethod
    async def insert(self, document: Document) -> Document:
        """Insert a document. The document must carry its ``id``."""
        ...

    @abstractmethod
    async def update_one(
        self, flt: Filter, update: Update, return_updated: bool = True
    ) -> Optional[Document]:
        """Atomically update the first match.

        Returns the updated document (or the original one when
        ``return_updated`` is false), or None when nothing matched.
        """
        ...

    @abstractmethod
    async def update_many(self, flt: Filter, update: Update) -> int:
        ...

    @abstractmethod
    async def bulk_update(self, operations: List[UpdateOperation]) -> int:
        """Apply every operation as one atomic unit. Returns documents modified."""
        ...

    @abstractmethod
    async def find_one_and_delete(self, flt: Filter) -> Optional[Document]:
        ...

    @abstractmethod
    async def delete_one(self, flt: Filter) -> bool:
        ...

    @abstractmethod
    async def delete_many(self, flt: Filter) -> int:
        ...


@runtime_checkable
class EntityStore(Protocol):
    """Factory for collections plus backend lifecycle."""

    @abstractmethod
    def collection(self, name: str) -> DocumentCollection:
        ...

    @abstractmethod
    async def connect(self) -> None:
        ...

    @abstractmethod
    async def close(self) -> None:
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        ...
