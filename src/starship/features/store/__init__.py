"""Document entity store: protocols, adapters and the base repository."""

from .adapters import AsyncPGEntityStore, MemoryEntityStore
from .entities import Collections, DocumentCollection, EntityStore, UpdateOperation
from .repositories import DocumentEntity, DocumentRepository, generate_id, set_fields, utc_now

__all__ = [
    "AsyncPGEntityStore",
    "MemoryEntityStore",
    "Collections",
    "DocumentCollection",
    "EntityStore",
    "UpdateOperation",
    "DocumentEntity",
    "DocumentRepository",
    "generate_id",
    "set_fields",
    "utc_now",
]
