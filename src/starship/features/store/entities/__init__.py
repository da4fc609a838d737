from .collections import Collections
from .protocols import (
    Document,
    DocumentCollection,
    EntityStore,
    Filter,
    Sort,
    Update,
    UpdateOperation,
)

__all__ = [
    "Collections",
    "Document",
    "DocumentCollection",
    "EntityStore",
    "Filter",
    "Sort",
    "Update",
    "UpdateOperation",
]
