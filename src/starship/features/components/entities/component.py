"""Fields shared by every component variant."""

from dataclasses import dataclass, field
from datetime import datetime

from ...store.repositories.base import DocumentEntity, utc_now


@dataclass
class Component(DocumentEntity):
    """A pluggable sub-resource that belongs to exactly one planet."""

    id: str
    owner: str
    planet: str
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
