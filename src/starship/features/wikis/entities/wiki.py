"""Wiki component and its pages."""

from dataclasses import dataclass, field
from datetime import datetime

from ...components.entities.component import Component
from ...store.repositories.base import DocumentEntity, utc_now


@dataclass
class Wiki(Component):
    pass


@dataclass
class WikiPage(DocumentEntity):
    id: str
    wiki_id: str
    planet: str
    owner: str
    name: str
    content: str = ""
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
