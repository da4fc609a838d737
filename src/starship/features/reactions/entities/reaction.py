"""Reactions and custom emojis."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ...store.repositories.base import DocumentEntity, utc_now


@dataclass
class CustomEmoji(DocumentEntity):
    """An uploaded emoji owned by a planet or a user."""

    id: str
    owner: str
    name: str
    url: str
    planet: Optional[str] = None
    user: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
