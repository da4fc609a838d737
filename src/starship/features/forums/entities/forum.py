"""Forum component, posts and replies.

Reactions are stored inline as ``{"emoji": str, "reactors": [user ids]}``
entries; an entry never has an empty reactor list.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ...components.entities.component import Component
from ...store.repositories.base import DocumentEntity, utc_now


@dataclass
class Forum(Component):
    tags: List[str] = field(default_factory=list)


@dataclass
class ForumPost(DocumentEntity):
    id: str
    component_id: str
    planet: str
    owner: str
    name: str
    content: str = ""
    tags: List[str] = field(default_factory=list)
    reply_count: int = 0
    stickied: bool = False
    locked: bool = False
    reactions: List[Dict[str, Any]] = field(default_factory=list)
    mentions: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)


@dataclass
class ForumReply(DocumentEntity):
    id: str
    post_id: str
    component_id: str
    planet: str
    owner: str
    content: str = ""
    reactions: List[Dict[str, Any]] = field(default_factory=list)
    mentions: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
