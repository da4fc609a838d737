"""Chat component, channels, messages and attachments."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ....config.constants import ChannelType
from ...components.entities.component import Component
from ...store.repositories.base import DocumentEntity, utc_now


@dataclass
class Chat(Component):
    pass


@dataclass
class Channel(DocumentEntity):
    """A text channel in a chat component, or a direct message channel.

    Direct message channels have no planet; their audience is ``owner``
    plus ``users``.
    """

    id: str
    name: str
    owner: str
    type: int = ChannelType.TEXT
    planet: Optional[str] = None
    component_id: Optional[str] = None
    topic: Optional[str] = None
    users: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)

    @property
    def is_direct_message(self) -> bool:
        return self.type == ChannelType.DIRECT_MESSAGE

    def has_participant(self, user_id: str) -> bool:
        return user_id == self.owner or user_id in self.users


@dataclass
class Message(DocumentEntity):
    id: str
    channel: str
    owner: str
    content: str
    planet: Optional[str] = None
    component_id: Optional[str] = None
    attachments: List[str] = field(default_factory=list)
    reply_to: Optional[str] = None
    mentions: List[str] = field(default_factory=list)
    reactions: List[Dict[str, Any]] = field(default_factory=list)
    pinned: bool = False
    edited: bool = False
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)


@dataclass
class Attachment(DocumentEntity):
    id: str
    name: str
    type: str
    url: str
    owner: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
