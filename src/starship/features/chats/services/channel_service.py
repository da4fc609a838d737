"""Channels: planet text channels and direct message channels."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from ....config.constants import MAX_MESSAGE_PAGE, MAX_PINNED_PAGE, ChannelType
from ....core.context import RequestContext
from ....core.exceptions import NotFoundError, ValidationError
from ...components.services.access import ComponentAccess, caller_id
from ...store.entities import Collections, EntityStore
from ...store.repositories.base import DocumentRepository, generate_id
from ...users.repositories.user_repository import UserRepository
from ..entities.chat import Channel, Chat, Message

logger = logging.getLogger(__name__)


@dataclass
class MessageFeed:
    messages: List[Message]
    cursor: Optional[str]


def _parse_cursor(cursor: Optional[str]) -> Optional[datetime]:
    if not cursor:
        return None
    try:
        return datetime.fromisoformat(cursor)
    except ValueError:
        raise ValidationError("Invalid cursor.")


class ChannelAccess(ComponentAccess):
    """Visibility rules shared by channels and their messages.

    Planet channels follow the planet's read tier. Direct message channels
    are visible to their owner and listed users only.
    """

    async def can_read_channel(self, user_id: Optional[str], channel: Channel) -> bool:
        if channel.planet:
            return await self.permissions.read(user_id, channel.planet)
        return user_id is not None and channel.has_participant(user_id)

    async def ensure_channel_read(self, context: RequestContext, channel: Channel) -> Channel:
        if not await self.can_read_channel(caller_id(context), channel):
            raise NotFoundError()
        return channel

    async def ensure_channel_moderation(self, context: RequestContext, channel: Channel) -> Channel:
        """Full write on the planet, or participation in a direct message."""
        me = context.require_user()
        if channel.planet:
            await self.permissions.ensure_full_write(me.id, channel.planet)
        elif not channel.has_participant(me.id):
            raise NotFoundError()
        return channel


class ChannelService(ChannelAccess):
    def __init__(self, store: EntityStore, permissions, user_repository: UserRepository):
        super().__init__(permissions)
        self.chats = DocumentRepository(store.collection(Collections.CHATS), Chat)
        self.channels = DocumentRepository(store.collection(Collections.CHANNELS), Channel)
        self.messages = DocumentRepository(store.collection(Collections.MESSAGES), Message)
        self.user_repository = user_repository

    async def get(self, context: RequestContext, channel_id: str) -> Channel:
        return await self.ensure_channel_read(context, await self.fetch(self.channels, channel_id))

    async def _planet_channel(self, context: RequestContext, channel_id: str) -> Channel:
        me = context.require_user()
        channel = await self.fetch(self.channels, channel_id)
        if channel.is_direct_message:
            raise NotFoundError()
        await self.permissions.ensure_full_write(me.id, channel.planet)
        return channel

    async def create(self, context: RequestContext, chat_id: str, name: str) -> Channel:
        chat = await self.full_writable(context, self.chats, chat_id)
        if not name.strip():
            raise ValidationError("Channels need a name.")
        channel = Channel(
            id=generate_id(),
            name=name,
            owner=context.user.id,
            type=int(ChannelType.TEXT),
            planet=chat.planet,
            component_id=chat.id,
            topic="",
        )
        return await self.channels.insert(channel)

    async def rename(self, context: RequestContext, channel_id: str, name: str) -> Channel:
        await self._planet_channel(context, channel_id)
        return await self.channels.update_by_id(channel_id, {"$set": {"name": name}})

    async def set_topic(self, context: RequestContext, channel_id: str, topic: str) -> Channel:
        await self._planet_channel(context, channel_id)
        return await self.channels.update_by_id(channel_id, {"$set": {"topic": topic}})

    async def delete(self, context: RequestContext, channel_id: str) -> bool:
        await self._planet_channel(context, channel_id)
        await self.messages.delete_many({"channel": channel_id})
        await self.channels.delete({"id": channel_id})
        return True

    async def create_direct_message(self, context: RequestContext, user_ids: List[str], name: Optional[str] = None) -> Channel:
        """Open a direct message channel between the caller and ``user_ids``."""
        me = context.require_user()
        targets = [uid for uid in dict.fromkeys(user_ids) if uid != me.id]
        if not targets:
            raise ValidationError("A direct message needs at least one other user.")
        users = await self.user_repository.get_many(targets)
        if len(users) != len(targets):
            raise NotFoundError("One or more users could not be found.")
        if any(me.id in user.blocked for user in users):
            raise NotFoundError("One or more users could not be found.")
        channel = Channel(
            id=generate_id(),
            name=name or ", ".join([me.username] + [u.username for u in users]),
            owner=me.id,
            type=int(ChannelType.DIRECT_MESSAGE),
            users=targets,
        )
        return await self.channels.insert(channel)

    async def direct_messages(self, context: RequestContext) -> List[Channel]:
        me = context.require_user()
        return await self.channels.find(
            {"type": int(ChannelType.DIRECT_MESSAGE), "$or": [{"owner": me.id}, {"users": me.id}]},
            sort=[("created_at", -1)],
        )

    async def message_feed(
        self, context: RequestContext, channel_id: str, limit: int = 50, cursor: Optional[str] = None
    ) -> MessageFeed:
        """Newest first; ``cursor`` continues with messages older than it."""
        channel = await self.get(context, channel_id)
        flt = {"channel": channel.id}
        before = _parse_cursor(cursor)
        if before:
            flt["created_at"] = {"$lt": before}
        limit = max(1, min(limit, MAX_MESSAGE_PAGE))
        messages = await self.messages.find(flt, sort=[("created_at", -1)], limit=limit)
        return MessageFeed(messages, messages[-1].created_at.isoformat() if messages else None)

    async def pinned_feed(
        self, context: RequestContext, channel_id: str, limit: int = 25, cursor: Optional[str] = None
    ) -> MessageFeed:
        """Oldest first; ``cursor`` continues with pins newer than it."""
        channel = await self.get(context, channel_id)
        flt = {"channel": channel.id, "pinned": True}
        after = _parse_cursor(cursor)
        if after:
            flt["created_at"] = {"$gt": after}
        limit = max(1, min(limit, MAX_PINNED_PAGE))
        messages = await self.messages.find(flt, sort=[("created_at", 1)], limit=limit)
        return MessageFeed(messages, messages[-1].created_at.isoformat() if messages else None)
