"""Chat messages and their live subscriptions."""

import logging
from contextlib import aclosing
from typing import AsyncIterator, List, Optional

from ....config.constants import MAX_MESSAGE_ATTACHMENTS, MAX_MESSAGE_LENGTH
from ....core.context import RequestContext
from ....core.exceptions import ForbiddenError, NotFoundError, ValidationError
from ...events.entities import Payload, Topics
from ...events.services.event_bus import EventBus
from ...notifications.services.mention_service import MentionService
from ...reactions.services.reaction_service import ReactionService
from ...store.entities import Collections, EntityStore
from ...store.repositories.base import DocumentRepository, generate_id, set_fields
from ..entities.chat import Attachment, Channel, Message
from .channel_service import ChannelAccess

logger = logging.getLogger(__name__)


class MessageService(ChannelAccess):
    """Sending, editing and moderating messages.

    Every change is published on the event bus with the message, its
    channel and planet ids so subscribers can filter without a lookup.
    """

    def __init__(
        self,
        store: EntityStore,
        permissions,
        bus: EventBus,
        reactions: ReactionService,
        mentions: MentionService,
        site_url: str = "",
    ):
        super().__init__(permissions)
        self.channels = DocumentRepository(store.collection(Collections.CHANNELS), Channel)
        self.messages = DocumentRepository(store.collection(Collections.MESSAGES), Message)
        self.attachments = DocumentRepository(store.collection(Collections.ATTACHMENTS), Attachment)
        self.bus = bus
        self.reactions = reactions
        self.mentions = mentions
        self.site_url = site_url.rstrip("/")

    async def _publish(self, topic: str, message: Message) -> None:
        await self.bus.publish(
            topic,
            {"message": message.to_document(), "channel": message.channel, "planet": message.planet},
        )

    def _channel_url(self, channel: Channel) -> str:
        if channel.planet:
            return f"{self.site_url}/planet/{channel.planet}/{channel.component_id}/{channel.id}"
        return f"{self.site_url}/messages/{channel.id}"

    async def _message_and_channel(self, message_id: str):
        message = await self.fetch(self.messages, message_id)
        channel = await self.fetch(self.channels, message.channel)
        return message, channel

    async def _owner_or_moderator(self, context: RequestContext, message_id: str) -> Message:
        """Authors manage their own messages; planet moderators manage any.

        Authors keep that right only while they may still post in the
        channel, so a planet ban or a lost membership revokes it.
        """
        me = context.require_user()
        message, channel = await self._message_and_channel(message_id)
        if not channel.planet:
            if message.owner != me.id or not channel.has_participant(me.id):
                raise NotFoundError()
            return message
        if message.owner == me.id:
            await self.permissions.ensure_public_write(me.id, channel.planet)
        else:
            await self.permissions.ensure_full_write(me.id, channel.planet)
        return message

    async def get(self, context: RequestContext, message_id: str) -> Message:
        message, channel = await self._message_and_channel(message_id)
        await self.ensure_channel_read(context, channel)
        return message

    async def send(
        self,
        context: RequestContext,
        channel_id: str,
        content: str,
        attachments: Optional[List[str]] = None,
        reply_to: Optional[str] = None,
    ) -> Message:
        me = context.require_user()
        channel = await self.fetch(self.channels, channel_id)
        planet = None
        if channel.planet:
            planet = await self.permissions.ensure_public_write(me.id, channel.planet)
            sender = await self.permissions.user_repository.get(me.id)
            if sender is None or channel.planet not in sender.following:
                raise ForbiddenError("You can only send messages in followed planets.")
        elif not channel.has_participant(me.id):
            raise NotFoundError()

        attachments = list(dict.fromkeys(attachments or []))
        if len(attachments) > MAX_MESSAGE_ATTACHMENTS:
            raise ValidationError(f"You may only have up to {MAX_MESSAGE_ATTACHMENTS} attachments.")
        if attachments and len(await self.attachments.get_many(attachments)) != len(attachments):
            raise ValidationError("One or more attachments is missing.")
        if reply_to and not await self.messages.get(reply_to):
            raise ValidationError("The message you are trying to reply to does not exist.")
        if len(content) > MAX_MESSAGE_LENGTH:
            raise ValidationError(f"Your message is too long. It can only be {MAX_MESSAGE_LENGTH} characters.")
        if not content.strip() and not attachments:
            raise ValidationError("Messages can't be empty.")

        url = self._channel_url(channel)
        mentioned = await self.mentions.process(
            content, me.id, me.username, f"[{channel.name}]({url})", planet, url
        )
        message = await self.messages.insert(
            Message(
                id=generate_id(),
                channel=channel.id,
                owner=me.id,
                content=content,
                planet=channel.planet,
                component_id=channel.component_id,
                attachments=attachments,
                reply_to=reply_to,
                mentions=mentioned,
            )
        )
        await self._publish(Topics.MESSAGE_RECEIVED, message)
        return message

    async def edit(self, context: RequestContext, message_id: str, content: str) -> Message:
        await self._owner_or_moderator(context, message_id)
        if len(content) > MAX_MESSAGE_LENGTH:
            raise ValidationError(f"Your message is too long. It can only be {MAX_MESSAGE_LENGTH} characters.")
        message = await self.messages.update_by_id(message_id, set_fields(content=content, edited=True))
        if message is None:
            raise NotFoundError()
        await self._publish(Topics.MESSAGE_UPDATED, message)
        return message

    async def delete(self, context: RequestContext, message_id: str) -> bool:
        await self._owner_or_moderator(context, message_id)
        message = await self.messages.delete({"id": message_id})
        if message is None:
            raise NotFoundError()
        await self._publish(Topics.MESSAGE_REMOVED, message)
        return True

    async def set_pinned(self, context: RequestContext, message_id: str, pinned: bool) -> Message:
        message, channel = await self._message_and_channel(message_id)
        await self.ensure_channel_moderation(context, channel)
        message = await self.messages.update_by_id(message.id, {"$set": {"pinned": pinned}})
        if message is None:
            raise NotFoundError()
        await self._publish(Topics.MESSAGE_UPDATED, message)
        return message

    async def react(self, context: RequestContext, message_id: str, emoji: str) -> Message:
        me = context.require_user()
        _, channel = await self._message_and_channel(message_id)
        if channel.planet:
            await self.permissions.ensure_public_write(me.id, channel.planet)
        elif not channel.has_participant(me.id):
            raise NotFoundError()
        message = Message.from_document(
            await self.reactions.toggle(self.messages.collection, message_id, emoji, me.id)
        )
        await self._publish(Topics.MESSAGE_UPDATED, message)
        return message

    # Subscriptions

    async def _subscribe(self, context: RequestContext, topic: str, channel_id: str) -> AsyncIterator[Message]:
        """Messages of one channel, re-checking access for every event."""
        channel = await self.fetch(self.channels, channel_id)
        await self.ensure_channel_read(context, channel)
        user_id = context.user.id if context.user else None

        async def visible(payload: Payload) -> bool:
            if payload["channel"] != channel_id:
                return False
            # Load fresh: membership may have changed since subscribing
            current = await self.channels.get(channel_id)
            return current is not None and await self.can_read_channel(user_id, current)

        async with aclosing(self.bus.subscribe(topic, visible)) as events:
            async for payload in events:
                yield Message.from_document(payload["message"])

    def message_received(self, context: RequestContext, channel_id: str) -> AsyncIterator[Message]:
        return self._subscribe(context, Topics.MESSAGE_RECEIVED, channel_id)

    def message_updated(self, context: RequestContext, channel_id: str) -> AsyncIterator[Message]:
        return self._subscribe(context, Topics.MESSAGE_UPDATED, channel_id)

    def message_removed(self, context: RequestContext, channel_id: str) -> AsyncIterator[Message]:
        return self._subscribe(context, Topics.MESSAGE_REMOVED, channel_id)
