"""Chat component lifecycle."""

import logging

from ....core.context import RequestContext
from ...components.services.access import ComponentAccess
from ...store.entities import Collections, EntityStore
from ...store.repositories.base import DocumentRepository, generate_id
from ..entities.chat import Channel, Chat, Message

logger = logging.getLogger(__name__)


class ChatService(ComponentAccess):
    def __init__(self, store: EntityStore, permissions):
        super().__init__(permissions)
        self.chats = DocumentRepository(store.collection(Collections.CHATS), Chat)
        self.channels = DocumentRepository(store.collection(Collections.CHANNELS), Channel)
        self.messages = DocumentRepository(store.collection(Collections.MESSAGES), Message)

    async def create_component(self, planet_id: str, owner_id: str) -> Chat:
        return await self.chats.insert(Chat(id=generate_id(), owner=owner_id, planet=planet_id))

    async def delete_component(self, component_id: str) -> None:
        removed = await self.messages.delete_many({"component_id": component_id})
        await self.channels.delete_many({"component_id": component_id})
        await self.chats.delete({"id": component_id})
        logger.info(f"Deleted chat {component_id} and {removed} messages")

    async def get(self, context: RequestContext, chat_id: str) -> Chat:
        return await self.readable(context, self.chats, chat_id)

    async def channels_of(self, context: RequestContext, chat_id: str):
        await self.readable(context, self.chats, chat_id)
        return await self.channels.find({"component_id": chat_id}, sort=[("created_at", 1)])
