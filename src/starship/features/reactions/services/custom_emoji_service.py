"""Custom emojis owned by planets or users."""

import logging
from typing import List

from ....core.context import RequestContext
from ....core.exceptions import ForbiddenError, NotFoundError, ValidationError
from ...permissions.services.permission_service import PermissionService
from ...store.entities import Collections, EntityStore
from ...store.repositories.base import DocumentRepository, generate_id
from ..entities.reaction import CustomEmoji

logger = logging.getLogger(__name__)


class CustomEmojiService:
    def __init__(self, store: EntityStore, permissions: PermissionService):
        self.emojis = DocumentRepository(store.collection(Collections.CUSTOM_EMOJIS), CustomEmoji)
        self.permissions = permissions

    async def get(self, context: RequestContext, emoji_id: str) -> CustomEmoji:
        found = await self.emojis.get(emoji_id)
        if not found:
            raise NotFoundError()
        if found.planet:
            user_id = context.user.id if context.user else None
            await self.permissions.ensure_read(user_id, found.planet)
        return found

    async def planet_emojis(self, context: RequestContext, planet_id: str) -> List[CustomEmoji]:
        user_id = context.user.id if context.user else None
        await self.permissions.ensure_read(user_id, planet_id)
        return await self.emojis.find({"planet": planet_id}, sort=[("name", 1)])

    async def user_emojis(self, user_id: str) -> List[CustomEmoji]:
        return await self.emojis.find({"user": user_id}, sort=[("name", 1)])

    async def create_planet_emoji(self, context: RequestContext, planet_id: str, name: str, url: str) -> CustomEmoji:
        me = context.require_user()
        await self.permissions.ensure_full_write(me.id, planet_id)
        return await self._create(me.id, name, url, planet=planet_id)

    async def create_user_emoji(self, context: RequestContext, name: str, url: str) -> CustomEmoji:
        me = context.require_user()
        return await self._create(me.id, name, url, user=me.id)

    async def _create(self, owner: str, name: str, url: str, **scope) -> CustomEmoji:
        name = name.strip()
        if not name or not name.replace("_", "").isalnum():
            raise ValidationError("Emoji names may only contain letters, numbers and underscores.")
        created = await self.emojis.insert(CustomEmoji(id=generate_id(), owner=owner, name=name, url=url, **scope))
        logger.info(f"Custom emoji {created.id} created by {owner}")
        return created

    async def delete(self, context: RequestContext, emoji_id: str) -> bool:
        me = context.require_user()
        found = await self.emojis.get(emoji_id)
        if not found:
            raise NotFoundError()
        if found.planet:
            await self.permissions.ensure_full_write(me.id, found.planet)
        elif found.user != me.id:
            raise ForbiddenError("You can only delete your own emojis.")
        await self.emojis.delete({"id": emoji_id})
        return True
