"""Notifications: persistence, listing and live delivery."""

import logging
from contextlib import aclosing
from typing import AsyncIterator, List, Optional

from ....core.context import RequestContext
from ....core.exceptions import NotFoundError
from ...events.entities import Payload, Topics
from ...events.services.event_bus import EventBus
from ...store.entities import Collections, EntityStore
from ...store.repositories.base import DocumentRepository, generate_id
from ..entities.notification import Notification

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, store: EntityStore, bus: EventBus):
        self.notifications = DocumentRepository(store.collection(Collections.NOTIFICATIONS), Notification)
        self.bus = bus

    async def create(self, user_id: str, text: str, icon: str = "notification", to_url: Optional[str] = None) -> Notification:
        """Store a notification for ``user_id`` and push it to their live subscriptions."""
        notification = await self.notifications.insert(
            Notification(id=generate_id(), user=user_id, text=text, icon=icon, to_url=to_url)
        )
        await self.bus.publish(Topics.NOTIFICATION_RECEIVED, {"notification": notification.to_document()})
        return notification

    async def list(self, context: RequestContext, limit: int = 50) -> List[Notification]:
        me = context.require_user()
        return await self.notifications.find({"user": me.id}, sort=[("created_at", -1)], limit=limit)

    async def get(self, context: RequestContext, notification_id: str) -> Notification:
        me = context.require_user()
        notification = await self.notifications.find_one({"id": notification_id, "user": me.id})
        if not notification:
            raise NotFoundError()
        return notification

    async def clear(self, context: RequestContext, notification_id: str) -> bool:
        me = context.require_user()
        if not await self.notifications.delete({"id": notification_id, "user": me.id}):
            raise NotFoundError()
        return True

    async def clear_all(self, context: RequestContext) -> int:
        me = context.require_user()
        return await self.notifications.delete_many({"user": me.id})

    async def mark_all_read(self, context: RequestContext) -> int:
        me = context.require_user()
        return await self.notifications.collection.update_many(
            {"user": me.id, "is_read": False}, {"$set": {"is_read": True}}
        )

    async def subscribe(self, context: RequestContext) -> AsyncIterator[Notification]:
        """Live notifications addressed to the subscriber only."""
        me = context.require_user()

        async def addressed_to_me(payload: Payload) -> bool:
            return payload["notification"]["user"] == me.id

        async with aclosing(self.bus.subscribe(Topics.NOTIFICATION_RECEIVED, addressed_to_me)) as events:
            async for payload in events:
                yield Notification.from_document(payload["notification"])
