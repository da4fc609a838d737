"""Subscription root.

Each subscription holds its own request context for the lifetime of the
connection; every delivered event is re-checked against it.
"""

from typing import AsyncGenerator

import strawberry
from strawberry.types import Info

from .types import MessageType, NotificationType


@strawberry.type
class Subscription:
    @strawberry.subscription
    async def message_received(self, info: Info, channel_id: strawberry.ID) -> AsyncGenerator[MessageType, None]:
        async for message in info.context.services.messages.message_received(info.context.request_context, channel_id):
            yield MessageType.from_entity(message)

    @strawberry.subscription
    async def message_updated(self, info: Info, channel_id: strawberry.ID) -> AsyncGenerator[MessageType, None]:
        async for message in info.context.services.messages.message_updated(info.context.request_context, channel_id):
            yield MessageType.from_entity(message)

    @strawberry.subscription
    async def message_removed(self, info: Info, channel_id: strawberry.ID) -> AsyncGenerator[MessageType, None]:
        async for message in info.context.services.messages.message_removed(info.context.request_context, channel_id):
            yield MessageType.from_entity(message)

    @strawberry.subscription
    async def notification_received(self, info: Info) -> AsyncGenerator[NotificationType, None]:
        """Live notifications; the connection also marks the caller online."""
        services = info.context.services
        context = info.context.request_context
        me = context.require_user()
        await services.users.add_session(me.id, context.request_id)
        try:
            async for notification in services.notifications.subscribe(context):
                yield NotificationType.from_entity(notification)
        finally:
            await services.users.remove_session(me.id, context.request_id)
