"""Event bus with per-event subscriber filtering."""

import logging
from contextlib import aclosing
from typing import AsyncIterator, Awaitable, Callable

from ....core.exceptions import StarshipError
from ..entities.protocols import EventTransport, Payload

logger = logging.getLogger(__name__)

Predicate = Callable[[Payload], Awaitable[bool]]


class EventBus:
    """Decouples where a change happens from who hears about it.

    Subscribers pass a predicate that is evaluated for every event. It is
    expected to match the subscriber's scope and re-check permissions, so a
    revoked member stops receiving events without unsubscribing. Rejected
    events are dropped silently. The bus never knows which transport runs.
    """

    def __init__(self, transport: EventTransport):
        self.transport = transport

    async def publish(self, topic: str, payload: Payload) -> None:
        logger.debug(f"Publishing {topic}")
        await self.transport.publish(topic, payload)

    async def subscribe(self, topic: str, predicate: Predicate) -> AsyncIterator[Payload]:
        async with aclosing(self.transport.subscribe(topic)) as events:
            async for payload in events:
                try:
                    allowed = await predicate(payload)
                except StarshipError as e:
                    # The entity vanished or the subscriber lost access
                    logger.debug(f"Filtered {topic} event: {e.error_code}")
                    allowed = False
                if allowed:
                    yield payload
