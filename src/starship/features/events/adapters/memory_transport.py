"""In-process event transport.

Each subscriber owns a bounded asyncio.Queue. Publishing uses put_nowait,
so a full queue drops the event for that subscriber only.
"""

import asyncio
import logging
from typing import AsyncIterator, Dict, Set

from ..entities.protocols import Payload

logger = logging.getLogger(__name__)


class MemoryEventTransport:
    """Single-process pub/sub."""

    def __init__(self, queue_size: int = 256):
        self.queue_size = queue_size
        self._subscribers: Dict[str, Set[asyncio.Queue]] = {}

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscribers.get(topic, ()))

    async def publish(self, topic: str, payload: Payload) -> None:
        for queue in list(self._subscribers.get(topic, ())):
            try:
                queue.put_nowait(payload)
            except asyncio.QueueFull:
                logger.warning(f"Dropping {topic} event for a slow subscriber")

    async def subscribe(self, topic: str) -> AsyncIterator[Payload]:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.queue_size)
        self._subscribers.setdefault(topic, set()).add(queue)
        try:
            while True:
                yield await queue.get()
        finally:
            subscribers = self._subscribers.get(topic)
            if subscribers is not None:
                subscribers.discard(queue)
                if not subscribers:
                    del self._subscribers[topic]

    async def close(self) -> None:
        self._subscribers.clear()
