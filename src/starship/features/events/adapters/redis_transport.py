"""Redis pub/sub event transport for multi-process deployments."""

import logging
from typing import AsyncIterator, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from ...store.utils.codec import dumps, loads
from ..entities.protocols import Payload

logger = logging.getLogger(__name__)


class RedisEventTransport:
    """Cross-process pub/sub over Redis channels.

    Payloads travel as JSON; datetimes survive through the document codec.
    """

    def __init__(self, url: str, channel_prefix: str = "starship:", client: Optional[redis.Redis] = None):
        self.channel_prefix = channel_prefix
        self._client = client or redis.from_url(url)

    def _channel(self, topic: str) -> str:
        return f"{self.channel_prefix}{topic}"

    async def publish(self, topic: str, payload: Payload) -> None:
        try:
            await self._client.publish(self._channel(topic), dumps(payload))
        except RedisError as e:
            # Live delivery is best effort; the change itself is already stored
            logger.error(f"Failed to publish {topic} event: {e}")

    async def subscribe(self, topic: str) -> AsyncIterator[Payload]:
        pubsub = self._client.pubsub(ignore_subscribe_messages=True)
        await pubsub.subscribe(self._channel(topic))
        try:
            async for message in pubsub.listen():
                if message.get("type") == "message":
                    yield loads(message["data"])
        finally:
            await pubsub.unsubscribe(self._channel(topic))
            await pubsub.aclose()

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError as e:
            logger.error(f"Redis health check failed: {e}")
            return False

    async def close(self) -> None:
        await self._client.aclose()
