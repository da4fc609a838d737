"""Real-time event distribution."""

from .adapters import MemoryEventTransport, RedisEventTransport
from .entities import EventTransport, Payload, Topics
from .services import EventBus

__all__ = ["EventBus", "EventTransport", "MemoryEventTransport", "Payload", "RedisEventTransport", "Topics"]
