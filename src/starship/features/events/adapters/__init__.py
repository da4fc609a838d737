from .memory_transport import MemoryEventTransport
from .redis_transport import RedisEventTransport

__all__ = ["MemoryEventTransport", "RedisEventTransport"]
