from .asyncpg_adapter import AsyncPGEntityStore
from .memory_adapter import MemoryEntityStore

__all__ = ["AsyncPGEntityStore", "MemoryEntityStore"]
