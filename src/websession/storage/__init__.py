"""Session storage adapters.

Exports:
    - StorageAdapter: Abstract backend contract
    - MemoryStorage: In-process default backend
    - RedisStorage: redis.asyncio backend
"""

from .base import StorageAdapter
from .memory import MemoryStorage
from .redis_storage import RedisStorage

__all__ = ["MemoryStorage", "RedisStorage", "StorageAdapter"]
