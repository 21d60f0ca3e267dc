"""Storage adapter abstract interface.

This module defines the StorageAdapter interface that every session backend
(memory, Redis, SQL, ...) must follow. The contract is deliberately small:
byte values under string keys with a TTL. No compare-and-swap, so two
requests saving the same session race with last-write-wins semantics.
"""

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Optional


class StorageAdapter(ABC):
    """Abstract interface for session storage backends.

    Design Pattern:
        - Dependency Inversion: the session core depends only on this class
        - Liskov Substitution: all implementations are interchangeable
        - Open-Closed: add new backends without touching the core

    Implementations:
        - MemoryStorage: In-process dict with lazy TTL cleanup
        - RedisStorage: Any ``redis.asyncio`` compatible client

    Error contract:
        Implementations raise StorageError for I/O failures. A missing key is
        never an error: get() returns None and delete() does nothing.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[bytes]:
        """Fetch stored bytes.

        Args:
            key: Session identifier

        Returns:
            Stored bytes, or None if not found or expired

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: bytes, ttl: timedelta) -> None:
        """Store bytes with time-to-live.

        Args:
            key: Session identifier
            value: Serialized session data
            ttl: Time until the backend may drop the entry

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete entry (no-op if missing).

        Args:
            key: Session identifier

        Raises:
            StorageError: If the delete fails
        """
        pass

    @abstractmethod
    async def reset(self) -> None:
        """Delete every session entry owned by this adapter.

        Raises:
            StorageError: If the backend cannot be cleared
        """
        pass

    async def close(self) -> None:
        """Release backend resources (connections, pools).

        Default implementation does nothing.
        """
        return None
