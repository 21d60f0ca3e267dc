"""In-memory storage adapter.

Concrete implementation using a Python dict with TTL tracking.
No external dependencies - the default backend when none is configured.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Tuple

from .base import StorageAdapter


class MemoryStorage(StorageAdapter):
    """In-memory dict storage with TTL.

    Entries are stored as ``(value, expires_at)``. Expired entries are
    removed lazily during operations; there is no background sweep.

    Usage:
        ```python
        storage = MemoryStorage()
        await storage.set("abc", b"{}", timedelta(minutes=5))
        ```

    Note:
        Not suitable for production with multiple processes/servers.
        Sessions are lost on restart. Each SessionStore without an explicit
        storage gets its own instance.
    """

    def __init__(self):
        """Initialize in-memory storage."""
        self._entries: Dict[str, Tuple[bytes, datetime]] = {}

    def _cleanup_expired(self) -> None:
        """Remove expired entries from memory."""
        now = datetime.now(timezone.utc)
        expired_keys = [
            key for key, (_, expires_at) in self._entries.items() if expires_at <= now
        ]

        for key in expired_keys:
            del self._entries[key]

    async def get(self, key: str) -> Optional[bytes]:
        """Retrieve bytes from memory.

        Args:
            key: Session identifier

        Returns:
            Stored bytes, or None if not found or expired
        """
        self._cleanup_expired()
        entry = self._entries.get(key)
        if entry is None:
            return None
        return entry[0]

    async def set(self, key: str, value: bytes, ttl: timedelta) -> None:
        """Store bytes in memory.

        Args:
            key: Session identifier
            value: Serialized session data
            ttl: Time-to-live
        """
        self._cleanup_expired()
        self._entries[key] = (bytes(value), datetime.now(timezone.utc) + ttl)

    async def delete(self, key: str) -> None:
        """Delete entry from memory (no-op if missing).

        Args:
            key: Session identifier
        """
        self._entries.pop(key, None)

    async def reset(self) -> None:
        """Clear all entries."""
        self._entries.clear()

    def entry_count(self) -> int:
        """Get number of stored entries.

        Returns:
            Number of entries

        Note:
            Includes expired entries not yet cleaned up.
        """
        return len(self._entries)
