"""Redis storage adapter.

Wraps an async Redis client (``redis.asyncio.Redis`` or anything
API-compatible, e.g. fakeredis) and maps Redis exceptions to StorageError.
Expiration is enforced by Redis itself via PX on every write.
"""

import logging
import re
from datetime import timedelta
from typing import Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from ..errors import StorageError
from .base import StorageAdapter

logger = logging.getLogger(__name__)

RESET_BATCH_SIZE = 500

# Characters with special meaning in SCAN MATCH patterns
GLOB_SPECIAL = re.compile(r"[*?\[\]\\]")


class RedisStorage(StorageAdapter):
    """Redis-backed session storage.

    Keys are namespaced with ``key_prefix`` so reset() only removes session
    entries, never unrelated data sharing the same database.

    Example:
        ```python
        from redis.asyncio import Redis

        client = Redis.from_url("redis://localhost:6379/0")
        storage = RedisStorage(client, key_prefix="app:session:")
        ```

    Attributes:
        key_prefix: Prefix prepended to every session identifier
    """

    def __init__(
        self,
        redis_client: Redis,
        key_prefix: str = "session:",
        close_client: bool = False,
    ):
        """Initialize with app's Redis client.

        Args:
            redis_client: Async Redis client instance
            key_prefix: Namespace for session keys
            close_client: Close the client in close() (set when this adapter
                created the client itself)
        """
        self._redis = redis_client
        self.key_prefix = key_prefix
        self._close_client = close_client

    @classmethod
    def from_url(cls, url: str, key_prefix: str = "session:") -> "RedisStorage":
        """Create adapter owning a new client.

        Args:
            url: Redis URL (e.g., redis://host:6379/0)
            key_prefix: Namespace for session keys

        Returns:
            RedisStorage that closes its client on close()
        """
        client = Redis.from_url(url, decode_responses=False)
        return cls(client, key_prefix=key_prefix, close_client=True)

    def _key(self, key: str) -> str:
        """Generate Redis key for session (e.g., "session:abc123")."""
        return f"{self.key_prefix}{key}"

    def _match_pattern(self) -> str:
        """SCAN pattern matching every key under the prefix, literally."""
        escaped = GLOB_SPECIAL.sub(r"\\\g<0>", self.key_prefix)
        return escaped + "*"

    async def get(self, key: str) -> Optional[bytes]:
        """Fetch session bytes from Redis.

        Args:
            key: Session identifier

        Returns:
            Stored bytes, or None if missing or expired

        Raises:
            StorageError: On Redis failure
        """
        try:
            value = await self._redis.get(self._key(key))
        except RedisError as e:
            raise StorageError(
                f"Failed to get session '{key}' from Redis",
                operation="get",
                key=key,
                details={"error": str(e)},
            ) from e

        if value is None:
            return None
        if isinstance(value, str):
            # decode_responses=True clients hand back text
            return value.encode("utf-8")
        return value

    async def set(self, key: str, value: bytes, ttl: timedelta) -> None:
        """Store session bytes with TTL.

        Args:
            key: Session identifier
            value: Serialized session data
            ttl: Time-to-live (truncated to whole milliseconds, minimum 1)

        Raises:
            StorageError: On Redis failure
        """
        ttl_ms = max(int(ttl.total_seconds() * 1000), 1)
        try:
            await self._redis.set(self._key(key), value, px=ttl_ms)
        except RedisError as e:
            raise StorageError(
                f"Failed to set session '{key}' in Redis",
                operation="set",
                key=key,
                details={"ttl_ms": ttl_ms, "error": str(e)},
            ) from e

    async def delete(self, key: str) -> None:
        """Delete session from Redis (no-op if missing).

        Args:
            key: Session identifier

        Raises:
            StorageError: On Redis failure
        """
        try:
            await self._redis.delete(self._key(key))
        except RedisError as e:
            raise StorageError(
                f"Failed to delete session '{key}' from Redis",
                operation="delete",
                key=key,
                details={"error": str(e)},
            ) from e

    async def reset(self) -> None:
        """Delete every key under ``key_prefix``.

        Raises:
            StorageError: On Redis failure
        """
        deleted = 0
        try:
            batch = []
            async for redis_key in self._redis.scan_iter(match=self._match_pattern()):
                batch.append(redis_key)
                if len(batch) >= RESET_BATCH_SIZE:
                    deleted += await self._redis.delete(*batch)
                    batch = []
            if batch:
                deleted += await self._redis.delete(*batch)
        except RedisError as e:
            raise StorageError(
                "Failed to reset session storage in Redis",
                operation="reset",
                details={"key_prefix": self.key_prefix, "error": str(e)},
            ) from e

        logger.info(
            "Session storage reset",
            extra={"key_prefix": self.key_prefix, "deleted": deleted},
        )

    async def close(self) -> None:
        """Close the Redis client if this adapter owns it."""
        if self._close_client:
            await self._redis.aclose()
