"""Session store factory for dependency injection.

This module provides factory functions that create fully-configured
SessionStore instances with storage, signing and audit wired together
from SessionSettings.

Usage:
    from websession.factory import get_session_store
    from websession.models.settings import SessionSettings

    store = get_session_store(SessionSettings())
"""

import logging
from datetime import timedelta
from typing import Optional

from redis.asyncio import Redis

from .audit.base import SessionAuditBackend
from .audit.logger import LoggerAuditBackend
from .audit.noop import NoOpAuditBackend
from .codec import HMACSigner
from .errors import ConfigError
from .models.config import SessionConfig
from .models.settings import SessionSettings
from .storage.base import StorageAdapter
from .storage.memory import MemoryStorage
from .storage.redis_storage import RedisStorage
from .store import SessionStore

logger = logging.getLogger(__name__)


def get_session_store(
    settings: Optional[SessionSettings] = None,
    redis_client: Optional[Redis] = None,
    storage: Optional[StorageAdapter] = None,
) -> SessionStore:
    """Create configured SessionStore instance.

    Args:
        settings: Session settings (default: loaded from environment)
        redis_client: Redis client for "redis" storage (takes precedence
            over settings.redis_url; the caller keeps ownership)
        storage: Explicit storage adapter (overrides settings.storage_type)

    Returns:
        Fully configured SessionStore

    Raises:
        ConfigError: If required dependencies are missing for chosen settings

    Example:
        >>> store = get_session_store(
        ...     SessionSettings(storage_type="redis", secret_key="change-me"),
        ...     redis_client=Redis.from_url("redis://localhost"),
        ... )
    """
    settings = settings or SessionSettings()

    if storage is None:
        storage = _create_storage(settings, redis_client)

    sign_key = unsign_key = None
    if settings.secret_key:
        signer = HMACSigner(settings.secret_key, salt=settings.signing_salt)
        sign_key, unsign_key = signer.sign, signer.unsign

    config = SessionConfig(
        expiration=timedelta(seconds=settings.expiration_seconds),
        storage=storage,
        key_lookup=settings.key_lookup,
        cookie_domain=settings.cookie_domain,
        cookie_path=settings.cookie_path,
        cookie_secure=settings.cookie_secure,
        cookie_http_only=settings.cookie_http_only,
        cookie_same_site=settings.cookie_same_site,
        cookie_session_only=settings.cookie_session_only,
        sign_key=sign_key,
        unsign_key=unsign_key,
        audit=_create_audit_backend(settings),
    )

    logger.debug(
        "Session store created",
        extra={
            "storage_type": type(storage).__name__,
            "key_lookup": settings.key_lookup,
            "signed": sign_key is not None,
        },
    )
    return SessionStore(config)


def _create_storage(
    settings: SessionSettings, redis_client: Optional[Redis]
) -> StorageAdapter:
    """Create storage backend based on settings.

    Raises:
        ConfigError: If redis storage is chosen without a client or URL
    """
    if settings.storage_type == "memory":
        return MemoryStorage()
    elif settings.storage_type == "redis":
        if redis_client is not None:
            return RedisStorage(redis_client, key_prefix=settings.redis_key_prefix)
        if settings.redis_url:
            return RedisStorage.from_url(
                settings.redis_url, key_prefix=settings.redis_key_prefix
            )
        raise ConfigError("redis_client or redis_url is required for 'redis' storage")
    else:
        raise ConfigError(
            f"Invalid storage_type: {settings.storage_type}. Must be 'memory' or 'redis'"
        )


def _create_audit_backend(settings: SessionSettings) -> SessionAuditBackend:
    """Create audit backend based on settings."""
    if settings.audit_type == "logger":
        return LoggerAuditBackend(logger_name=settings.audit_logger_name)
    elif settings.audit_type == "noop":
        return NoOpAuditBackend()
    else:
        raise ConfigError(
            f"Invalid audit_type: {settings.audit_type}. Must be 'logger' or 'noop'"
        )


def get_session_store_for_testing() -> SessionStore:
    """Create session store for testing (memory storage, no audit).

    Uses a short TTL and isolated in-memory storage.

    Example:
        >>> store = get_session_store_for_testing()
    """
    return SessionStore(
        SessionConfig(
            expiration=timedelta(minutes=5),
            storage=MemoryStorage(),
            audit=NoOpAuditBackend(),
        )
    )
