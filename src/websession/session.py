"""Per-request session handle.

A Session wraps exactly one SessionRecord for the duration of one request.
It exposes the key/value API to handler code and drives the record through
its lifecycle:

    ACTIVE --save()--> SAVED
    ACTIVE --destroy()--> DESTROYED
    ACTIVE --regenerate()/reset()--> ACTIVE (new identifier)

Once SAVED or DESTROYED, read-only accessors keep working but every mutator
raises SessionClosedError. destroy() on a DESTROYED session is a no-op.
"""

import logging
import math
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .errors import SessionClosedError
from .models.record import SessionRecord
from .transport import RequestContext, SessionCookie

if TYPE_CHECKING:
    from .store import SessionStore

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Lifecycle state of a Session handle."""

    ACTIVE = "active"
    SAVED = "saved"
    DESTROYED = "destroyed"


class Session:
    """Caller-facing API bound to one record for one request.

    Handles are created by SessionStore.get(); never share one between
    requests.

    Example:
        ```python
        session = await store.get(context)
        session.set("name", "john")
        await session.save()
        ```
    """

    def __init__(
        self,
        record: SessionRecord,
        store: "SessionStore",
        context: RequestContext,
        persisted: bool = False,
    ):
        """Initialize handle.

        Args:
            record: Record this handle exclusively owns
            store: Store that produced the handle (configuration, backend)
            context: Request accessors used to emit the identifier
            persisted: Whether a backend entry exists under record.id
        """
        self._record = record
        self._store = store
        self._context = context
        self._persisted = persisted
        self._state = SessionState.ACTIVE

    def __repr__(self) -> str:
        return (
            f"Session(id={self._record.id!r}, fresh={self._record.fresh}, "
            f"state={self._state.value})"
        )

    # Read-only accessors

    @property
    def id(self) -> str:
        """Current identifier (reflects regenerate())."""
        return self._record.id

    @property
    def fresh(self) -> bool:
        """True if no backend entry existed when the session was loaded."""
        return self._record.fresh

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def modified(self) -> bool:
        """True if the data, expiry or identifier changed since load."""
        return self._record.modified

    @property
    def active(self) -> bool:
        return self._state is SessionState.ACTIVE

    @property
    def expiry(self) -> timedelta:
        """Effective TTL for the next save (override or store default)."""
        return self._record.expiration or self._store.config.expiration

    @property
    def client_token(self) -> str:
        """Identifier in the form sent to clients (signed if configured)."""
        sign_key = self._store.config.sign_key
        if sign_key is None:
            return self._record.id
        return sign_key(self._record.id)

    def get(self, key: str, default: Any = None) -> Any:
        """Return stored value, or default if the key is missing.

        The stored object itself is returned, not a copy. Changing a mutable
        value in place (e.g. appending to a list) does not mark the session
        modified, but the change is persisted by the next save(), which
        always writes the current data. SessionMiddleware with auto_save
        saves every loaded session for this reason.
        """
        return self._record.data.get(key, default)

    def keys(self) -> List[str]:
        """Snapshot of the current keys, in insertion order."""
        return list(self._record.data)

    def to_dict(self) -> Dict[str, Any]:
        """Shallow copy of the session data."""
        return dict(self._record.data)

    def __contains__(self, key: object) -> bool:
        return key in self._record.data

    def __len__(self) -> int:
        return len(self._record.data)

    # Mutators

    def _ensure_active(self, operation: str) -> None:
        if self._state is not SessionState.ACTIVE:
            raise SessionClosedError(
                f"Cannot {operation} session {self._record.id!r}: "
                f"session is already {self._state.value}",
                details={"operation": operation, "state": self._state.value},
            )

    def set(self, key: str, value: Any) -> None:
        """Insert or overwrite a value. Persisted on save().

        Raises:
            TypeError: If key is not a string
            SessionClosedError: If the session was saved or destroyed
        """
        self._ensure_active("set")
        if not isinstance(key, str):
            raise TypeError(f"Session keys must be strings, got {type(key).__name__}")
        self._record.data[key] = value
        self._record.modified = True

    def delete(self, key: str) -> None:
        """Remove a key if present.

        Raises:
            SessionClosedError: If the session was saved or destroyed
        """
        self._ensure_active("delete")
        if key in self._record.data:
            del self._record.data[key]
            self._record.modified = True

    def set_expiry(self, expiration: timedelta) -> None:
        """Override the TTL applied by the next save().

        Args:
            expiration: Positive duration

        Raises:
            ValueError: If expiration is not positive
            SessionClosedError: If the session was saved or destroyed
        """
        self._ensure_active("set expiry on")
        if expiration <= timedelta(0):
            raise ValueError("expiration must be positive")
        self._record.expiration = expiration
        self._record.modified = True

    async def regenerate(self) -> None:
        """Rotate the identifier, keeping the data.

        Deletes the old backend entry (if one exists), assigns a new
        identifier and marks the session modified so the next save() writes
        the data and sends the new identifier to the client.

        Raises:
            StorageError: If the old entry cannot be deleted (the old
                identifier is kept)
            SessionClosedError: If the session was saved or destroyed
        """
        self._ensure_active("regenerate")
        old_id = self._record.id
        if self._persisted:
            await self._store.storage.delete(old_id)
            self._persisted = False

        self._record.id = self._store.generate_id()
        self._record.modified = True

        logger.debug("Session identifier regenerated")
        await self._store.audit.log_session_regenerated(
            old_id, self._record.id, context={"source": str(self._store.config.lookup)}
        )

    async def reset(self) -> None:
        """Clear data, drop the expiry override and rotate the identifier.

        Raises:
            StorageError: If the old entry cannot be deleted
            SessionClosedError: If the session was saved or destroyed
        """
        self._ensure_active("reset")
        await self.regenerate()
        self._record.data.clear()
        self._record.expiration = None

    async def save(self) -> None:
        """Persist data with the effective TTL and emit the identifier.

        On failure the handle stays ACTIVE and unchanged so the caller may
        retry.

        Raises:
            SerializationError: If a value cannot be encoded
            StorageError: If the backend write fails
            SessionClosedError: If the session was saved or destroyed
        """
        self._ensure_active("save")
        payload = self._store.serializer.dumps(self._record.data)
        ttl = self.expiry

        await self._store.storage.set(self._record.id, payload, ttl)

        first_write = self._record.fresh and not self._persisted
        self._persisted = True
        self._state = SessionState.SAVED
        self._emit_cookie(ttl)

        context = {
            "expiry_seconds": int(ttl.total_seconds()),
            "key_count": len(self._record.data),
        }
        if first_write:
            await self._store.audit.log_session_created(self._record.id, context)
        else:
            await self._store.audit.log_session_saved(self._record.id, context)

    async def destroy(self) -> None:
        """Delete the backend entry, clear data and expire the client cookie.

        Idempotent: destroying a destroyed session does nothing.

        Raises:
            StorageError: If the backend delete fails (session stays ACTIVE)
            SessionClosedError: If the session was already saved
        """
        if self._state is SessionState.DESTROYED:
            return
        self._ensure_active("destroy")

        await self._store.storage.delete(self._record.id)

        self._persisted = False
        self._record.data.clear()
        self._state = SessionState.DESTROYED
        self._expire_cookie()

        await self._store.audit.log_session_destroyed(
            self._record.id, context={"source": str(self._store.config.lookup)}
        )

    # Identifier transport

    def _emit_cookie(self, ttl: timedelta) -> None:
        """Schedule the identifier cookie (cookie lookups only)."""
        config = self._store.config
        if not config.lookup.is_cookie:
            return

        max_age: Optional[int] = None
        expires: Optional[datetime] = None
        if not config.cookie_session_only:
            max_age = max(math.ceil(ttl.total_seconds()), 1)
            expires = datetime.now(timezone.utc) + timedelta(seconds=max_age)

        self._context.set_cookie(self._build_cookie(self.client_token, max_age, expires))

    def _expire_cookie(self) -> None:
        """Schedule removal of the identifier cookie (cookie lookups only)."""
        if not self._store.config.lookup.is_cookie:
            return
        expires = datetime(1970, 1, 1, tzinfo=timezone.utc)
        self._context.set_cookie(self._build_cookie("", 0, expires))

    def _build_cookie(
        self, value: str, max_age: Optional[int], expires: Optional[datetime]
    ) -> SessionCookie:
        config = self._store.config
        return SessionCookie(
            name=config.lookup.name,
            value=value,
            max_age=max_age,
            expires=expires,
            path=config.cookie_path or "/",
            domain=config.cookie_domain,
            secure=config.cookie_secure,
            http_only=config.cookie_http_only,
            same_site=config.same_site,
        )
