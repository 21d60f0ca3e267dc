"""Session store - entry point producing per-request Session handles.

The store coordinates:
- Identifier codec (extraction + signature verification)
- Storage adapter (persistence)
- Serializer (bytes <-> session data)
- Audit backend (lifecycle events)

It holds configuration only. Records belong to the Session handles it
returns, so one store can serve many concurrent requests without locking.
"""

import logging
from typing import Optional

from .codec import extract
from .errors import ConfigError, CorruptSessionError
from .models.config import SessionConfig
from .models.record import SessionRecord
from .session import Session
from .storage.base import StorageAdapter
from .storage.memory import MemoryStorage
from .transport import RequestContext

logger = logging.getLogger(__name__)


class SessionStore:
    """Session store - load-or-create sessions for incoming requests.

    Flow (get):
        1. Extract identifier from the request (cookie/header/query)
        2. Verify signature if signing is configured
        3. Fetch payload from storage
        4. Deserialize into a record, or start a fresh one

    Concurrency:
        Two requests carrying the same identifier each load an independent
        copy. Whichever saves last overwrites the other entirely: there is
        no merge and no optimistic-concurrency check, as with ordinary
        cookie-backed sessions.

    Identifier policy:
        - Missing, empty or unverifiable identifier: fresh session, new id
        - Well-formed identifier with no backend entry: fresh session, new id
          (the client's id is never adopted, preventing session fixation)

    Example:
        ```python
        store = SessionStore(SessionConfig(expiration=timedelta(hours=2)))

        session = await store.get(context)
        session.set("name", "john")
        await session.save()
        ```
    """

    def __init__(self, config: Optional[SessionConfig] = None):
        """Initialize session store.

        Args:
            config: Store configuration (defaults to SessionConfig())
        """
        self.config = config or SessionConfig()
        self.storage: StorageAdapter = self.config.storage or MemoryStorage()

    @property
    def serializer(self):
        return self.config.serializer

    @property
    def audit(self):
        return self.config.audit

    def generate_id(self) -> str:
        """Produce a new identifier with the configured generator.

        Raises:
            ConfigError: If the generator returns an empty or non-string value
        """
        session_id = self.config.key_generator()
        if not isinstance(session_id, str) or not session_id:
            raise ConfigError(
                "key_generator must return a non-empty string",
                details={"returned": repr(session_id)},
            )
        return session_id

    async def _resolve_identifier(self, context: RequestContext) -> Optional[str]:
        """Extract and verify the client identifier.

        Returns:
            Usable identifier, or None (missing, empty or failed verification)
        """
        lookup = self.config.lookup
        raw = extract(context, lookup)
        if raw is None:
            return None

        unsign_key = self.config.unsign_key
        if unsign_key is None:
            return raw

        session_id, ok = unsign_key(raw)
        if not ok or not session_id:
            logger.warning(
                "Session identifier failed verification",
                extra={"source": str(lookup)},
            )
            await self.audit.log_suspicious_activity(
                "invalid_identifier",
                context={"source": str(lookup), "token_length": len(raw)},
            )
            return None
        return session_id

    async def get(self, context: RequestContext) -> Session:
        """Load the request's session, or create a fresh one.

        Args:
            context: Request accessors supplied by the caller

        Returns:
            Session handle bound to this request

        Raises:
            StorageError: If the backend read fails
            CorruptSessionError: If the stored payload cannot be decoded
        """
        session_id = await self._resolve_identifier(context)

        if session_id is not None:
            payload = await self.storage.get(session_id)
            if payload is not None:
                try:
                    data = self.serializer.loads(payload)
                except CorruptSessionError as e:
                    e.session_id = session_id
                    logger.error(
                        "Stored session payload is corrupt",
                        extra={"session_id": session_id},
                    )
                    raise

                logger.debug("Session loaded", extra={"session_id": session_id})
                record = SessionRecord(id=session_id, data=data, fresh=False)
                return Session(record, self, context, persisted=True)

            logger.debug("Unknown session identifier, creating fresh session")

        record = SessionRecord(id=self.generate_id(), fresh=True)
        return Session(record, self, context)

    def register_type(self, cls: type, name: Optional[str] = None) -> None:
        """Register a dataclass or pydantic model for session values.

        Call at startup, before serving requests.

        Args:
            cls: Class to register
            name: Stable payload name (default: module.qualname)
        """
        self.serializer.register_type(cls, name)

    async def delete(self, session_id: str) -> None:
        """Remove one session from the backend by identifier.

        Raises:
            StorageError: If the backend delete fails
        """
        await self.storage.delete(session_id)
        await self.audit.log_session_destroyed(session_id, context={"source": "store"})

    async def reset(self) -> None:
        """Remove every session from the backend.

        Raises:
            StorageError: If the backend cannot be cleared
        """
        await self.storage.reset()
        logger.info("All sessions reset")

    async def close(self) -> None:
        """Release the storage backend (call on application shutdown)."""
        await self.storage.close()
