"""Audit hooks for the session lifecycle.

Session and SessionStore report creation, saves, destruction, identifier
rotation and rejected identifiers through a SessionAuditBackend.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class SessionAuditBackend(ABC):
    """Receiver for session lifecycle events.

    Design Pattern:
        - Strategy: injected through SessionConfig.audit
        - Events carry identifiers and small context dicts, never data

    Implementations:
        - LoggerAuditBackend: one stdlib log record per event
        - NoOpAuditBackend: discards events (default)

    Note:
        Audit calls happen after the storage operation succeeded. Audit
        backends should not raise; a failing audit backend fails the request.
    """

    @abstractmethod
    async def log_session_created(
        self, session_id: str, context: Dict[str, Any]
    ) -> None:
        """Log first persistence of a fresh session.

        Args:
            session_id: New session identifier
            context: Additional context (expiry, key source)
        """
        pass

    @abstractmethod
    async def log_session_saved(self, session_id: str, context: Dict[str, Any]) -> None:
        """Log save of an existing session.

        Args:
            session_id: Session identifier
            context: Additional context (expiry, key count)
        """
        pass

    @abstractmethod
    async def log_session_destroyed(
        self, session_id: str, context: Dict[str, Any]
    ) -> None:
        """Log session destruction.

        Args:
            session_id: Destroyed session identifier
            context: Additional context
        """
        pass

    @abstractmethod
    async def log_session_regenerated(
        self, old_session_id: str, new_session_id: str, context: Dict[str, Any]
    ) -> None:
        """Log identifier rotation.

        Args:
            old_session_id: Identifier before regeneration
            new_session_id: Identifier after regeneration
            context: Additional context
        """
        pass

    @abstractmethod
    async def log_suspicious_activity(self, event: str, context: Dict[str, Any]) -> None:
        """Log suspicious activity detected.

        Args:
            event: Suspicious event type ("invalid_identifier", ...)
            context: Event details (never the raw token)

        Examples:
            context = {
                "source": "cookie:session_id",
                "token_length": 81,
            }
        """
        pass
