"""Session error types.

Every failure the package raises derives from SessionError so callers can
catch the whole family at once, while still telling "backend is down"
(StorageError) apart from "data is bad" (SerializationError).

Invalid or tampered identifiers are NOT represented here: they are treated
as an absent identifier and silently produce a fresh session.
"""

from typing import Any, Dict, Optional


class SessionError(Exception):
    """Base class for all session errors.

    Attributes:
        message: Human-readable message.
        details: Optional context for debugging (key, operation, etc.).
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class ConfigError(SessionError, ValueError):
    """Invalid configuration detected at construction time.

    A programmer error, not a runtime condition: never retried.
    """


class StorageError(SessionError):
    """Storage backend failed on get/set/delete/reset.

    Attributes:
        operation: Backend operation that failed ("get", "set", ...).
        key: Storage key involved, if any.
    """

    def __init__(
        self,
        message: str,
        operation: str,
        key: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.operation = operation
        self.key = key


class SerializationError(SessionError):
    """Session data could not be encoded."""


class CorruptSessionError(SerializationError):
    """Stored payload could not be decoded into session data.

    Attributes:
        session_id: Identifier whose payload is corrupt (set by the store).
    """

    def __init__(
        self,
        message: str,
        session_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.session_id = session_id


class SessionClosedError(SessionError):
    """Mutation attempted on a session that was already saved or destroyed."""
