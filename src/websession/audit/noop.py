"""No-op audit backend.

SessionConfig uses it unless another backend is injected.
"""

from typing import Any, Dict

from .base import SessionAuditBackend


class NoOpAuditBackend(SessionAuditBackend):
    """Discards every session event.

    Use Cases:
        - Tests that do not assert on audit events
        - Deployments that only need module logging
    """

    async def log_session_created(
        self, session_id: str, context: Dict[str, Any]
    ) -> None:
        pass

    async def log_session_saved(self, session_id: str, context: Dict[str, Any]) -> None:
        pass

    async def log_session_destroyed(
        self, session_id: str, context: Dict[str, Any]
    ) -> None:
        pass

    async def log_session_regenerated(
        self, old_session_id: str, new_session_id: str, context: Dict[str, Any]
    ) -> None:
        pass

    async def log_suspicious_activity(self, event: str, context: Dict[str, Any]) -> None:
        pass
