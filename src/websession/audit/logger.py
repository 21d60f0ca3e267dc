"""Logger audit backend - session events as stdlib log records.

Handlers attached by the application decide where records end up (files,
syslog, JSON aggregators).
"""

import logging
from typing import Any, Dict, Optional

from .base import SessionAuditBackend


class LoggerAuditBackend(SessionAuditBackend):
    """Audit backend writing one log record per lifecycle event.

    Routine saves are DEBUG, creation/destruction/rotation are INFO and
    rejected identifiers are WARNING. Each record carries ``event_type``
    plus the event context in ``extra`` for structured formatters.

    Example Configuration:
        ```python
        import logging

        logging.getLogger("websession.audit").setLevel(logging.INFO)
        store = SessionStore(SessionConfig(audit=LoggerAuditBackend()))
        ```
    """

    def __init__(self, logger_name: str = "websession.audit"):
        """Initialize with logger name.

        Args:
            logger_name: Logger the app attaches its handlers to
        """
        self.logger = logging.getLogger(logger_name)

    def _emit(
        self,
        level: int,
        message: str,
        event_type: str,
        context: Dict[str, Any],
        session_id: Optional[str] = None,
        **fields: Any,
    ) -> None:
        record_extra = {"event_type": event_type, **fields, **context}
        if session_id is not None:
            record_extra["session_id"] = session_id
        self.logger.log(level, message, extra=record_extra)

    async def log_session_created(
        self, session_id: str, context: Dict[str, Any]
    ) -> None:
        self._emit(logging.INFO, "Session created", "session_created", context, session_id)

    async def log_session_saved(self, session_id: str, context: Dict[str, Any]) -> None:
        self._emit(logging.DEBUG, "Session saved", "session_saved", context, session_id)

    async def log_session_destroyed(
        self, session_id: str, context: Dict[str, Any]
    ) -> None:
        self._emit(
            logging.INFO, "Session destroyed", "session_destroyed", context, session_id
        )

    async def log_session_regenerated(
        self, old_session_id: str, new_session_id: str, context: Dict[str, Any]
    ) -> None:
        self._emit(
            logging.INFO,
            "Session regenerated",
            "session_regenerated",
            context,
            new_session_id,
            previous_session_id=old_session_id,
        )

    async def log_suspicious_activity(self, event: str, context: Dict[str, Any]) -> None:
        self._emit(
            logging.WARNING,
            f"Suspicious activity: {event}",
            "suspicious_activity",
            context,
            suspicious_event=event,
        )
