"""Starlette/FastAPI middleware adapter for websession.

This module provides framework-specific integration: it loads a Session for
each request into ``request.state.session``, optionally saves it after the
endpoint runs, and writes pending identifier cookies onto the response.

This is a FRAMEWORK ADAPTER. The session core only sees the
RequestContext protocol implemented by StarletteRequestContext.

Usage:
    from fastapi import Depends, FastAPI
    from websession import Session, SessionStore
    from websession.middleware.starlette_middleware import (
        SessionMiddleware,
        get_session,
    )

    store = SessionStore()
    app = FastAPI()
    app.add_middleware(SessionMiddleware, store=store, auto_save=True)

    @app.post("/login")
    async def login(session: Session = Depends(get_session)):
        await session.regenerate()
        session.set("user_id", "123")
        return {"ok": True}
"""

import logging
from typing import List, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from ..errors import SessionError
from ..session import Session
from ..store import SessionStore
from ..transport import SessionCookie

logger = logging.getLogger(__name__)


class StarletteRequestContext:
    """RequestContext backed by a Starlette request.

    Outbound cookies are buffered until apply() writes them onto the
    response, because the response does not exist while the endpoint runs.
    """

    def __init__(self, request: Request):
        self.request = request
        self._pending: List[SessionCookie] = []

    def get_cookie(self, name: str) -> Optional[str]:
        return self.request.cookies.get(name)

    def get_header(self, name: str) -> Optional[str]:
        return self.request.headers.get(name)

    def get_query_param(self, name: str) -> Optional[str]:
        return self.request.query_params.get(name)

    def set_cookie(self, cookie: SessionCookie) -> None:
        # Last instruction per cookie name wins (e.g., save then destroy)
        self._pending = [c for c in self._pending if c.name != cookie.name]
        self._pending.append(cookie)

    @property
    def pending_cookies(self) -> List[SessionCookie]:
        return list(self._pending)

    def apply(self, response: Response) -> None:
        """Write buffered cookies onto the response."""
        for cookie in self._pending:
            response.set_cookie(
                key=cookie.name,
                value=cookie.value,
                max_age=cookie.max_age,
                expires=cookie.expires,
                path=cookie.path,
                domain=cookie.domain,
                secure=cookie.secure,
                httponly=cookie.http_only,
                samesite=cookie.same_site,
            )
        self._pending.clear()


class SessionMiddleware(BaseHTTPMiddleware):
    """Middleware that attaches a Session to ``request.state.session``.

    Attributes:
        store: SessionStore producing handles
        auto_save: Save active sessions after the endpoint returns (fresh
            sessions the endpoint never touched are skipped)

    Note:
        Load failures (StorageError, CorruptSessionError) do not abort the
        request here. They are logged, ``request.state.session`` is None and
        the error is kept in ``request.state.session_error`` so the
        get_session dependency can surface it to the endpoint.
    """

    def __init__(self, app, store: SessionStore, auto_save: bool = False):
        """Initialize middleware.

        Args:
            app: ASGI application
            store: SessionStore shared by all requests
            auto_save: Save sessions automatically
        """
        super().__init__(app)
        self.store = store
        self.auto_save = auto_save

    @staticmethod
    def _needs_save(session: Session) -> bool:
        """Whether auto_save should persist the session.

        Loaded sessions are always saved: values handed out by
        Session.get() can be changed in place without setting the modified
        flag. Fresh sessions are saved only once something was set, so
        anonymous read-only requests create no backend entries.
        """
        if not session.active:
            return False
        return session.modified or not session.fresh

    async def dispatch(self, request: Request, call_next):
        """Load session, run endpoint, then persist and emit cookies."""
        context = StarletteRequestContext(request)
        request.state.session = None
        request.state.session_error = None

        try:
            request.state.session = await self.store.get(context)
        except SessionError as e:
            logger.error(f"Failed to load session for request: {e}", exc_info=True)
            request.state.session_error = e

        response = await call_next(request)

        session: Optional[Session] = request.state.session
        if self.auto_save and session is not None and self._needs_save(session):
            await session.save()

        context.apply(response)
        return response


def get_session(request: Request) -> Session:
    """Dependency function to inject the request's Session into endpoints.

    Args:
        request: FastAPI Request object

    Returns:
        Session loaded by SessionMiddleware

    Raises:
        SessionError: The error that prevented the session from loading
        RuntimeError: If SessionMiddleware is not configured
    """
    if not hasattr(request.state, "session"):
        raise RuntimeError(
            "Session not found in request state. "
            "Did you forget to add SessionMiddleware?"
        )

    error = getattr(request.state, "session_error", None)
    if error is not None:
        raise error

    return request.state.session


def get_session_optional(request: Request) -> Optional[Session]:
    """Optional dependency that returns None if no session is available."""
    return getattr(request.state, "session", None)
