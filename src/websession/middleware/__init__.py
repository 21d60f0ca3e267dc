"""Framework adapters.

Exports:
    - SessionMiddleware: Starlette/FastAPI middleware
    - StarletteRequestContext: RequestContext over a Starlette request
    - get_session: FastAPI dependency
"""

from .starlette_middleware import (
    SessionMiddleware,
    StarletteRequestContext,
    get_session,
    get_session_optional,
)

__all__ = [
    "SessionMiddleware",
    "StarletteRequestContext",
    "get_session",
    "get_session_optional",
]
