"""websession - server-side sessions for async web handlers.

A framework-agnostic session package: resolve the identifier a client
presents, load or create its record from a pluggable storage backend, let the
handler mutate it, and persist it with an expiration policy.

Key Features:
    - Pluggable storage (in-memory, Redis, or any StorageAdapter)
    - Cookie, header or query-parameter identifiers
    - Optional HMAC-signed identifiers
    - Save / destroy / regenerate lifecycle with fresh/modified tracking
    - Starlette/FastAPI middleware adapter

Usage:
    ```python
    from websession import SessionStore, SimpleRequestContext

    store = SessionStore()
    context = SimpleRequestContext(cookies=request_cookies)

    session = await store.get(context)
    session.set("name", "john")
    await session.save()
    ```
"""

from .codec import HMACSigner
from .errors import (
    ConfigError,
    CorruptSessionError,
    SerializationError,
    SessionClosedError,
    SessionError,
    StorageError,
)
from .models.config import SessionConfig
from .serializer import JSONSerializer, SessionSerializer
from .session import Session, SessionState
from .storage.base import StorageAdapter
from .storage.memory import MemoryStorage
from .store import SessionStore
from .transport import RequestContext, SessionCookie, SimpleRequestContext

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "CorruptSessionError",
    "HMACSigner",
    "JSONSerializer",
    "MemoryStorage",
    "RequestContext",
    "SerializationError",
    "Session",
    "SessionClosedError",
    "SessionConfig",
    "SessionCookie",
    "SessionError",
    "SessionSerializer",
    "SessionState",
    "SessionStore",
    "SimpleRequestContext",
    "StorageAdapter",
    "StorageError",
    "__version__",
]
