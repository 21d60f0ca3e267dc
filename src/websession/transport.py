"""Request/response accessors the session core depends on.

The core never talks to an HTTP framework directly. Callers hand it a
RequestContext: something that can read inbound cookies, headers and query
parameters, and accept outbound cookie instructions. Framework adapters
(see ``websession.middleware``) implement this protocol; SimpleRequestContext
is a dict-backed implementation for framework-less use.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Literal, Optional, Protocol

SameSite = Literal["lax", "strict", "none"]


@dataclass(frozen=True)
class SessionCookie:
    """Outbound identifier cookie.

    Attributes:
        name: Cookie name
        value: Cookie value (identifier, signed if signing is configured)
        max_age: Lifetime in seconds (None = browser session cookie, 0 = expire)
        expires: Absolute expiry (None when max_age is None)
        path: Cookie path
        domain: Cookie domain (None = host-only)
        secure: Send over HTTPS only
        http_only: Hide from client-side scripts
        same_site: SameSite attribute ("lax", "strict", "none")
    """

    name: str
    value: str
    max_age: Optional[int] = None
    expires: Optional[datetime] = None
    path: str = "/"
    domain: Optional[str] = None
    secure: bool = False
    http_only: bool = False
    same_site: SameSite = "lax"

    @property
    def is_expired(self) -> bool:
        """Whether this cookie instructs the client to drop the identifier."""
        return self.max_age == 0


class RequestContext(Protocol):
    """Per-request accessors supplied by the caller.

    Header lookups are expected to be case-insensitive, as in HTTP.
    """

    def get_cookie(self, name: str) -> Optional[str]:
        """Return inbound cookie value, or None."""
        ...

    def get_header(self, name: str) -> Optional[str]:
        """Return inbound header value, or None."""
        ...

    def get_query_param(self, name: str) -> Optional[str]:
        """Return query parameter value, or None."""
        ...

    def set_cookie(self, cookie: SessionCookie) -> None:
        """Schedule cookie on the outgoing response."""
        ...


@dataclass
class SimpleRequestContext:
    """Dict-backed RequestContext.

    Outbound cookies are collected in ``response_cookies`` (last write per
    name wins) for the caller to emit.

    Example:
        >>> context = SimpleRequestContext(cookies={"session_id": "abc"})
        >>> context.get_cookie("session_id")
        'abc'
    """

    cookies: Dict[str, str] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    query_params: Dict[str, str] = field(default_factory=dict)
    response_cookies: Dict[str, SessionCookie] = field(default_factory=dict)

    def get_cookie(self, name: str) -> Optional[str]:
        return self.cookies.get(name)

    def get_header(self, name: str) -> Optional[str]:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None

    def get_query_param(self, name: str) -> Optional[str]:
        return self.query_params.get(name)

    def set_cookie(self, cookie: SessionCookie) -> None:
        self.response_cookies[cookie.name] = cookie

    @property
    def pending_cookies(self) -> List[SessionCookie]:
        """Outbound cookies in the order they were first scheduled."""
        return list(self.response_cookies.values())
