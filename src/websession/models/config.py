"""Session store configuration model.

This module provides the type-safe configuration for SessionStore:
default expiration, storage backend, identifier lookup, cookie attributes,
identifier generation and signing strategies.

Configuration can be provided via:
- Direct instantiation (application code, tests)
- Environment variables (see ``websession.models.settings`` and the factory)
"""

import uuid
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Callable, Optional

from ..audit.base import SessionAuditBackend
from ..audit.noop import NoOpAuditBackend
from ..codec import SignFunc, UnsignFunc
from ..errors import ConfigError
from ..serializer import JSONSerializer, SessionSerializer
from ..storage.base import StorageAdapter
from ..transport import SameSite
from .lookup import KeyLookup

SAME_SITE_VALUES = ("lax", "strict", "none")


def generate_session_id() -> str:
    """Default key generator: random UUID4 string (os.urandom backed)."""
    return str(uuid.uuid4())


@dataclass
class SessionConfig:
    """Session store configuration.

    Attributes:
        expiration: Default TTL for saved sessions (default: 24 hours)
        storage: Storage adapter (default: a MemoryStorage per store)
        key_lookup: ``source:name`` identifier location (default: cookie:session_id)
        cookie_domain: Cookie Domain attribute (default: host-only)
        cookie_path: Cookie Path attribute (default: unset, emitted as "/")
        cookie_secure: Cookie Secure flag
        cookie_http_only: Cookie HttpOnly flag
        cookie_same_site: SameSite attribute, case-insensitive (default: "Lax")
        cookie_session_only: Omit Max-Age/Expires so the browser drops the
            cookie on close (backend TTL still applies)
        key_generator: Function producing new identifiers
        sign_key: Signing strategy applied to identifiers sent to clients
        unsign_key: Verification strategy applied to inbound identifiers
        serializer: Session data serializer (default: JSONSerializer)
        audit: Audit backend (default: NoOpAuditBackend)

    Example:
        >>> signer = HMACSigner(secret="change-me")
        >>> config = SessionConfig(
        ...     expiration=timedelta(hours=2),
        ...     cookie_secure=True,
        ...     cookie_http_only=True,
        ...     sign_key=signer.sign,
        ...     unsign_key=signer.unsign,
        ... )
        >>> config.lookup.name
        'session_id'
    """

    # Session lifecycle
    expiration: timedelta = timedelta(hours=24)

    # Backend configuration
    storage: Optional[StorageAdapter] = None
    key_lookup: str = "cookie:session_id"

    # Cookie attributes
    cookie_domain: Optional[str] = None
    cookie_path: Optional[str] = None
    cookie_secure: bool = False
    cookie_http_only: bool = False
    cookie_same_site: str = "Lax"
    cookie_session_only: bool = False

    # Identifier strategies
    key_generator: Callable[[], str] = generate_session_id
    sign_key: Optional[SignFunc] = None
    unsign_key: Optional[UnsignFunc] = None

    serializer: SessionSerializer = field(default_factory=JSONSerializer)
    audit: SessionAuditBackend = field(default_factory=NoOpAuditBackend)

    lookup: KeyLookup = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate configuration after initialization.

        Raises:
            ConfigError: If configuration is invalid
        """
        if not isinstance(self.expiration, timedelta):
            raise ConfigError("expiration must be a timedelta")
        if self.expiration <= timedelta(0):
            raise ConfigError("expiration must be positive")

        self.lookup = KeyLookup.parse(self.key_lookup)

        same_site = str(self.cookie_same_site).strip().lower()
        if same_site not in SAME_SITE_VALUES:
            raise ConfigError(
                f"Invalid cookie_same_site: {self.cookie_same_site}. "
                "Must be 'Lax', 'Strict' or 'None'"
            )
        if same_site == "none" and not self.cookie_secure:
            raise ConfigError("cookie_same_site='None' requires cookie_secure=True")

        if (self.sign_key is None) != (self.unsign_key is None):
            raise ConfigError("sign_key and unsign_key must be configured together")
        if not callable(self.key_generator):
            raise ConfigError("key_generator must be callable")

    @property
    def same_site(self) -> SameSite:
        """Normalized SameSite value ("lax", "strict", "none")."""
        return self.cookie_same_site.strip().lower()  # type: ignore[return-value]

    @property
    def signing_enabled(self) -> bool:
        """Whether identifiers are signed."""
        return self.sign_key is not None
