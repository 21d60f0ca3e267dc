"""Environment-driven session settings using Pydantic Settings.

Flat settings loaded from ``SESSION_*`` environment variables. The factory
(``websession.factory.get_session_store``) turns them into a wired
SessionStore.

Usage:
    # SESSION_EXPIRATION_SECONDS=7200
    # SESSION_SECRET_KEY=change-me
    # SESSION_STORAGE_TYPE=redis
    # SESSION_REDIS_URL=redis://localhost:6379/0
    settings = SessionSettings()
    store = get_session_store(settings)
"""

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .lookup import KeyLookup


class SessionSettings(BaseSettings):
    """Session settings (flat structure).

    Configuration precedence:
        1. Environment variables (SESSION_ prefix)
        2. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="SESSION_",
        extra="ignore",
        case_sensitive=False,
    )

    # Session lifecycle
    expiration_seconds: int = Field(
        default=86400,
        gt=0,
        description="Default session TTL in seconds (24 hours)",
    )

    # Identifier transport
    key_lookup: str = Field(
        default="cookie:session_id",
        description="Identifier location as source:name (cookie, header, query)",
    )
    cookie_domain: Optional[str] = Field(default=None, description="Cookie Domain")
    cookie_path: Optional[str] = Field(default=None, description="Cookie Path")
    cookie_secure: bool = Field(default=False, description="Cookie Secure flag")
    cookie_http_only: bool = Field(default=False, description="Cookie HttpOnly flag")
    cookie_same_site: Literal["Lax", "Strict", "None"] = Field(
        default="Lax",
        description="Cookie SameSite attribute",
    )
    cookie_session_only: bool = Field(
        default=False,
        description="Omit Max-Age/Expires (browser-session cookie)",
    )

    # Signing
    secret_key: Optional[str] = Field(
        default=None,
        description="HMAC secret for identifier signing (unset = unsigned identifiers)",
    )
    signing_salt: str = Field(default="websession", description="HMAC salt")

    # Storage
    storage_type: Literal["memory", "redis"] = Field(
        default="memory",
        description="Storage backend",
    )
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis connection URL (e.g., redis://host:port/db)",
    )
    redis_key_prefix: str = Field(
        default="session:",
        description="Namespace for session keys in Redis",
    )

    # Audit
    audit_type: Literal["logger", "noop"] = Field(
        default="noop",
        description="Audit backend",
    )
    audit_logger_name: str = Field(
        default="websession.audit",
        description="Logger name used by the logger audit backend",
    )

    @field_validator("key_lookup")
    @classmethod
    def validate_key_lookup(cls, v: str) -> str:
        """Fail fast on malformed lookup strings."""
        KeyLookup.parse(v)
        return v

    @field_validator("cookie_same_site", mode="before")
    @classmethod
    def normalize_same_site(cls, v: object) -> object:
        """Accept lax/strict/none in any case."""
        if isinstance(v, str):
            return v.strip().capitalize()
        return v
