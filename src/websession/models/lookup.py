"""Identifier lookup: where a request carries its session identifier.

A lookup string has the form ``source:name`` where source is one of
``cookie``, ``header`` or ``query`` and name is the field to read.
"""

from dataclasses import dataclass
from typing import Literal, get_args

from ..errors import ConfigError

LookupSource = Literal["cookie", "header", "query"]

VALID_SOURCES = get_args(LookupSource)


@dataclass(frozen=True)
class KeyLookup:
    """Parsed ``source:name`` lookup.

    Attributes:
        source: Where the identifier lives in the request
        name: Cookie, header or query parameter name

    Example:
        >>> lookup = KeyLookup.parse("header:X-Session-ID")
        >>> lookup.source, lookup.name
        ('header', 'X-Session-ID')
    """

    source: LookupSource
    name: str

    @classmethod
    def parse(cls, value: str) -> "KeyLookup":
        """Parse a ``source:name`` string.

        Args:
            value: Lookup string (e.g., "cookie:session_id")

        Returns:
            KeyLookup instance

        Raises:
            ConfigError: If the string is not ``source:name`` with a known source
        """
        if not isinstance(value, str):
            raise ConfigError(
                f"key_lookup must be a string, got {type(value).__name__}",
                details={"key_lookup": repr(value)},
            )

        source, sep, name = value.partition(":")
        source = source.strip().lower()
        name = name.strip()

        if not sep or not name:
            raise ConfigError(
                f"Malformed key_lookup '{value}': expected 'source:name'",
                details={"key_lookup": value},
            )
        if source not in VALID_SOURCES:
            raise ConfigError(
                f"Invalid key_lookup source '{source}'. "
                f"Must be one of: {', '.join(VALID_SOURCES)}",
                details={"key_lookup": value},
            )

        return cls(source=source, name=name)  # type: ignore[arg-type]

    @property
    def is_cookie(self) -> bool:
        """Whether the identifier travels in a cookie (and is echoed back)."""
        return self.source == "cookie"

    def __str__(self) -> str:
        return f"{self.source}:{self.name}"
