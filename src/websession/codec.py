"""Identifier codec: extraction and signing of session identifiers.

Extraction reads the raw identifier from the request location named by the
configured KeyLookup. Signing is a pluggable strategy: the store only ever
calls ``sign_key(identifier)`` and ``unsign_key(token)``, so deployments can
supply their own functions. HMACSigner is the bundled strategy.

A token that fails verification is reported as ``("", False)`` and is
treated by the store exactly like a missing identifier.
"""

import base64
import hashlib
import hmac
from typing import Callable, Optional, Tuple

from .errors import ConfigError
from .models.lookup import KeyLookup
from .transport import RequestContext

SignFunc = Callable[[str], str]
UnsignFunc = Callable[[str], Tuple[str, bool]]

SEPARATOR = "."


def extract(context: RequestContext, lookup: KeyLookup) -> Optional[str]:
    """Read the raw identifier from the request.

    Args:
        context: Request accessors supplied by the caller
        lookup: Where to look (cookie, header or query parameter)

    Returns:
        Raw identifier, or None if the field is missing or empty
    """
    if lookup.source == "cookie":
        value = context.get_cookie(lookup.name)
    elif lookup.source == "header":
        value = context.get_header(lookup.name)
    else:
        value = context.get_query_param(lookup.name)

    if value is None:
        return None
    value = value.strip()
    return value or None


def identity_sign(key: str) -> str:
    """Default signing strategy: transmit identifiers as-is."""
    return key


def identity_unsign(token: str) -> Tuple[str, bool]:
    """Default verification strategy: accept every token as-is."""
    return token, True


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


class HMACSigner:
    """HMAC signing strategy for session identifiers.

    Token format: ``<identifier>.<urlsafe-base64 signature>`` (no padding).
    The signature covers the salt and the identifier, so a token minted for
    one application cannot be replayed against another using a different
    salt with the same secret.

    Example:
        ```python
        signer = HMACSigner(secret="change-me")
        config = SessionConfig(sign_key=signer.sign, unsign_key=signer.unsign)
        ```
    """

    def __init__(
        self,
        secret: str,
        salt: str = "websession",
        digestmod: str = "sha256",
    ):
        """Initialize signer.

        Args:
            secret: Signing secret (must be non-empty)
            salt: Namespace mixed into every signature
            digestmod: hashlib algorithm name

        Raises:
            ConfigError: If secret is empty or digestmod is unknown
        """
        if not secret:
            raise ConfigError("HMACSigner secret must not be empty")
        try:
            hashlib.new(digestmod)
        except ValueError as e:
            raise ConfigError(
                f"Unknown digest algorithm '{digestmod}'",
                details={"digestmod": digestmod},
            ) from e

        self._secret = secret.encode("utf-8")
        self._salt = salt.encode("utf-8")
        self.digestmod = digestmod

    def _signature(self, key: str) -> bytes:
        return hmac.new(
            self._secret, self._salt + key.encode("utf-8"), self.digestmod
        ).digest()

    def sign(self, key: str) -> str:
        """Wrap identifier in a tamper-evident token.

        Args:
            key: Raw session identifier

        Returns:
            Signed token safe for cookies and URLs
        """
        return f"{key}{SEPARATOR}{_b64encode(self._signature(key))}"

    def unsign(self, token: str) -> Tuple[str, bool]:
        """Verify token and recover the identifier.

        Args:
            token: Token previously produced by sign()

        Returns:
            (identifier, True) on success, ("", False) on any structural,
            decoding or signature failure
        """
        key, sep, encoded = token.rpartition(SEPARATOR)
        if not sep or not key or not encoded:
            return "", False

        # Only the canonical unpadded encoding of the signature verifies
        try:
            presented = encoded.encode("ascii")
        except UnicodeEncodeError:
            return "", False
        expected = _b64encode(self._signature(key)).encode("ascii")

        if not hmac.compare_digest(presented, expected):
            return "", False
        return key, True
