"""Unit tests for identifier extraction and signing."""

import string

import pytest

from websession.codec import (
    HMACSigner,
    extract,
    identity_sign,
    identity_unsign,
)
from websession.errors import ConfigError
from websession.models.lookup import KeyLookup
from websession.transport import SimpleRequestContext


class TestExtract:
    """Test identifier extraction from request locations."""

    def test_extract_from_cookie(self):
        context = SimpleRequestContext(cookies={"session_id": "abc"})

        assert extract(context, KeyLookup.parse("cookie:session_id")) == "abc"

    def test_extract_from_header_case_insensitive(self):
        context = SimpleRequestContext(headers={"x-session-id": "abc"})

        assert extract(context, KeyLookup.parse("header:X-Session-ID")) == "abc"

    def test_extract_from_query(self):
        context = SimpleRequestContext(query_params={"sid": "abc"})

        assert extract(context, KeyLookup.parse("query:sid")) == "abc"

    def test_extract_only_reads_configured_source(self):
        """Test a cookie lookup ignores headers and query params."""
        context = SimpleRequestContext(
            headers={"session_id": "from-header"},
            query_params={"session_id": "from-query"},
        )

        assert extract(context, KeyLookup.parse("cookie:session_id")) is None

    @pytest.mark.parametrize("value", ["", "   "])
    def test_extract_empty_is_absent(self, value):
        context = SimpleRequestContext(cookies={"session_id": value})

        assert extract(context, KeyLookup.parse("cookie:session_id")) is None

    def test_extract_missing_is_absent(self):
        assert extract(SimpleRequestContext(), KeyLookup.parse("query:sid")) is None


class TestIdentityStrategies:
    def test_identity_round_trip(self):
        assert identity_sign("abc") == "abc"
        assert identity_unsign("abc") == ("abc", True)


class TestHMACSigner:
    """Test HMAC signing strategy."""

    def test_sign_and_unsign(self, signer):
        token = signer.sign("session-123")

        assert token.startswith("session-123.")
        assert signer.unsign(token) == ("session-123", True)

    def test_token_is_url_safe(self, signer):
        token = signer.sign("abc")

        assert "=" not in token
        assert "+" not in token
        assert "/" not in token

    def test_identifier_containing_separator(self, signer):
        """Test identifiers with dots survive (split on the last dot)."""
        token = signer.sign("a.b.c")

        assert signer.unsign(token) == ("a.b.c", True)

    def test_tampered_identifier_rejected(self, signer):
        token = signer.sign("session-123")
        tampered = "X" + token[1:]

        assert signer.unsign(tampered) == ("", False)

    def test_tampered_signature_rejected(self, signer):
        token = signer.sign("session-123")
        key, _, signature = token.rpartition(".")
        flipped = ("B" if signature[0] == "A" else "A") + signature[1:]

        assert signer.unsign(f"{key}.{flipped}") == ("", False)

    def test_every_last_character_substitution_rejected(self, signer):
        """Test unused trailing bits of the signature cannot be varied."""
        token = signer.sign("session-123")
        alphabet = string.ascii_letters + string.digits + "-_"

        accepted = [
            char
            for char in alphabet
            if char != token[-1] and signer.unsign(token[:-1] + char)[1]
        ]

        assert accepted == []

    @pytest.mark.parametrize("suffix", ["=", "==", "\n", "!"])
    def test_non_canonical_signature_rejected(self, signer, suffix):
        token = signer.sign("session-123")

        assert signer.unsign(token + suffix) == ("", False)

    def test_inserted_non_alphabet_character_rejected(self, signer):
        token = signer.sign("session-123")
        key, _, signature = token.rpartition(".")

        assert signer.unsign(f"{key}.{signature[:5]}*{signature[5:]}") == ("", False)

    def test_wrong_secret_rejected(self, signer):
        token = HMACSigner(secret="other-secret").sign("session-123")

        assert signer.unsign(token) == ("", False)

    def test_salt_separates_namespaces(self):
        token = HMACSigner(secret="s", salt="app-one").sign("abc")

        assert HMACSigner(secret="s", salt="app-two").unsign(token) == ("", False)

    @pytest.mark.parametrize(
        "token",
        ["", "no-separator", ".signature-only", "identifier.", "abc.!!!not-base64!!!", "abc.é"],
    )
    def test_malformed_tokens_rejected(self, signer, token):
        assert signer.unsign(token) == ("", False)

    def test_empty_secret_rejected(self):
        with pytest.raises(ConfigError, match="secret"):
            HMACSigner(secret="")

    def test_unknown_digest_rejected(self):
        with pytest.raises(ConfigError, match="digest"):
            HMACSigner(secret="s", digestmod="not-a-hash")
