"""
Discord Signature Verification Tests

Verify Ed25519 validation of timestamp + body.
"""

import pytest
from nacl.signing import SigningKey, VerifyKey

from conftest import sign
from transport.discord.security import (
    AuthenticationError,
    load_public_key,
    verify_key,
    verify_signature,
)


@pytest.fixture
def public_key(public_key_hex) -> VerifyKey:
    return load_public_key(public_key_hex)


class TestVerifyKey:
    """Pure predicate over body, headers and key."""

    def test_valid_signature(self, public_key):
        """Correctly signed body passes."""
        body = b'{"type": 1}'
        headers = sign(body, "1700000000")

        assert verify_key(
            body,
            headers["X-Signature-Ed25519"],
            headers["X-Signature-Timestamp"],
            public_key,
        )

    def test_tampered_body_fails(self, public_key):
        """Body changed after signing fails."""
        headers = sign(b'{"type": 1}', "1700000000")

        assert not verify_key(
            b'{"type": 2}',
            headers["X-Signature-Ed25519"],
            headers["X-Signature-Timestamp"],
            public_key,
        )

    def test_tampered_timestamp_fails(self, public_key):
        """Timestamp is part of the signed message."""
        body = b'{"type": 1}'
        headers = sign(body, "1700000000")

        assert not verify_key(body, headers["X-Signature-Ed25519"], "1700000001", public_key)

    def test_other_key_fails(self, public_key):
        """Signature from a different key fails."""
        body = b'{"type": 1}'
        headers = sign(body, "1700000000", key=SigningKey.generate())

        assert not verify_key(
            body,
            headers["X-Signature-Ed25519"],
            headers["X-Signature-Timestamp"],
            public_key,
        )

    @pytest.mark.parametrize("signature,timestamp", [
        (None, "1700000000"),
        ("", "1700000000"),
        ("ab" * 64, None),
        ("ab" * 64, ""),
        (None, None),
    ])
    def test_missing_header_fails(self, public_key, signature, timestamp):
        """Either header missing or empty fails."""
        assert not verify_key(b"{}", signature, timestamp, public_key)

    def test_non_hex_signature_fails(self, public_key):
        """Garbage signature returns False instead of raising."""
        assert not verify_key(b"{}", "zzzz", "1700000000", public_key)

    def test_short_signature_fails(self, public_key):
        """Wrong-length signature returns False instead of raising."""
        assert not verify_key(b"{}", "abcd", "1700000000", public_key)


class TestVerifySignature:
    """Raising form."""

    def test_valid_signature_does_not_raise(self, public_key):
        body = b"{}"
        headers = sign(body)

        verify_signature(
            body,
            headers["X-Signature-Ed25519"],
            headers["X-Signature-Timestamp"],
            public_key,
        )

    def test_missing_header_raises(self, public_key):
        with pytest.raises(AuthenticationError, match="Missing"):
            verify_signature(b"{}", None, "1700000000", public_key)

    def test_invalid_signature_raises(self, public_key):
        with pytest.raises(AuthenticationError, match="Invalid signature"):
            verify_signature(b"{}", "ab" * 64, "1700000000", public_key)


class TestLoadPublicKey:
    """Key construction fails fast at setup."""

    def test_hex_string(self, signing_key, public_key_hex):
        assert load_public_key(public_key_hex) == signing_key.verify_key

    def test_raw_bytes(self, signing_key):
        raw = signing_key.verify_key.encode()
        assert load_public_key(raw) == signing_key.verify_key

    def test_verify_key_passthrough(self, signing_key):
        assert load_public_key(signing_key.verify_key) is signing_key.verify_key

    @pytest.mark.parametrize("bad_key", ["", None, "not-hex", "abcd"])
    def test_invalid_key_raises(self, bad_key):
        with pytest.raises(ValueError):
            load_public_key(bad_key)
