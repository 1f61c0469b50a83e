"""
Discord Signature Verification

SECURITY BOUNDARY - Verify Ed25519 signature over timestamp + body.
Runs before the body is parsed. No retries. No logic.
"""

from typing import Optional, Union

from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

SIGNATURE_HEADER = "X-Signature-Ed25519"
TIMESTAMP_HEADER = "X-Signature-Timestamp"


class AuthenticationError(Exception):
    """Missing signature headers or signature mismatch."""
    pass


def load_public_key(public_key: Union[str, bytes, VerifyKey]) -> VerifyKey:
    """
    Build a VerifyKey from the application's public key.

    Args:
        public_key: Hex string (as shown in the developer portal),
            32 raw bytes, or an existing VerifyKey

    Raises:
        ValueError: Key is empty or not a valid Ed25519 public key
    """
    if isinstance(public_key, VerifyKey):
        return public_key
    if not public_key:
        raise ValueError("A public key is required to verify interactions")

    try:
        if isinstance(public_key, str):
            public_key = bytes.fromhex(public_key.strip())
        return VerifyKey(public_key)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid Ed25519 public key: {e}") from e


def verify_key(
    raw_body: bytes,
    signature: Optional[str],
    timestamp: Optional[str],
    public_key: VerifyKey,
) -> bool:
    """
    Check that `signature` signs `timestamp + raw_body`.

    Pure predicate: never raises for bad input.

    Args:
        raw_body: Request body exactly as received
        signature: X-Signature-Ed25519 header (hex)
        timestamp: X-Signature-Timestamp header
        public_key: Application public key

    Returns:
        True only if both headers are present and the signature checks out
    """
    if not signature or not timestamp:
        return False

    try:
        public_key.verify(timestamp.encode("utf-8") + raw_body, bytes.fromhex(signature))
    except (BadSignatureError, ValueError, TypeError):
        return False

    return True


def verify_signature(
    raw_body: bytes,
    signature: Optional[str],
    timestamp: Optional[str],
    public_key: VerifyKey,
) -> None:
    """
    Raising form of verify_key().

    Raises:
        AuthenticationError: Missing header or invalid signature
    """
    if not signature or not timestamp:
        raise AuthenticationError(
            f"Missing {SIGNATURE_HEADER} or {TIMESTAMP_HEADER} header"
        )

    if not verify_key(raw_body, signature, timestamp, public_key):
        raise AuthenticationError("Invalid signature")
