"""Pytest configuration and fixtures."""

import json
import os
import sys
import time
from pathlib import Path

import pytest
from nacl.signing import SigningKey

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# One keypair for the whole session; config.py reads the env var at import
SIGNING_KEY = SigningKey.generate()
PUBLIC_KEY_HEX = SIGNING_KEY.verify_key.encode().hex()
os.environ["DISCORD_PUBLIC_KEY"] = PUBLIC_KEY_HEX


def sign(body: bytes, timestamp: str = None, key: SigningKey = SIGNING_KEY) -> dict[str, str]:
    """Headers Discord would send for `body`."""
    timestamp = timestamp or str(int(time.time()))
    signature = key.sign(timestamp.encode() + body).signature.hex()
    return {
        "X-Signature-Ed25519": signature,
        "X-Signature-Timestamp": timestamp,
    }


def command_payload(name: str, options=None, interaction_id: str = "1001") -> dict:
    """APPLICATION_COMMAND interaction invoking `name` with `options`."""
    return {
        "id": interaction_id,
        "application_id": "42",
        "type": 2,
        "token": "interaction-token",
        "version": 1,
        "data": {"id": "7", "name": name, "options": options or []},
    }


def encode(payload: dict) -> bytes:
    return json.dumps(payload).encode()


@pytest.fixture
def signing_key() -> SigningKey:
    return SIGNING_KEY


@pytest.fixture
def public_key_hex() -> str:
    return PUBLIC_KEY_HEX
