"""
Discord Interaction Parsing

PURE CONVERSION - NO ROUTING, NO RESPONSES

Decodes a verified request body into an Interaction.
Missing fields default to empty containers so new payload
fields never break parsing. Only undecodable bodies fail.
"""

import json
from typing import Any, Union

from pydantic import ValidationError

from .schemas import Interaction


class MalformedPayload(Exception):
    """Body is not a JSON object."""
    pass


def parse_interaction(raw_body: Union[bytes, str, dict[str, Any]]) -> Interaction:
    """
    Convert a raw interaction body into an Interaction.

    Args:
        raw_body: Verified request body, or an already decoded dict

    Returns:
        Interaction (no completion handle attached yet)

    Raises:
        MalformedPayload: Body is not JSON, not an object, or has
            fields of an impossible shape
    """

    if isinstance(raw_body, dict):
        payload = raw_body
    else:
        try:
            payload = json.loads(raw_body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedPayload(f"Invalid JSON payload: {e}")

    if not isinstance(payload, dict):
        raise MalformedPayload(
            f"Interaction payload must be an object, got {type(payload).__name__}"
        )

    try:
        return Interaction(**payload)
    except (ValidationError, TypeError, ValueError) as e:
        raise MalformedPayload(f"Invalid payload structure: {e}")
