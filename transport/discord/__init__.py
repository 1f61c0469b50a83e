"""Discord Interactions Transport - Module Exports"""

from .completion import CompletionAlreadyResolved, InteractionCompletion
from .normalize import MalformedPayload, parse_interaction
from .schemas import (
    PONG_RESPONSE,
    ArgumentOption,
    CommandOption,
    Interaction,
    InteractionData,
    InteractionKind,
    InteractionResponse,
    InteractionResponseType,
    InteractionType,
    OptionType,
    SubcommandOption,
)
from .security import (
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    AuthenticationError,
    load_public_key,
    verify_key,
    verify_signature,
)

__all__ = [
    # Schemas
    "Interaction",
    "InteractionData",
    "ArgumentOption",
    "SubcommandOption",
    "CommandOption",
    "InteractionResponse",
    "PONG_RESPONSE",
    # Enums
    "OptionType",
    "InteractionType",
    "InteractionResponseType",
    "InteractionKind",
    # Parsing
    "parse_interaction",
    "MalformedPayload",
    # Completion
    "InteractionCompletion",
    "CompletionAlreadyResolved",
    # Security
    "verify_key",
    "verify_signature",
    "load_public_key",
    "AuthenticationError",
    "SIGNATURE_HEADER",
    "TIMESTAMP_HEADER",
]
