"""
Slash command core.

Exports: CommandRegistry, CommandNode, InteractionDispatcher
SlashClient lives in slash.client (it pulls in the HTTP layer).
"""

from slash.dispatcher import (
    DispatchOutcome,
    InteractionDispatcher,
    InteractionState,
    UnroutableInteraction,
)
from slash.registry import (
    CommandNode,
    CommandRegistry,
    RegistrationConflict,
    RegistryFrozenError,
)

__all__ = [
    "CommandRegistry",
    "CommandNode",
    "RegistrationConflict",
    "RegistryFrozenError",
    "InteractionDispatcher",
    "InteractionState",
    "DispatchOutcome",
    "UnroutableInteraction",
]
