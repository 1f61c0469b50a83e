"""
Interaction Completion Handle

One-shot result channel: exactly one response per interaction.
A second resolve() raises and the first response is kept.
"""

import asyncio
from typing import Any, Optional


class CompletionAlreadyResolved(Exception):
    """The interaction already has a response."""
    pass


class InteractionCompletion:
    """Single-use handle that carries the response of one interaction."""

    def __init__(self, interaction_id: str = ""):
        self.interaction_id = interaction_id
        self._event = asyncio.Event()
        self._response: Optional[Any] = None

    @property
    def done(self) -> bool:
        return self._event.is_set()

    @property
    def response(self) -> Any:
        if not self.done:
            raise RuntimeError(f"Interaction {self.interaction_id or '<unknown>'} has not been completed")
        return self._response

    def resolve(self, response: Any) -> None:
        """
        Complete the interaction.

        Raises:
            CompletionAlreadyResolved: handle was already used
        """
        if self.done:
            raise CompletionAlreadyResolved(
                f"Interaction {self.interaction_id or '<unknown>'} was already completed"
            )
        self._response = response
        self._event.set()

    async def wait(self) -> Any:
        """Suspend until resolve() is called, then return the response."""
        await self._event.wait()
        return self._response
