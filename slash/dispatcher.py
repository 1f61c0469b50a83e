"""
Interaction Dispatcher

Core pipeline for one inbound request:

  RECEIVED → VERIFIED → PARSED → ROUTED → COMPLETED

Terminal alternates:
  REJECTED    signature check failed (body never parsed)
  MALFORMED   body could not be decoded
  UNHANDLED   interaction type we do not route
  UNROUTABLE  no registered command handled the invocation path
  FAILED      a command callback raised

Every per-request failure ends in its own outcome. Nothing here raises
into the serving loop.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from nacl.signing import VerifyKey

from transport.discord.completion import InteractionCompletion
from transport.discord.normalize import MalformedPayload, parse_interaction
from transport.discord.schemas import (
    PONG_RESPONSE,
    Interaction,
    InteractionData,
    InteractionKind,
    SubcommandOption,
)
from transport.discord.security import AuthenticationError, load_public_key, verify_signature

from .registry import CommandNode, CommandRegistry

logger = logging.getLogger(__name__)


class UnroutableInteraction(Exception):
    """No registered command handled the interaction."""

    def __init__(self, path: list[str]):
        self.path = path
        super().__init__(f"No command handled /{' '.join(path) or '<empty>'}")


class InteractionState(str, Enum):
    RECEIVED = "received"
    VERIFIED = "verified"
    PARSED = "parsed"
    ROUTED = "routed"
    COMPLETED = "completed"
    REJECTED = "rejected"
    MALFORMED = "malformed"
    UNHANDLED = "unhandled"
    UNROUTABLE = "unroutable"
    FAILED = "failed"


@dataclass(frozen=True)
class DispatchOutcome:
    """Where one request ended up."""

    state: InteractionState
    interaction: Optional[Interaction] = None
    handled_by: Optional[CommandNode] = None
    error: Optional[Exception] = None

    @property
    def completion(self) -> Optional[InteractionCompletion]:
        if self.interaction is None:
            return None
        return self.interaction.completion


Segment = Union[InteractionData, SubcommandOption]


class InteractionDispatcher:
    """Verify, parse, and route interactions against a CommandRegistry."""

    def __init__(
        self,
        registry: CommandRegistry,
        public_key: Union[str, bytes, VerifyKey],
    ):
        self.registry = registry
        self.public_key = load_public_key(public_key)
        # Strong refs so scheduled callbacks are not garbage collected mid-flight
        self._background_tasks: set[asyncio.Task] = set()

    async def handle_request(
        self,
        body: bytes,
        signature: Optional[str],
        timestamp: Optional[str],
    ) -> DispatchOutcome:
        """
        Run one request through the pipeline.

        Args:
            body: Raw request body
            signature: X-Signature-Ed25519 header
            timestamp: X-Signature-Timestamp header

        Returns:
            DispatchOutcome. For HEARTBEAT/COMMAND outcomes the interaction's
            completion handle carries (or will carry) the response.
        """
        self.registry.freeze()

        try:
            verify_signature(body, signature, timestamp, self.public_key)
        except AuthenticationError as e:
            logger.warning(f"Rejected interaction: {e}")
            return DispatchOutcome(InteractionState.REJECTED, error=e)

        try:
            interaction = parse_interaction(body)
        except MalformedPayload as e:
            logger.warning(f"Malformed interaction payload: {e}")
            return DispatchOutcome(InteractionState.MALFORMED, error=e)

        logger.info(
            "Received interaction",
            extra={
                "interaction_id": interaction.id,
                "interaction_type": interaction.type,
                "command_path": interaction.path,
            },
        )

        interaction.attach_completion(InteractionCompletion(interaction.id))
        return self.dispatch(interaction)

    def dispatch(self, interaction: Interaction) -> DispatchOutcome:
        """Branch on interaction kind. Expects a completion handle to be attached."""
        kind = interaction.kind

        if kind is InteractionKind.HEARTBEAT:
            interaction.completion.resolve(PONG_RESPONSE.to_payload())
            return DispatchOutcome(InteractionState.COMPLETED, interaction)

        if kind is InteractionKind.COMMAND:
            try:
                node = self.route(interaction)
            except UnroutableInteraction as e:
                logger.warning(
                    f"Unroutable interaction {interaction.id}: {e}",
                    extra={"command_path": e.path},
                )
                return DispatchOutcome(InteractionState.UNROUTABLE, interaction, error=e)
            except Exception as e:
                logger.error(
                    f"Command callback failed for interaction {interaction.id}: {e}",
                    exc_info=True,
                )
                # The first response stands even if the callback failed afterwards
                if interaction.completion.done:
                    return DispatchOutcome(InteractionState.COMPLETED, interaction, error=e)
                return DispatchOutcome(InteractionState.FAILED, interaction, error=e)

            state = (
                InteractionState.COMPLETED
                if interaction.completion.done
                else InteractionState.ROUTED
            )
            return DispatchOutcome(state, interaction, handled_by=node)

        logger.info(f"Ignoring interaction {interaction.id} of unhandled type {interaction.type}")
        return DispatchOutcome(InteractionState.UNHANDLED, interaction)

    def route(self, interaction: Interaction) -> CommandNode:
        """
        Resolve the invocation against the registry.

        Returns:
            The node whose callback handled the interaction

        Raises:
            UnroutableInteraction: Nothing handled it
        """
        data = interaction.data
        root = self.registry.get(data.name)
        if root is not None:
            node = self._resolve_segment(root, data, interaction)
            if node is not None:
                return node
        raise UnroutableInteraction(interaction.path)

    def _resolve_segment(
        self,
        node: CommandNode,
        segment: Segment,
        interaction: Interaction,
    ) -> Optional[CommandNode]:
        """Depth-first: this node's callback, then each nested segment it knows."""
        if self._invoke(node, segment, interaction):
            return node

        for option in segment.subcommands:
            child = node.get(option.name)
            if child is None:
                continue
            handled = self._resolve_segment(child, option, interaction)
            if handled is not None:
                return handled

        return None

    def _invoke(self, node: CommandNode, segment: Segment, interaction: Interaction) -> bool:
        result = node.invoke(segment.arguments, interaction)
        if inspect.isawaitable(result):
            self._schedule(result, node, interaction)
            return True
        return bool(result)

    def _schedule(self, awaitable: Any, node: CommandNode, interaction: Interaction) -> None:
        task = asyncio.ensure_future(awaitable)
        self._background_tasks.add(task)

        def _finished(done: asyncio.Task) -> None:
            self._background_tasks.discard(done)
            if done.cancelled():
                return
            error = done.exception()
            if error is not None:
                logger.error(
                    f"Command /{node.name} failed for interaction {interaction.id}: {error}",
                    exc_info=error,
                )

        task.add_done_callback(_finished)
