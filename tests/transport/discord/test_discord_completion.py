"""
Completion Handle Tests

Exactly one response per interaction.
"""

import asyncio

import pytest

from transport.discord.completion import CompletionAlreadyResolved, InteractionCompletion
from transport.discord.normalize import parse_interaction
from transport.discord.schemas import InteractionResponseType


class TestInteractionCompletion:

    def test_resolve_once(self):
        completion = InteractionCompletion("1")
        completion.resolve({"type": 4})

        assert completion.done
        assert completion.response == {"type": 4}

    def test_second_resolve_raises_and_keeps_first(self):
        """A second response is an error, never a silent overwrite."""
        completion = InteractionCompletion("1")
        completion.resolve({"type": 4, "data": {"content": "first"}})

        with pytest.raises(CompletionAlreadyResolved):
            completion.resolve({"type": 4, "data": {"content": "second"}})

        assert completion.response["data"]["content"] == "first"

    def test_response_before_resolve_raises(self):
        with pytest.raises(RuntimeError):
            InteractionCompletion("1").response

    @pytest.mark.asyncio
    async def test_wait_returns_when_resolved_later(self):
        completion = InteractionCompletion("1")

        async def resolve_later():
            await asyncio.sleep(0.01)
            completion.resolve({"type": 5})

        asyncio.ensure_future(resolve_later())
        result = await asyncio.wait_for(completion.wait(), timeout=1)

        assert result == {"type": 5}


class TestInteractionHelpers:
    """respond()/acknowledge() resolve the attached handle."""

    def _interaction(self):
        interaction = parse_interaction(b'{"id": "9", "type": 2}')
        interaction.attach_completion(InteractionCompletion(interaction.id))
        return interaction

    def test_respond_wraps_data(self):
        interaction = self._interaction()
        interaction.respond({"content": "hello"})

        assert interaction.completion.response == {
            "type": InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE,
            "data": {"content": "hello"},
        }

    def test_acknowledge_is_deferred_without_data(self):
        interaction = self._interaction()
        interaction.acknowledge()

        assert interaction.completion.response == {
            "type": InteractionResponseType.DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE,
        }

    def test_respond_twice_raises(self):
        interaction = self._interaction()
        interaction.respond({"content": "one"})

        with pytest.raises(CompletionAlreadyResolved):
            interaction.respond({"content": "two"})

    def test_no_handle_attached(self):
        interaction = parse_interaction(b'{"type": 2}')
        with pytest.raises(RuntimeError):
            interaction.respond({"content": "x"})

    def test_attach_twice_raises(self):
        interaction = self._interaction()
        with pytest.raises(RuntimeError):
            interaction.attach_completion(InteractionCompletion())
