"""
Discord Interactions - Pydantic Schemas

PURE DATA MODELS
Wire shapes of an inbound interaction and the outbound response.
Unknown fields are kept, missing fields fall back to empty containers.
"""

from enum import Enum, IntEnum
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, PrivateAttr, field_validator

from .completion import InteractionCompletion


# ============================================================================
# ENUMS
# ============================================================================

class OptionType(IntEnum):
    """Tag carried by every option in an interaction payload."""

    SUB_COMMAND = 1
    SUB_COMMAND_GROUP = 2
    STRING = 3
    INTEGER = 4
    BOOLEAN = 5
    USER = 6
    CHANNEL = 7
    ROLE = 8


class InteractionType(IntEnum):
    """Wire value of `interaction.type`."""

    PING = 1
    APPLICATION_COMMAND = 2


class InteractionResponseType(IntEnum):
    """Wire value of `response.type`."""

    PONG = 1
    CHANNEL_MESSAGE_WITH_SOURCE = 4
    DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE = 5


class InteractionKind(str, Enum):
    """What the dispatcher does with an interaction."""

    HEARTBEAT = "heartbeat"
    COMMAND = "command"
    UNHANDLED = "unhandled"


_NESTED_TYPES = (OptionType.SUB_COMMAND, OptionType.SUB_COMMAND_GROUP)


# ============================================================================
# OPTIONS (tagged variant: leaf argument | nested command segment)
# ============================================================================

def _coerce_options(value: Any) -> list:
    """Turn raw option dicts into ArgumentOption / SubcommandOption."""
    if not isinstance(value, list):
        return []

    options = []
    for raw in value:
        if isinstance(raw, (ArgumentOption, SubcommandOption)):
            options.append(raw)
        elif not isinstance(raw, dict):
            continue
        elif raw.get("type") in _NESTED_TYPES or (
            raw.get("type") is None and "options" in raw
        ):
            options.append(SubcommandOption(**raw))
        else:
            options.append(ArgumentOption(**raw))
    return options


class _OptionContainer:
    """Accessors shared by anything that carries `options`."""

    @property
    def arguments(self) -> dict[str, Any]:
        """Leaf options of this segment, keyed by name."""
        return {
            option.name: option.value
            for option in self.options
            if isinstance(option, ArgumentOption)
        }

    @property
    def subcommands(self) -> list["SubcommandOption"]:
        """Nested command segments, in payload order."""
        return [o for o in self.options if isinstance(o, SubcommandOption)]


class ArgumentOption(BaseModel):
    """Leaf argument: name + typed value."""

    name: str = ""
    type: int = OptionType.STRING
    value: Any = None

    class Config:
        extra = "allow"
        frozen = True


class SubcommandOption(_OptionContainer, BaseModel):
    """Nested command path segment (sub command or group)."""

    name: str = ""
    type: int = OptionType.SUB_COMMAND
    options: list[Union["SubcommandOption", ArgumentOption]] = Field(default_factory=list)

    class Config:
        extra = "allow"
        frozen = True

    @field_validator("options", mode="before")
    @classmethod
    def normalize_options(cls, value):
        return _coerce_options(value)


CommandOption = Union[SubcommandOption, ArgumentOption]

SubcommandOption.model_rebuild()


# ============================================================================
# INTERACTION (INPUT)
# ============================================================================

class InteractionData(_OptionContainer, BaseModel):
    """The invoked command: top-level name + ordered options."""

    id: str = ""
    name: str = ""
    options: list[CommandOption] = Field(default_factory=list)
    resolved: dict[str, Any] = Field(default_factory=dict)

    class Config:
        extra = "allow"
        frozen = True

    @field_validator("options", mode="before")
    @classmethod
    def normalize_options(cls, value):
        return _coerce_options(value)

    @field_validator("id", mode="before")
    @classmethod
    def snowflake_as_str(cls, value):
        return "" if value is None else str(value)

    @field_validator("resolved", mode="before")
    @classmethod
    def default_resolved(cls, value):
        return value or {}

    @property
    def path(self) -> list[str]:
        """Invocation path: top-level name, then the first nested segment per level."""
        path = [self.name] if self.name else []
        segments = self.subcommands
        while segments:
            path.append(segments[0].name)
            segments = segments[0].subcommands
        return path


class Interaction(BaseModel):
    """
    One inbound interaction.

    ref: https://discord.com/developers/docs/interactions/receiving-and-responding
    """

    id: str = ""
    application_id: str = ""
    type: int = 0
    token: str = ""
    version: int = 1
    guild_id: Optional[str] = None
    channel_id: Optional[str] = None
    member: dict[str, Any] = Field(default_factory=dict)
    user: dict[str, Any] = Field(default_factory=dict)
    data: InteractionData = Field(default_factory=InteractionData)

    _completion: Optional[InteractionCompletion] = PrivateAttr(default=None)

    class Config:
        extra = "allow"

    @field_validator("type", mode="before")
    @classmethod
    def tolerate_type(cls, value):
        # bool is an int subclass; `true` must not become PING
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return 0

    @field_validator("member", "user", "data", mode="before")
    @classmethod
    def default_container(cls, value):
        return value or {}

    @field_validator("id", "application_id", "token", mode="before")
    @classmethod
    def snowflake_as_str(cls, value):
        return "" if value is None else str(value)

    @field_validator("guild_id", "channel_id", mode="before")
    @classmethod
    def optional_snowflake(cls, value):
        return None if value is None else str(value)

    @property
    def kind(self) -> InteractionKind:
        if self.type == InteractionType.PING:
            return InteractionKind.HEARTBEAT
        if self.type == InteractionType.APPLICATION_COMMAND:
            return InteractionKind.COMMAND
        return InteractionKind.UNHANDLED

    @property
    def path(self) -> list[str]:
        return self.data.path

    @property
    def completion(self) -> InteractionCompletion:
        if self._completion is None:
            raise RuntimeError(f"Interaction {self.id or '<unknown>'} has no completion handle")
        return self._completion

    def attach_completion(self, completion: InteractionCompletion) -> None:
        """Bind the single-use completion handle. Only once per interaction."""
        if self._completion is not None:
            raise RuntimeError(f"Interaction {self.id or '<unknown>'} already has a completion handle")
        self._completion = completion

    def respond(
        self,
        data: Any = None,
        response_type: int = InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE,
    ) -> None:
        """Resolve the interaction with `{type, data}`. `data` is passed through as-is."""
        self.completion.resolve(
            InteractionResponse(type=response_type, data=data).to_payload()
        )

    def acknowledge(self) -> None:
        """Resolve with a deferred response (the user sees a loading state)."""
        self.respond(response_type=InteractionResponseType.DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE)


# ============================================================================
# RESPONSE (OUTPUT)
# ============================================================================

class InteractionResponse(BaseModel):
    """Outbound body: `{type, data?}`."""

    type: int
    data: Any = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": int(self.type)}
        if self.data is not None:
            payload["data"] = self.data
        return payload


PONG_RESPONSE = InteractionResponse(type=InteractionResponseType.PONG)
