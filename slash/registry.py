"""
Command Registry

Tree of registered slash commands.

  ping                     -> callback
  config                   -> (group)
  ├── get                  -> callback
  └── set                  -> callback

Built at setup, then frozen. After freeze() the tree is read-only and
can be shared by every in-flight request without locking.
"""

import logging
from types import MappingProxyType
from typing import Any, Callable, Iterator, Mapping, Optional, Sequence, Union

logger = logging.getLogger(__name__)

# callback(arguments, interaction) -> truthy when the interaction was handled.
# An awaitable return value is scheduled by the dispatcher and counts as handled.
CommandCallback = Callable[[dict[str, Any], Any], Any]
CommandPath = Union[str, Sequence[str]]


class RegistrationConflict(Exception):
    """A command already exists at this path."""
    pass


class RegistryFrozenError(Exception):
    """The registry no longer accepts registrations."""
    pass


def normalize_path(path: CommandPath) -> list[str]:
    """
    Turn "name" or ["name", "sub", ...] into a list of segments.

    Raises:
        ValueError: Empty path or empty segment
    """
    segments = [path] if isinstance(path, str) else list(path)
    if not segments:
        raise ValueError("Command path must contain at least one name")
    for segment in segments:
        if not isinstance(segment, str) or not segment:
            raise ValueError(f"Invalid command name in path {segments!r}")
    return segments


class CommandNode:
    """
    One command or sub command.

    A node without a callback is a pure grouping node: invoking it does
    nothing and resolution continues into its children.
    """

    def __init__(self, name: str, callback: Optional[CommandCallback] = None):
        self.name = name
        self._callback = callback
        self._children: dict[str, "CommandNode"] = {}
        self._frozen = False

    def __repr__(self) -> str:
        kind = "group" if self.is_group else "command"
        return f"CommandNode({self.name!r}, {kind}, children={list(self._children)})"

    @property
    def callback(self) -> Optional[CommandCallback]:
        return self._callback

    @property
    def children(self) -> Mapping[str, "CommandNode"]:
        return MappingProxyType(self._children)

    @property
    def is_group(self) -> bool:
        return self._callback is None

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> Optional["CommandNode"]:
        return self._children.get(name)

    def add_subcommand(
        self,
        path: CommandPath,
        callback: Optional[CommandCallback] = None,
    ) -> "CommandNode":
        """
        Register `path` below this node, creating grouping nodes as needed.

        Returns:
            The node at the end of `path`

        Raises:
            RegistrationConflict: The final segment already exists
            RegistryFrozenError: Tree is frozen
        """
        self._ensure_mutable()
        name, *rest = normalize_path(path)

        child = self._children.get(name)
        if not rest:
            if child is not None:
                raise RegistrationConflict(
                    f"The sub command `{self.name} {name}` already exists."
                )
            child = self._children[name] = CommandNode(name, callback)
            return child

        if child is None:
            child = self._children[name] = CommandNode(name)
        return child.add_subcommand(rest, callback)

    def invoke(self, arguments: dict[str, Any], interaction: Any) -> Any:
        """Run the callback. Grouping nodes return None (not handled)."""
        if self._callback is None:
            return None
        return self._callback(arguments, interaction)

    def freeze(self) -> None:
        self._frozen = True
        for child in self._children.values():
            child.freeze()

    def _ensure_mutable(self) -> None:
        if self._frozen:
            raise RegistryFrozenError(
                f"Cannot register below `{self.name}`: commands are frozen once serving starts"
            )


class CommandRegistry:
    """Top-level commands by name."""

    def __init__(self):
        self._commands: dict[str, CommandNode] = {}
        self._frozen = False

    def __contains__(self, name: str) -> bool:
        return name in self._commands

    def __iter__(self) -> Iterator[CommandNode]:
        return iter(list(self._commands.values()))

    def __len__(self) -> int:
        return len(self._commands)

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def commands(self) -> Mapping[str, CommandNode]:
        return MappingProxyType(self._commands)

    def get(self, name: str) -> Optional[CommandNode]:
        return self._commands.get(name)

    def register(
        self,
        path: CommandPath,
        callback: Optional[CommandCallback] = None,
    ) -> CommandNode:
        """
        Register a command or sub command.

        Args:
            path: "name" or ["name", "sub", ...]
            callback: callback(arguments, interaction); None for a grouping node

        Returns:
            The created node

        Raises:
            RegistrationConflict: A command already exists at `path`
            RegistryFrozenError: Called after freeze()
            ValueError: Empty path
        """
        if self._frozen:
            raise RegistryFrozenError("Cannot register commands once serving has started")

        base, *rest = normalize_path(path)

        if not rest:
            if base in self._commands:
                raise RegistrationConflict(f"The command `{base}` already exists.")
            node = self._commands[base] = CommandNode(base, callback)
            logger.debug(f"Registered command /{base}")
            return node

        parent = self._commands.get(base)
        if parent is None:
            parent = self._commands[base] = CommandNode(base)

        node = parent.add_subcommand(rest, callback)
        logger.debug(f"Registered command /{base} {' '.join(rest)}")
        return node

    def resolve(self, path: CommandPath) -> Optional[CommandNode]:
        """Walk the tree segment by segment. Any missing segment -> None."""
        base, *rest = normalize_path(path)
        node = self._commands.get(base)
        for name in rest:
            if node is None:
                return None
            node = node.get(name)
        return node

    def freeze(self) -> None:
        """Make the whole tree read-only. Idempotent."""
        if self._frozen:
            return
        self._frozen = True
        for node in self._commands.values():
            node.freeze()
        logger.info(f"Command registry frozen with {len(self._commands)} top-level command(s)")
