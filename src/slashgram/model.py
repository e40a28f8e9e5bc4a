"""Command tree types: paths, argument descriptors, nodes and ``CommandSpec``."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final

from .types import ArgType, syntax_name

if TYPE_CHECKING:
    from .events import AutocompleteRequest, CommandInvocation
    from .payload import CommandPayload

# Holds characters no slash name may contain, so it never collides with a path.
DEFAULT: Final = "@@default"

type Choice = str | int | float
type Handler = Callable[[CommandInvocation], Awaitable[Any] | Any]
type AutocompleteCallback = Callable[[AutocompleteRequest], Awaitable[Any] | Any]
type HandlerKey = CommandPath | str
type AutocompleteKey = tuple[CommandPath, str] | str


@dataclass(frozen=True, slots=True)
class CommandPath:
    """Address of a node in a command tree; the empty path is the root."""

    subgroup: str | None = None
    subcommand: str | None = None

    @classmethod
    def of(cls, subgroup: str | None = None, subcommand: str | None = None) -> CommandPath:
        return cls(subgroup=subgroup or None, subcommand=subcommand or None)

    @property
    def key(self) -> str:
        return " ".join(part for part in (self.subgroup, self.subcommand) if part)

    @property
    def is_root(self) -> bool:
        return self.subgroup is None and self.subcommand is None

    def group_only(self) -> CommandPath:
        return CommandPath(subgroup=self.subgroup)

    def __str__(self) -> str:
        return self.key


ROOT: Final = CommandPath()


@dataclass(slots=True)
class ArgumentSpec:
    name: str
    datatype: ArgType = ArgType.STRING
    required: bool = True
    description: str | None = None
    choices: tuple[Choice, ...] = ()
    min_value: int | float | None = None
    max_value: int | float | None = None
    min_length: int | None = None
    max_length: int | None = None
    autocomplete: bool = False
    default: Any = None
    description_localizations: dict[str, str] = field(default_factory=dict)

    def to_syntax(self) -> str:
        """Render the descriptor back into grammar text."""
        spec = self._type_syntax()
        inner = ("*" if self.autocomplete else "") + self.name
        if spec:
            inner = f"{inner}: {spec}"
        return f"<{inner}>" if self.required else f"[{inner}]"

    def _type_syntax(self) -> str:
        if self.choices:
            return " | ".join(self._literal(choice) for choice in self.choices)
        if self.min_value is not None or self.max_value is not None:
            return _bounds(
                "x", self._literal(self.min_value), self._literal(self.max_value)
            )
        if self.min_length is not None or self.max_length is not None:
            return _bounds("l", _opt_str(self.min_length), _opt_str(self.max_length))
        if self.datatype is ArgType.STRING:
            return ""
        return syntax_name(self.datatype)

    def _literal(self, value: Choice | None) -> str | None:
        if value is None:
            return None
        if self.datatype is ArgType.FLOAT:
            return repr(float(value))
        return str(value)


def _opt_str(value: int | None) -> str | None:
    return None if value is None else str(value)


def _bounds(var: str, low: str | None, high: str | None) -> str:
    if low is not None and high is not None:
        return f"{low} < {var} < {high}"
    if low is not None:
        return f"{var} > {low}"
    return f"{var} < {high}"


@dataclass(slots=True)
class SubcommandNode:
    name: str
    description: str
    arguments: dict[str, ArgumentSpec] = field(default_factory=dict)
    description_localizations: dict[str, str] = field(default_factory=dict)
    placeholder: bool = False


@dataclass(slots=True)
class SubgroupNode:
    name: str
    description: str
    subcommands: dict[str, SubcommandNode] = field(default_factory=dict)
    description_localizations: dict[str, str] = field(default_factory=dict)
    placeholder: bool = False


@dataclass(slots=True, eq=False)
class CommandSpec:
    """Root aggregate for one command; sealed once ``payload`` is set."""

    name: str
    description: str
    arguments: dict[str, ArgumentSpec] = field(default_factory=dict)
    subgroups: dict[str, SubgroupNode] = field(default_factory=dict)
    subcommands: dict[str, SubcommandNode] = field(default_factory=dict)
    autocomplete: dict[AutocompleteKey, AutocompleteCallback] = field(
        default_factory=dict
    )
    permissions: set[str] = field(default_factory=set)
    roles: set[str] = field(default_factory=set)
    channels: set[str] = field(default_factory=set)
    guilds: set[str] = field(default_factory=set)
    handler: Handler | dict[HandlerKey, Handler] | None = None
    description_localizations: dict[str, str] = field(default_factory=dict)
    payload: CommandPayload | None = None

    @property
    def sealed(self) -> bool:
        return self.payload is not None

    @property
    def has_subtree(self) -> bool:
        return bool(self.subgroups or self.subcommands)

    def node(self, path: CommandPath) -> SubgroupNode | SubcommandNode | None:
        if path.is_root:
            return None
        if path.subgroup is not None:
            group = self.subgroups.get(path.subgroup)
            if group is None or path.subcommand is None:
                return group
            return group.subcommands.get(path.subcommand)
        return self.subcommands.get(path.subcommand or "")

    def arguments_at(self, path: CommandPath) -> dict[str, ArgumentSpec] | None:
        if path.is_root:
            return self.arguments
        node = self.node(path)
        if isinstance(node, SubcommandNode):
            return node.arguments
        return None

    def paths(self) -> Iterator[CommandPath]:
        """Every declared path, parents before children."""
        yield ROOT
        for group in self.subgroups.values():
            yield CommandPath(subgroup=group.name)
            for sub in group.subcommands.values():
                yield CommandPath(subgroup=group.name, subcommand=sub.name)
        for sub in self.subcommands.values():
            yield CommandPath(subcommand=sub.name)

    def argument(self, path: CommandPath, name: str) -> ArgumentSpec | None:
        args = self.arguments_at(path)
        if args is None:
            return None
        return args.get(name)

    def defaults_at(self, path: CommandPath) -> Mapping[str, Any]:
        args = self.arguments_at(path) or {}
        return {
            name: arg.default
            for name, arg in args.items()
            if not arg.required and arg.default is not None
        }
