"""Fluent builder that compiles configuration calls into a sealed ``CommandSpec``.

Example::

    command("subg", "Subgroup test")
        .arguments(["group add <name> <description>", "group get <name>"])
        .action({"group add": add_group, "group get": get_group})

``action`` is the terminal call: it seals the command, computes its
registration payload, and hands it to the registry.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Self

import discord

from . import validation
from .docs import DocMap, DocValue, apply_docs, load_docs, resolve_argument
from .errors import (
    BadTypeError,
    ConfigError,
    ExclusiveError,
    GrammarError,
    NotDeclaredError,
    SealedError,
    UnknownTypeError,
)
from .grammar import expand_syntax, parse_syntax
from .logging import get_logger
from .model import (
    DEFAULT,
    ArgumentSpec,
    AutocompleteCallback,
    Choice,
    CommandPath,
    CommandSpec,
    Handler,
    HandlerKey,
    SubcommandNode,
    SubgroupNode,
)
from .payload import CommandPayload, build_payload
from .registry import CommandRegistry, default_registry
from .settings import SlashgramSettings
from .types import CHOICE_TYPES, ArgType, is_channel, is_numeric, resolve_type

logger = get_logger(__name__)

MAX_LENGTH_BOUND = 6000

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_ARGUMENT_OPTIONS = frozenset(
    {
        "description",
        "choices",
        "autocomplete",
        "min_value",
        "max_value",
        "min_length",
        "max_length",
        "default",
        "datatype",
    }
)


def permission_flag(value: str) -> str | None:
    """Map ``ADMINISTRATOR``, ``ManageMessages`` or ``manage messages`` to a flag name."""
    flag = _CAMEL_BOUNDARY.sub("_", value.strip())
    flag = re.sub(r"[\s-]+", "_", flag).lower()
    if flag in discord.Permissions.VALID_FLAGS:
        return flag
    return None


class CommandBuilder:
    def __init__(
        self,
        name: str,
        description: str | None = None,
        *,
        registry: CommandRegistry | None = None,
        settings: SlashgramSettings | None = None,
    ) -> None:
        self._settings = settings if settings is not None else SlashgramSettings()
        self._registry = registry if registry is not None else default_registry
        self._spec = CommandSpec(
            name=validation.slash_name(name, "command"),
            description=self._settings.placeholder_description,
        )
        self._docs: list[DocMap] = []
        self._autocomplete: dict[str, AutocompleteCallback] = {}
        if description is not None:
            self.description(description)

    @property
    def spec(self) -> CommandSpec:
        return self._spec

    @property
    def _placeholder(self) -> str:
        return self._settings.placeholder_description

    def _ensure_open(self) -> None:
        if self._spec.sealed:
            raise SealedError(
                f"Command {self._spec.name!r} is already sealed; configure it "
                "before calling action()."
            )

    def name(self, name: str) -> Self:
        self._ensure_open()
        self._spec.name = validation.slash_name(name, "command")
        return self

    def description(self, description: str) -> Self:
        self._ensure_open()
        self._spec.description = validation.description(
            description, f"command {self._spec.name!r}"
        )
        return self

    def subgroup(self, name: str, description: str | None = None) -> Self:
        self._ensure_open()
        self._add_subgroup(name, description)
        return self

    def subcommand(
        self, name: str, description: str | None = None, *, group: str | None = None
    ) -> Self:
        """Declare a subcommand; ``"group sub"`` places it inside a subgroup."""
        self._ensure_open()
        validation.require_type(name, "string", "subcommand name")
        parts = name.split()
        if group is None and len(parts) == 2:
            group, name = parts
        elif len(parts) != 1:
            raise BadTypeError(
                f"Invalid subcommand {name!r}; expected 'name' or 'group name'."
            )
        else:
            name = parts[0]
        path = CommandPath.of(group, name)
        created: list[CommandPath] = []
        if group is not None and group not in self._spec.subgroups:
            self._add_subgroup(group, None, placeholder=True)
            created.append(path.group_only())
        try:
            self._add_subcommand(path, description)
        except ConfigError:
            self._discard(created)
            raise
        return self

    def subcommands(self, names: Iterable[str]) -> Self:
        for name in names:
            self.subcommand(name)
        return self

    def argument(self, syntax: str | Mapping[str, Any], **options: Any) -> Self:
        """Declare one argument from syntax text such as ``"group add <name: str>"``.

        ``options`` may carry ``description``, ``choices``, ``autocomplete``
        (a callback, or a flag), ``min_value``/``max_value``,
        ``min_length``/``max_length``, ``default`` and an explicit
        ``datatype`` that overrides inference from the syntax.
        """
        self._ensure_open()
        if isinstance(syntax, Mapping):
            options = {**syntax, **options}
            syntax, name = options.pop("syntax", None), options.pop("name", None)
            syntax = syntax or name
        validation.require_type(syntax, "string", "argument syntax")
        unknown = set(options) - _ARGUMENT_OPTIONS
        if unknown:
            raise BadTypeError(
                f"Unknown argument option(s) {sorted(unknown)} for {syntax!r}."
            )

        declarations = expand_syntax(syntax)
        if len(declarations) > 1:
            if options:
                raise GrammarError(
                    "Argument options can only describe a single argument.", syntax
                )
            for declaration in declarations:
                self.argument(declaration)
            return self

        parsed = parse_syntax(syntax)
        path = parsed.path
        created = self._ensure_path(path, syntax)
        try:
            self._attach(
                path, parsed.argument, parsed.argument_segment.type_name, syntax, options
            )
        except ConfigError:
            self._discard(created)
            raise
        return self

    def arguments(self, items: Iterable[str | Mapping[str, Any]]) -> Self:
        for item in items:
            self.argument(item)
        return self

    def require(self, requirement: str) -> Self:
        """Require a permission, or a role by name or id.

        Role names that collide with permission names can be told apart with
        an ``@`` prefix, e.g. ``"@Administrator"``.
        """
        self._ensure_open()
        validation.require_type(requirement, "string", "requirement")
        text = requirement.strip()
        validation.require(text, "Requirements cannot be empty")
        if text.startswith("@"):
            role = text[1:].strip()
            validation.require(role, f"Invalid role requirement {requirement!r}")
            self._spec.roles.add(role)
            return self
        flag = permission_flag(text)
        if flag is not None:
            self._spec.permissions.add(flag)
        else:
            self._spec.roles.add(text)
        return self

    def requires(self, requirements: Iterable[str]) -> Self:
        for requirement in requirements:
            self.require(requirement)
        return self

    def channel(self, channel: str | int) -> Self:
        """Limit the command to a channel, by name or id."""
        self._ensure_open()
        self._spec.channels.add(_scope_value(channel, "channel"))
        return self

    def channels(self, channels: Iterable[str | int]) -> Self:
        for channel in channels:
            self.channel(channel)
        return self

    def guild(self, guild: str | int) -> Self:
        """Register the command in a guild, by id or name, instead of globally."""
        self._ensure_open()
        self._spec.guilds.add(_scope_value(guild, "guild"))
        return self

    def guilds(self, guilds: Iterable[str | int]) -> Self:
        for guild in guilds:
            self.guild(guild)
        return self

    def docs(self, source: str | Path | Mapping[str, DocValue]) -> Self:
        """Describe declared entries from a mapping or a JSON file.

        Entries are resolved when the command is sealed, so this may be
        called before or after the arguments it documents.
        """
        self._ensure_open()
        self._docs.append(load_docs(source))
        return self

    descriptions = docs

    def autocomplete(self, callbacks: Mapping[str, AutocompleteCallback]) -> Self:
        """Map ``"group add <*name>"``-style keys (or ``DEFAULT``) to callbacks."""
        self._ensure_open()
        validation.require_type(callbacks, "mapping", "autocomplete map")
        for key, callback in callbacks.items():
            validation.require_type(callback, "callable", f"autocomplete callback for {key!r}")
            validation.reject_duplicate(key, self._autocomplete, "autocomplete key")
            self._autocomplete[key] = callback
        return self

    def compile(self) -> CommandPayload:
        """Payload for the current configuration, without sealing."""
        self._ensure_open()
        self._finalize()
        return build_payload(self._spec)

    def action(self, handler: Handler | Mapping[HandlerKey, Handler]) -> CommandSpec:
        """Set the handler(s) and seal the command. Must be the last call."""
        self._ensure_open()
        if isinstance(handler, Mapping):
            self._spec.handler = self._handler_map(handler)
        else:
            validation.require_type(handler, "callable", "command handler")
            self._spec.handler = handler
        self._finalize()
        self._spec.payload = build_payload(self._spec)
        self._registry.seal(self._spec)
        logger.debug("builder.sealed", command=self._spec.name)
        return self._spec

    # tree

    def _ensure_path(self, path: CommandPath, syntax: str) -> list[CommandPath]:
        """Auto-create missing nodes along ``path``; returns the created paths."""
        spec = self._spec
        if path.is_root:
            validation.check(
                lambda: spec.has_subtree,
                f"Cannot add root-level arguments to command {spec.name!r}, "
                f"which has subcommands or subgroups: {syntax!r}",
            )
            return []
        created: list[CommandPath] = []
        if path.subgroup is not None and path.subgroup not in spec.subgroups:
            self._add_subgroup(path.subgroup, None, placeholder=True)
            created.append(path.group_only())
        if spec.node(path) is None:
            try:
                self._add_subcommand(path, None, placeholder=True)
            except ConfigError:
                self._discard(created)
                raise
            created.append(path)
        return created

    def _discard(self, created: list[CommandPath]) -> None:
        spec = self._spec
        for path in reversed(created):
            if path.subcommand is None:
                spec.subgroups.pop(path.subgroup or "", None)
            elif path.subgroup is None:
                spec.subcommands.pop(path.subcommand, None)
            else:
                spec.subgroups[path.subgroup].subcommands.pop(path.subcommand, None)
            logger.debug("builder.node_discarded", command=spec.name, path=path.key)

    def _add_subgroup(
        self, name: str, description: str | None, *, placeholder: bool = False
    ) -> SubgroupNode:
        spec = self._spec
        validation.slash_name(name, "subgroup")
        self._check_top_level(name)
        group = SubgroupNode(
            name=name,
            description=self._node_description(description, f"subgroup {name!r}"),
            placeholder=placeholder and description is None,
        )
        spec.subgroups[name] = group
        if placeholder:
            logger.debug("builder.subgroup_created", command=spec.name, subgroup=name)
        return group

    def _add_subcommand(
        self, path: CommandPath, description: str | None, *, placeholder: bool = False
    ) -> SubcommandNode:
        spec = self._spec
        name = path.subcommand or ""
        validation.slash_name(name, "subcommand")
        if path.subgroup is None:
            self._check_top_level(name)
            siblings = spec.subcommands
        else:
            siblings = spec.subgroups[path.subgroup].subcommands
            validation.reject_duplicate(name, siblings, "subcommand")
            validation.within(
                len(siblings) + 1,
                f"subcommands in {path.subgroup!r}",
                1,
                validation.OPTIONS_MAX,
            )
        node = SubcommandNode(
            name=name,
            description=self._node_description(description, f"subcommand {path.key!r}"),
            placeholder=placeholder and description is None,
        )
        siblings[name] = node
        if placeholder:
            logger.debug("builder.subcommand_created", command=spec.name, path=path.key)
        return node

    def _check_top_level(self, name: str) -> None:
        spec = self._spec
        validation.check(
            lambda: bool(spec.arguments),
            f"Cannot add subcommand or subgroup {name!r} to command {spec.name!r}, "
            "which has root-level arguments",
        )
        validation.reject_duplicate(
            name, spec.subgroups.keys() | spec.subcommands.keys(), "subgroup or subcommand"
        )
        validation.within(
            len(spec.subgroups) + len(spec.subcommands) + 1,
            f"top-level options of {spec.name!r}",
            1,
            validation.OPTIONS_MAX,
        )

    def _node_description(self, description: str | None, descriptor: str) -> str:
        if description is None:
            return self._placeholder
        return validation.description(description, descriptor)

    # arguments

    def _attach(
        self,
        path: CommandPath,
        arg: ArgumentSpec,
        type_name: str | None,
        syntax: str,
        options: Mapping[str, Any],
    ) -> None:
        validation.slash_name(arg.name, "argument")
        datatype = options.get("datatype")
        if datatype is None and arg.datatype is ArgType.UNKNOWN:
            raise UnknownTypeError(
                f"Unknown datatype {type_name!r} for argument {arg.name!r} in {syntax!r}."
            )
        description = options.get("description")
        arg.description = (
            validation.description(description, f"argument {arg.name!r}")
            if description is not None
            else self._placeholder
        )

        choices = options.get("choices")
        if choices is not None:
            validation.require_type(choices, "list", f"choices of {arg.name!r}")
            validation.exclusive(arg.choices, choices, "syntax choices", "choices")
            if type_name is None and datatype is None:
                arg.datatype, arg.choices = _infer_literal_choices(choices)
            else:
                arg.choices = tuple(choices)

        for field in ("min_value", "max_value", "min_length", "max_length"):
            value = options.get(field)
            if value is None:
                continue
            kind = "integer" if field.endswith("length") else "number"
            validation.require_type(value, kind, f"{field} of {arg.name!r}")
            validation.exclusive(getattr(arg, field), value, f"syntax {field}", field)
            setattr(arg, field, value)
        if type_name is None and datatype is None and not arg.choices:
            arg.datatype = _infer_bounds_type(arg)

        callback = options.get("autocomplete")
        if callback is not None:
            if callable(callback):
                arg.autocomplete = True
            else:
                validation.require_type(callback, "boolean", f"autocomplete of {arg.name!r}")
                arg.autocomplete = callback

        if datatype is not None:
            _retype(arg, resolve_type(datatype), syntax)

        if "default" in options and options["default"] is not None:
            validation.check(
                lambda: arg.required,
                f"Only optional arguments can declare a default value: {syntax!r}",
            )
            arg.default = options["default"]

        _validate_argument(arg, syntax)

        args = self._spec.arguments_at(path)
        assert args is not None
        validation.reject_duplicate(arg.name, args, "argument name")
        validation.check(
            lambda: arg.required and any(not other.required for other in args.values()),
            f"Required argument {arg.name!r} cannot follow optional arguments: {syntax!r}",
        )
        validation.within(
            len(args) + 1, f"arguments in {path.key or 'root'!r}", 1, validation.OPTIONS_MAX
        )
        args[arg.name] = arg
        if callable(callback):
            self._spec.autocomplete[(path, arg.name)] = callback

    # sealing

    def _finalize(self) -> None:
        spec = self._spec
        for docs in self._docs:
            apply_docs(spec, docs)
        for key, callback in self._autocomplete.items():
            if key == DEFAULT:
                spec.autocomplete[DEFAULT] = callback
                continue
            path, arg = resolve_argument(spec, key)
            validation.check(
                lambda: not arg.autocomplete,
                f"Argument {arg.name!r} is not autocompletable; prefix its name "
                f"with '*' (e.g. '<*{arg.name}>')",
            )
            spec.autocomplete[(path, arg.name)] = callback
        for group in spec.subgroups.values():
            validation.check(
                lambda: not group.subcommands,
                f"Subgroup {group.name!r} of {spec.name!r} has no subcommands",
            )
        for path in spec.paths():
            node = spec.node(path)
            if node is not None and node.placeholder:
                logger.warning(
                    "builder.description_missing", command=spec.name, path=path.key
                )
        if DEFAULT not in spec.autocomplete:
            for path in spec.paths():
                for arg in (spec.arguments_at(path) or {}).values():
                    if arg.autocomplete and (path, arg.name) not in spec.autocomplete:
                        logger.warning(
                            "builder.autocomplete_missing",
                            command=spec.name,
                            path=path.key,
                            argument=arg.name,
                        )

    def _handler_map(
        self, handlers: Mapping[HandlerKey, Handler]
    ) -> dict[HandlerKey, Handler]:
        resolved: dict[HandlerKey, Handler] = {}
        for key, handler in handlers.items():
            validation.require_type(handler, "callable", f"handler for {key!r}")
            path = DEFAULT if key == DEFAULT else self._handler_path(key)
            validation.reject_duplicate(path, resolved, "handler path")
            resolved[path] = handler
        return resolved

    def _handler_path(self, key: HandlerKey) -> CommandPath:
        spec = self._spec
        if isinstance(key, CommandPath):
            path = key
        else:
            validation.require_type(key, "string", "handler key")
            words = key.split()
            if len(words) == 1 and words[0] in spec.subgroups:
                path = CommandPath(subgroup=words[0])
            elif len(words) == 1:
                path = CommandPath(subcommand=words[0])
            elif len(words) == 2:
                path = CommandPath(subgroup=words[0], subcommand=words[1])
            else:
                path = None
        if path is None or path.is_root or spec.node(path) is None:
            raise NotDeclaredError(
                f"Handler key {key!r} of command {spec.name!r} does not name a "
                "declared subgroup or subcommand."
            )
        return path


def _scope_value(value: str | int, descriptor: str) -> str:
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise BadTypeError(f"Invalid {descriptor} {value!r}; expected a name or id.")
    text = str(value).strip()
    validation.require(text, f"Invalid {descriptor} {value!r}")
    return text


def _infer_literal_choices(choices: list[Choice]) -> tuple[ArgType, tuple[Choice, ...]]:
    if all(isinstance(c, int) and not isinstance(c, bool) for c in choices):
        return ArgType.INTEGER, tuple(choices)
    if all(isinstance(c, (int, float)) and not isinstance(c, bool) for c in choices):
        return ArgType.FLOAT, tuple(float(c) for c in choices)
    if all(isinstance(c, str) for c in choices):
        return ArgType.STRING, tuple(choices)
    raise BadTypeError(f"Choices {choices!r} must all be strings or all be numbers.")


def _infer_bounds_type(arg: ArgumentSpec) -> ArgType:
    values = [v for v in (arg.min_value, arg.max_value) if v is not None]
    if not values:
        return arg.datatype
    if all(isinstance(v, int) for v in values):
        return ArgType.INTEGER
    return ArgType.FLOAT


def _coerce(value: Choice, datatype: ArgType, syntax: str) -> Choice:
    try:
        if datatype is ArgType.INTEGER:
            number = float(value)
            if not number.is_integer():
                raise ValueError(value)
            return int(number)
        if datatype is ArgType.FLOAT:
            return float(value)
    except (TypeError, ValueError) as exc:
        raise BadTypeError(
            f"Value {value!r} is not a valid {datatype.value} in {syntax!r}."
        ) from exc
    return str(value)


def _retype(arg: ArgumentSpec, datatype: ArgType, syntax: str) -> None:
    if datatype is ArgType.UNKNOWN:
        raise UnknownTypeError(f"Unknown datatype for argument {arg.name!r} in {syntax!r}.")
    arg.datatype = datatype
    if arg.choices and datatype in CHOICE_TYPES:
        arg.choices = tuple(_coerce(choice, datatype, syntax) for choice in arg.choices)
    if is_numeric(datatype):
        if arg.min_value is not None:
            arg.min_value = _coerce(arg.min_value, datatype, syntax)
        if arg.max_value is not None:
            arg.max_value = _coerce(arg.max_value, datatype, syntax)


def _validate_argument(arg: ArgumentSpec, syntax: str) -> None:
    bounds = (arg.min_value, arg.max_value, arg.min_length, arg.max_length)
    validation.exclusive(arg.choices, arg.autocomplete, "choices", "autoComplete")
    validation.exclusive(
        arg.choices, [b for b in bounds if b is not None], "choices", "min/max"
    )
    if arg.choices:
        if arg.datatype not in CHOICE_TYPES:
            raise BadTypeError(
                f"Argument {arg.name!r} of type {arg.datatype.value} cannot have "
                f"choices: {syntax!r}"
            )
        validation.within(
            len(arg.choices),
            f"choices of {arg.name!r}",
            validation.CHOICES_MIN,
            validation.CHOICES_MAX,
        )
        for choice in arg.choices:
            _check_choice_type(arg, choice, syntax)
            validation.choice_literal(choice, f"argument {arg.name!r}")
    if arg.min_value is not None or arg.max_value is not None:
        if not is_numeric(arg.datatype):
            raise BadTypeError(
                f"Properties 'min_value' and 'max_value' can only be used on numeric "
                f"arguments; {arg.name!r} is {arg.datatype.value}: {syntax!r}"
            )
        for value in (arg.min_value, arg.max_value):
            if value is not None:
                _check_choice_type(arg, value, syntax)
        validation.ordered(arg.min_value, arg.max_value, f"value of {arg.name!r}")
    if arg.min_length is not None or arg.max_length is not None:
        if arg.datatype is not ArgType.STRING:
            raise BadTypeError(
                f"Properties 'min_length' and 'max_length' can only be used on string "
                f"arguments; {arg.name!r} is {arg.datatype.value}: {syntax!r}"
            )
        if arg.min_length is not None:
            validation.within(arg.min_length, f"min_length of {arg.name!r}", 0, MAX_LENGTH_BOUND)
        if arg.max_length is not None:
            validation.within(arg.max_length, f"max_length of {arg.name!r}", 1, MAX_LENGTH_BOUND)
        validation.ordered(arg.min_length, arg.max_length, f"length of {arg.name!r}")
    if arg.autocomplete and arg.datatype not in CHOICE_TYPES:
        raise ExclusiveError(
            f"Argument {arg.name!r} of type {arg.datatype.value} cannot be "
            f"autocompleted: {syntax!r}"
        )
    if is_channel(arg.datatype) and arg.default is not None:
        raise BadTypeError(f"Channel argument {arg.name!r} cannot declare a default.")


def _check_choice_type(arg: ArgumentSpec, value: Any, syntax: str) -> None:
    if isinstance(value, bool):
        ok = False
    elif arg.datatype is ArgType.INTEGER:
        ok = isinstance(value, int)
    elif arg.datatype is ArgType.FLOAT:
        ok = isinstance(value, (int, float))
    else:
        ok = isinstance(value, str)
    if not ok:
        raise BadTypeError(
            f"Value {value!r} does not match the {arg.datatype.value} type of "
            f"argument {arg.name!r}: {syntax!r}"
        )


def command(
    name: str,
    description: str | None = None,
    *,
    registry: CommandRegistry | None = None,
    settings: SlashgramSettings | None = None,
) -> CommandBuilder:
    """Start declaring a slash command."""
    return CommandBuilder(name, description, registry=registry, settings=settings)
