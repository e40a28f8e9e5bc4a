"""Description maps applied to an already-declared command tree.

Keys are human-readable paths such as ``"group add"`` or
``"group add <name>"``; bracket and ``*`` characters are ignored. Values are
either a description or a per-locale map whose ``"default"`` entry is the
description itself::

    {
        "group": "Manage groups",
        "group add name": {"default": "Group name", "fr": "Nom du groupe"},
    }
"""

from __future__ import annotations

import unicodedata
from collections.abc import Mapping
from pathlib import Path
from typing import Final

import msgspec

from . import validation
from .errors import BadTypeError, ConfigError, NotDeclaredError
from .model import ArgumentSpec, CommandPath, CommandSpec, SubcommandNode, SubgroupNode

DEFAULT_LOCALE: Final = "default"

type DocValue = str | dict[str, str]
type DocMap = dict[str, DocValue]


def load_docs(source: str | Path | Mapping[str, DocValue]) -> DocMap:
    if isinstance(source, Mapping):
        return dict(source)
    path = Path(source).expanduser()
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ConfigError(f"Failed to read docs file {path}: {exc}") from exc
    try:
        return msgspec.json.decode(raw, type=dict[str, str | dict[str, str]])
    except msgspec.DecodeError as exc:
        raise ConfigError(f"Malformed docs file {path}: {exc}") from exc


def normalize_key(key: str) -> tuple[str, ...]:
    cleaned = "".join(
        ch if ch in "-_" or ch.isspace() or unicodedata.category(ch)[0] in {"L", "N"}
        else " "
        for ch in key
    )
    return tuple(cleaned.split())


def resolve_entry(
    spec: CommandSpec, key: str
) -> SubgroupNode | SubcommandNode | ArgumentSpec:
    words = normalize_key(key)
    entry = _lookup(spec, words)
    if entry is None:
        raise NotDeclaredError(
            f"Documentation for command {spec.name!r} references an undeclared "
            f"entry: {key!r}."
        )
    return entry


def resolve_argument(spec: CommandSpec, key: str) -> tuple[CommandPath, ArgumentSpec]:
    """Resolve a path-plus-argument key to the argument it names."""
    words = normalize_key(key)
    if words:
        path = _path_for(spec, words[:-1])
        arg = spec.argument(path, words[-1]) if path is not None else None
        if arg is not None:
            return path, arg
    raise NotDeclaredError(
        f"Command {spec.name!r} has no argument declared at {key!r}."
    )


def _path_for(spec: CommandSpec, words: tuple[str, ...]) -> CommandPath | None:
    if not words:
        return CommandPath()
    if len(words) == 1:
        if words[0] in spec.subcommands:
            return CommandPath(subcommand=words[0])
        return None
    if len(words) == 2 and words[0] in spec.subgroups:
        return CommandPath(subgroup=words[0], subcommand=words[1])
    return None


def _lookup(
    spec: CommandSpec, words: tuple[str, ...]
) -> SubgroupNode | SubcommandNode | ArgumentSpec | None:
    if not words or len(words) > 3:
        return None
    if len(words) == 1 and words[0] in spec.subgroups:
        return spec.subgroups[words[0]]
    path = _path_for(spec, words)
    if path is not None and not path.is_root:
        return spec.node(path)
    parent = _path_for(spec, words[:-1])
    if parent is None:
        return None
    return spec.argument(parent, words[-1])


def apply_docs(spec: CommandSpec, docs: Mapping[str, DocValue]) -> None:
    for key, value in docs.items():
        entry = resolve_entry(spec, key)
        text, localizations = _split_locales(key, value)
        entry.description = validation.description(text, f"{key!r}")
        entry.description_localizations = localizations
        if not isinstance(entry, ArgumentSpec):
            entry.placeholder = False


def _split_locales(key: str, value: DocValue) -> tuple[str, dict[str, str]]:
    if isinstance(value, str):
        return value, {}
    if not isinstance(value, Mapping):
        raise BadTypeError(
            f"Invalid documentation for {key!r}; expected a string or a locale map."
        )
    validation.require(
        value.get(DEFAULT_LOCALE),
        f"Locale map for {key!r} is missing its {DEFAULT_LOCALE!r} description",
    )
    localizations: dict[str, str] = {}
    for locale, text in value.items():
        if locale == DEFAULT_LOCALE:
            continue
        validation.require(locale.strip(), f"Empty locale in documentation for {key!r}")
        localizations[locale.strip()] = validation.description(text, f"{key!r} ({locale})")
    return value[DEFAULT_LOCALE], localizations
