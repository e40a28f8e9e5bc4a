"""Compiler for the argument syntax grammar.

A syntax string declares one argument together with the subgroup and
subcommand it lives in::

    group add <name> <count: 1 < x < 5> [*tag: red | blue]
    ^^^^^ ^^^ ^^^^^^
    |     |   required argument (bare names may only precede it)
    |     subcommand
    subgroup

``<...>`` marks a required argument and ``[...]`` an optional one. Inside
the brackets, ``name: type`` names the argument and its datatype. A ``*``
before the name makes it autocompletable. The type may instead be a choice
list (``a | b | c``) or a bound expression over ``x`` (the value) or ``l``
(the length), e.g. ``1 < x < 5`` or ``l > 3``.
"""

from __future__ import annotations

import itertools
import re
from dataclasses import dataclass

from .errors import GrammarError
from .logging import get_logger
from .model import ArgumentSpec, Choice, CommandPath
from .types import ArgType, resolve_type

logger = get_logger(__name__)

_CLOSERS = {"<": ">", "[": "]"}
_BRACKETS = frozenset("<>[]")

_INT = re.compile(r"[+-]?\d+")
_OPERAND = re.compile(r"\s*(?:[+-]?\.?\d|[xl](?!\w))")
_NUMBER = r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)"
_VAR = r"(?<![A-Za-z])(?P<var>[xl])(?![A-Za-z])"
_NUM = rf"(?P<num>{_NUMBER})"
_MIN_PATTERNS = (
    re.compile(rf"{_VAR}\s*>\s*{_NUM}"),
    re.compile(rf"{_NUM}\s*<\s*{_VAR}"),
)
_MAX_PATTERNS = (
    re.compile(rf"{_VAR}\s*<\s*{_NUM}"),
    re.compile(rf"{_NUM}\s*>\s*{_VAR}"),
)


@dataclass(frozen=True, slots=True)
class Segment:
    raw: str
    name: str
    sub: bool = False
    subgroup: bool = False
    subcommand: bool = False
    argument: ArgumentSpec | None = None
    type_name: str | None = None

    @property
    def optional(self) -> bool:
        return self.argument is not None and not self.argument.required


@dataclass(frozen=True, slots=True)
class ParsedSyntax:
    syntax: str
    segments: tuple[Segment, ...]

    @property
    def path(self) -> CommandPath:
        subgroup = next((s.name for s in self.segments if s.subgroup), None)
        subcommand = next((s.name for s in self.segments if s.subcommand), None)
        return CommandPath.of(subgroup, subcommand)

    @property
    def argument_segment(self) -> Segment:
        return next(s for s in self.segments if not s.sub)

    @property
    def argument(self) -> ArgumentSpec:
        arg = self.argument_segment.argument
        assert arg is not None
        return arg


def tokenize(syntax: str) -> list[str]:
    """Split on whitespace outside the outermost bracket pair."""
    tokens: list[str] = []
    index = 0
    length = len(syntax)
    while index < length:
        if syntax[index].isspace():
            index += 1
            continue
        if syntax[index] in _CLOSERS:
            end = _closing_index(syntax, index)
        else:
            end = index
            while end + 1 < length and not syntax[end + 1].isspace():
                end += 1
        token = syntax[index : end + 1]
        _check_brackets(token, syntax)
        tokens.append(token)
        index = end + 1
    return tokens


def _closing_index(syntax: str, start: int) -> int:
    # A '>' followed by a number or a bound variable is a comparison inside
    # the brackets, not the end of the token.
    for index in range(start + 1, len(syntax)):
        char = syntax[index]
        if char not in ">]":
            continue
        rest = syntax[index + 1 :]
        if char == ">" and _OPERAND.match(rest):
            continue
        if not rest or rest[0].isspace() or rest[0] in _CLOSERS:
            return index
    return len(syntax) - 1


def _check_brackets(token: str, syntax: str) -> None:
    opener = token[0]
    if opener in _CLOSERS:
        if len(token) < 2 or token[-1] != _CLOSERS[opener]:
            raise GrammarError(
                f"Mismatched brackets in argument {token!r}; "
                f"expected it to end with {_CLOSERS[opener]!r}.",
                syntax,
            )
    elif any(ch in _BRACKETS for ch in token):
        raise GrammarError(
            f"Unbalanced bracket in {token!r}. Enclose argument names in <> "
            "or [] brackets (e.g. '[name]' instead of 'name').",
            syntax,
        )


def expand_syntax(syntax: str) -> list[str]:
    """Split ``group add <a> <b>`` into one declaration per argument.

    Strings that do not have that shape are returned unchanged so that
    ``parse_syntax`` reports what is wrong with them.
    """
    tokens = tokenize(syntax)
    bare = list(itertools.takewhile(lambda t: t[0] not in _CLOSERS, tokens))
    rest = tokens[len(bare) :]
    if len(rest) < 2 or any(token[0] not in _CLOSERS for token in rest):
        return [syntax]
    return [" ".join([*bare, token]) for token in rest]


def parse_syntax(syntax: str) -> ParsedSyntax:
    """Tokenize and classify one syntax string."""
    tokens = tokenize(syntax)
    if not tokens:
        raise GrammarError("Invalid command argument syntax.", syntax)

    segments: list[Segment] = []
    seen_argument = False
    for index, token in enumerate(tokens):
        if token[0] in _CLOSERS:
            segments.append(parse_argument(token, syntax))
            seen_argument = True
            continue
        if seen_argument:
            raise GrammarError("Cannot define a subcommand after an argument.", syntax)
        if index > 1:
            raise GrammarError(
                "Subgroups and subcommands can only be used as the first two "
                "segments of an argument declaration.",
                syntax,
            )
        segments.append(Segment(raw=token, name=token.strip(), sub=True))

    arguments = [s for s in segments if not s.sub]
    if not arguments:
        raise GrammarError(
            "Subgroups and subcommands cannot be declared without an argument. "
            "Enclose the argument name in <> or [] brackets, or use subcommand() "
            "to declare only a subcommand.",
            syntax,
        )
    if len(arguments) > 1:
        raise GrammarError(
            "Only one argument, along with its subcommand and subgroup, can be "
            "defined in a single syntax string.",
            syntax,
        )

    bare = [s for s in segments if s.sub]
    if len(bare) == 2:
        segments[0] = _flag(segments[0], subgroup=True)
        segments[1] = _flag(segments[1], subcommand=True)
    elif len(bare) == 1:
        segments[0] = _flag(segments[0], subcommand=True)
    return ParsedSyntax(syntax=syntax, segments=tuple(segments))


def _flag(segment: Segment, *, subgroup: bool = False, subcommand: bool = False) -> Segment:
    return Segment(
        raw=segment.raw,
        name=segment.name,
        sub=True,
        subgroup=subgroup,
        subcommand=subcommand,
    )


def parse_argument(token: str, syntax: str | None = None) -> Segment:
    """Parse one bracketed token such as ``<count: 1 < x < 5>``."""
    syntax = syntax if syntax is not None else token
    required = token[0] == "<"
    inner = token[1:-1].strip()
    name, sep, type_spec = inner.partition(":")
    name = name.strip()
    type_spec = type_spec.strip() if sep else ""

    autocomplete = name.startswith("*")
    if autocomplete:
        name = name[1:].strip()
    if not name:
        raise GrammarError(f"Missing argument name in {token!r}.", syntax)
    declared = type_spec or None
    type_spec = type_spec or "string"

    arg = ArgumentSpec(name=name, required=required, autocomplete=autocomplete)
    if "|" in type_spec:
        _apply_choices(arg, type_spec, syntax)
    elif "<" in type_spec or ">" in type_spec:
        _apply_bounds(arg, type_spec, syntax)
    else:
        arg.datatype = resolve_type(type_spec)
    return Segment(raw=token, name=name, argument=arg, type_name=declared)


def _apply_choices(arg: ArgumentSpec, type_spec: str, syntax: str) -> None:
    entries = [entry.strip() for entry in type_spec.split("|")]
    if len(entries) < 2 or not all(entries):
        raise GrammarError(
            f"Choice list {type_spec!r} needs at least two non-empty entries.", syntax
        )
    arg.datatype, arg.choices = infer_choices(entries)
    if arg.autocomplete:
        logger.warning("grammar.autocomplete_ignored", argument=arg.name, syntax=syntax)
        arg.autocomplete = False


def infer_choices(entries: list[str]) -> tuple[ArgType, tuple[Choice, ...]]:
    if all(_INT.fullmatch(entry) for entry in entries):
        return ArgType.INTEGER, tuple(int(entry) for entry in entries)
    if all(re.fullmatch(_NUMBER, entry) for entry in entries):
        return ArgType.FLOAT, tuple(float(entry) for entry in entries)
    return ArgType.STRING, tuple(entries)


def _apply_bounds(arg: ArgumentSpec, type_spec: str, syntax: str) -> None:
    minima = [m for p in _MIN_PATTERNS for m in p.finditer(type_spec)]
    maxima = [m for p in _MAX_PATTERNS for m in p.finditer(type_spec)]
    if not minima and not maxima:
        raise GrammarError(
            f"Could not find a minimum or maximum in {type_spec!r}. Use 'x' for "
            "values or 'l' for lengths, e.g. '1 < x < 5' or 'l > 3'.",
            syntax,
        )
    variables = {m.group("var") for m in minima + maxima}
    if len(variables) > 1:
        raise GrammarError(
            f"Cannot mix value (x) and length (l) bounds in {type_spec!r}.", syntax
        )
    literals = [m.group("num") for m in minima + maxima]
    integral = all(_INT.fullmatch(literal) for literal in literals)

    def number(literal: str) -> int | float:
        return int(literal) if integral else float(literal)

    # the tightest bound wins when several are given
    low = max((number(m.group("num")) for m in minima), default=None)
    high = min((number(m.group("num")) for m in maxima), default=None)

    if variables == {"l"}:
        if not integral:
            raise GrammarError(
                f"Length bounds in {type_spec!r} must be whole numbers.", syntax
            )
        arg.datatype = ArgType.STRING
        arg.min_length = low
        arg.max_length = high
        return
    arg.datatype = ArgType.INTEGER if integral else ArgType.FLOAT
    arg.min_value = low
    arg.max_value = high
