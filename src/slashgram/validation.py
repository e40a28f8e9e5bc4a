"""Precondition checks used while commands are compiled and built.

Each check inspects its inputs and raises a distinct ``ConfigError``
subclass. None of them hold state.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Callable, Container
from typing import Any

from .errors import (
    BadTypeError,
    DuplicateError,
    ExclusiveError,
    MissingValueError,
    NameFormatError,
    PredicateError,
    RangeError,
)

NAME_MIN_LENGTH = 1
NAME_MAX_LENGTH = 32
DESCRIPTION_MIN_LENGTH = 1
DESCRIPTION_MAX_LENGTH = 100
CHOICES_MIN = 2
CHOICES_MAX = 25
CHOICE_MIN_LENGTH = 1
CHOICE_MAX_LENGTH = 100
OPTIONS_MAX = 25

_TYPE_NAMES: dict[str, type | tuple[type, ...]] = {
    "string": str,
    "number": (int, float),
    "integer": int,
    "boolean": bool,
    "list": (list, tuple),
    "mapping": dict,
    "callable": object,
}


def require(value: Any, message: str) -> None:
    """Fail when ``value`` is missing or falsy."""
    if value is None or value is False or value == "":
        raise MissingValueError(f"{message}.")


def require_type(value: Any, type_name: str, descriptor: str) -> None:
    expected = _TYPE_NAMES[type_name]
    if type_name == "callable":
        ok = callable(value)
    elif type_name in {"number", "integer"}:
        ok = isinstance(value, expected) and not isinstance(value, bool)
    else:
        ok = isinstance(value, expected)
    if not ok:
        raise BadTypeError(
            f"Invalid {descriptor} {value!r}. Must be of type: {type_name}."
        )


def reject_duplicate(value: Any, existing: Container[Any], descriptor: str) -> None:
    if value in existing:
        raise DuplicateError(f"Cannot define duplicate {descriptor}s: {value!r}.")


def exclusive(first: Any, second: Any, first_name: str, second_name: str) -> None:
    if _is_set(first) and _is_set(second):
        raise ExclusiveError(
            f"Properties '{first_name}' and '{second_name}' are mutually exclusive. "
            "Both cannot be defined at once."
        )


def within(value: float, descriptor: str, minimum: float, maximum: float) -> None:
    """Both bounds are inclusive."""
    if value < minimum:
        raise RangeError(
            f"Value of property '{descriptor}' ({value}) is below the minimum of {minimum}."
        )
    if value > maximum:
        raise RangeError(
            f"Value of property '{descriptor}' ({value}) is above the maximum of {maximum}."
        )


def ordered(
    minimum: float | None, maximum: float | None, descriptor: str
) -> None:
    if minimum is not None and maximum is not None and maximum < minimum:
        raise RangeError(
            f"Maximum {descriptor} ({maximum}) must not be below the minimum ({minimum})."
        )


def check(predicate: Callable[[], bool], message: str) -> None:
    """Fail when ``predicate`` returns True."""
    if predicate():
        raise PredicateError(f"{message}.")


def description(text: Any, descriptor: str) -> str:
    require_type(text, "string", f"{descriptor} description")
    cleaned = text.strip()
    within(
        len(cleaned),
        f"{descriptor} description length",
        DESCRIPTION_MIN_LENGTH,
        DESCRIPTION_MAX_LENGTH,
    )
    return cleaned


def choice_literal(value: Any, descriptor: str) -> None:
    within(
        len(str(value)),
        f"{descriptor} choice length",
        CHOICE_MIN_LENGTH,
        CHOICE_MAX_LENGTH,
    )


def slash_name(name: Any, descriptor: str) -> str:
    """Validate a command, subgroup, subcommand or argument name.

    Names may only hold '-', '_', and letters or numbers in any script, and
    must be lowercase except in scripts that have no case.
    """
    require_type(name, "string", f"{descriptor} name")
    if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH or not all(
        _allowed_name_char(ch) for ch in name
    ):
        raise NameFormatError(
            f"Invalid {descriptor} name {name!r}. These names can only contain "
            "'-', '_', and letters and numbers in any language (1-32 characters)."
        )
    if any(unicodedata.category(ch) in {"Lu", "Lt"} for ch in name):
        raise NameFormatError(
            f"Invalid {descriptor} name {name!r}. These names must be fully "
            "lowercase, except for letters in languages without lowercase variants."
        )
    return name


def _allowed_name_char(ch: str) -> bool:
    if ch in "-_":
        return True
    category = unicodedata.category(ch)
    if category[0] in {"L", "N"}:
        return True
    # combining vowel signs of Devanagari and Thai
    if category[0] == "M":
        script = unicodedata.name(ch, "")
        return script.startswith(("DEVANAGARI", "THAI"))
    return False


def _is_set(value: Any) -> bool:
    if value is None or value is False:
        return False
    if isinstance(value, (list, tuple, set, dict, str)):
        return bool(value)
    return True
