import pytest

from slashgram import validation
from slashgram.errors import (
    BadTypeError,
    DuplicateError,
    ExclusiveError,
    MissingValueError,
    NameFormatError,
    PredicateError,
    RangeError,
)


def test_require() -> None:
    validation.require("x", "Missing")
    with pytest.raises(MissingValueError, match="Missing"):
        validation.require("", "Missing")
    with pytest.raises(MissingValueError):
        validation.require(None, "Missing")


def test_require_type() -> None:
    validation.require_type(3, "integer", "count")
    validation.require_type(2.5, "number", "ratio")
    validation.require_type(len, "callable", "handler")
    with pytest.raises(BadTypeError, match="Must be of type: integer"):
        validation.require_type(True, "integer", "count")
    with pytest.raises(BadTypeError, match="'3'"):
        validation.require_type("3", "number", "count")


def test_reject_duplicate() -> None:
    validation.reject_duplicate("a", {"b"}, "name")
    with pytest.raises(DuplicateError, match="duplicate names: 'a'"):
        validation.reject_duplicate("a", {"a"}, "name")


def test_exclusive_treats_empty_values_as_unset() -> None:
    validation.exclusive((), True, "choices", "autoComplete")
    validation.exclusive(("a",), False, "choices", "autoComplete")
    validation.exclusive(None, 3, "min", "max")
    with pytest.raises(ExclusiveError, match="'choices' and 'autoComplete'"):
        validation.exclusive(("a",), True, "choices", "autoComplete")


def test_within_is_inclusive() -> None:
    validation.within(1, "size", 1, 25)
    validation.within(25, "size", 1, 25)
    with pytest.raises(RangeError, match="below the minimum"):
        validation.within(0, "size", 1, 25)
    with pytest.raises(RangeError, match="above the maximum"):
        validation.within(26, "size", 1, 25)


def test_ordered() -> None:
    validation.ordered(1, 1, "value")
    validation.ordered(None, 1, "value")
    with pytest.raises(RangeError, match="must not be below"):
        validation.ordered(5, 1, "value")


def test_check_raises_when_predicate_holds() -> None:
    validation.check(lambda: False, "never")
    with pytest.raises(PredicateError, match="broken"):
        validation.check(lambda: True, "broken")


def test_description_is_stripped_and_bounded() -> None:
    assert validation.description("  hi  ", "command") == "hi"
    with pytest.raises(RangeError):
        validation.description("   ", "command")
    with pytest.raises(RangeError):
        validation.description("x" * 101, "command")
    with pytest.raises(BadTypeError):
        validation.description(5, "command")


def test_choice_literal_length() -> None:
    validation.choice_literal("a" * 100, "arg")
    with pytest.raises(RangeError):
        validation.choice_literal("a" * 101, "arg")


@pytest.mark.parametrize(
    "name", ["ping", "set-color", "snake_case", "v2", "ñandú", "पिंग", "ทดสอบ", "命令", "a" * 32]
)
def test_slash_name_accepts(name: str) -> None:
    assert validation.slash_name(name, "command") == name


@pytest.mark.parametrize("name", ["", "a" * 33, "has space", "emoji🙂", "dot.name"])
def test_slash_name_rejects_bad_characters(name: str) -> None:
    with pytest.raises(NameFormatError, match="can only contain"):
        validation.slash_name(name, "command")


def test_slash_name_rejects_uppercase() -> None:
    with pytest.raises(NameFormatError, match="lowercase"):
        validation.slash_name("Ping", "command")
    with pytest.raises(NameFormatError, match="lowercase"):
        validation.slash_name("Ñandú", "command")


def test_slash_name_rejects_titlecase_letters() -> None:
    with pytest.raises(NameFormatError, match="lowercase"):
        validation.slash_name("ǅemal", "command")
    assert validation.slash_name("ǆemal", "command") == "ǆemal"
