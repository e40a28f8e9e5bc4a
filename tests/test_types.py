import discord
import pytest

from slashgram.types import (
    ArgType,
    channel_types,
    choice_compatible_types,
    is_channel,
    is_numeric,
    option_type,
    primitive_of,
    resolve_type,
    syntax_name,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("int", ArgType.INTEGER),
        ("Integer", ArgType.INTEGER),
        ("intg", ArgType.INTEGER),
        ("num", ArgType.FLOAT),
        ("float", ArgType.FLOAT),
        ("numbers", ArgType.FLOAT),
        ("str", ArgType.STRING),
        ("bool", ArgType.BOOLEAN),
        ("users", ArgType.USER),
        ("member", ArgType.USER),
        ("role", ArgType.ROLE),
        ("mentionable", ArgType.MENTIONABLE),
        ("attachment", ArgType.ATTACHMENT),
        ("vc", ArgType.CHANNEL_VOICE),
        ("voice-channel", ArgType.CHANNEL_VOICE),
        ("Text Channel", ArgType.CHANNEL_TEXT),
        ("channel", ArgType.CHANNEL_ALL),
        ("channel:all", ArgType.CHANNEL_ALL),
        ("forum channels", ArgType.CHANNEL_FORUM),
        ("thread", ArgType.CHANNEL_THREAD),
    ],
)
def test_resolve_type_aliases(raw: str, expected: ArgType) -> None:
    assert resolve_type(raw) is expected


def test_resolve_type_unknown() -> None:
    assert resolve_type("banana") is ArgType.UNKNOWN
    assert resolve_type("") is ArgType.UNKNOWN


def test_resolve_type_unknown_channel_kind() -> None:
    assert resolve_type("banana-channel") is ArgType.UNKNOWN
    assert not is_channel("banana-channel")


def test_resolve_type_passes_enum_through() -> None:
    assert resolve_type(ArgType.ROLE) is ArgType.ROLE


def test_predicates() -> None:
    assert is_numeric("int")
    assert is_numeric(ArgType.FLOAT)
    assert not is_numeric("string")
    assert is_channel("voice channel")
    assert not is_channel("user")


def test_channel_all_expands_to_every_kind() -> None:
    every = set(channel_types(ArgType.CHANNEL_ALL))
    for kind in (
        ArgType.CHANNEL_TEXT,
        ArgType.CHANNEL_VOICE,
        ArgType.CHANNEL_FORUM,
        ArgType.CHANNEL_THREAD,
    ):
        assert set(channel_types(kind)) <= every
    assert channel_types(ArgType.CHANNEL_VOICE) == (discord.ChannelType.voice,)
    assert channel_types(ArgType.STRING) == ()


def test_choice_compatible_types() -> None:
    assert choice_compatible_types() == {
        ArgType.STRING,
        ArgType.INTEGER,
        ArgType.FLOAT,
    }


def test_primitive_of() -> None:
    assert primitive_of("int") == "number"
    assert primitive_of(ArgType.FLOAT) == "number"
    assert primitive_of("bool") == "boolean"
    assert primitive_of("user") == "string"
    assert primitive_of("channel") == "string"


def test_option_type_maps_channels_to_channel() -> None:
    assert option_type("voice") is discord.SlashCommandOptionType.channel
    assert option_type("int") is discord.SlashCommandOptionType.integer
    assert option_type("float") is discord.SlashCommandOptionType.number


@pytest.mark.parametrize("kind", [k for k in ArgType if k is not ArgType.UNKNOWN])
def test_syntax_name_resolves_back(kind: ArgType) -> None:
    assert resolve_type(syntax_name(kind)) is kind
