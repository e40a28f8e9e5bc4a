"""Argument datatypes and the alias table that canonicalizes them."""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Literal

import discord

type Primitive = Literal["string", "number", "boolean"]


class ArgType(StrEnum):
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "number"
    BOOLEAN = "boolean"
    USER = "user"
    ROLE = "role"
    MENTIONABLE = "mentionable"
    ATTACHMENT = "attachment"
    CHANNEL_ALL = "channel:all"
    CHANNEL_TEXT = "channel:text"
    CHANNEL_VOICE = "channel:voice"
    CHANNEL_STAGE = "channel:stage"
    CHANNEL_CATEGORY = "channel:category"
    CHANNEL_ANNOUNCEMENT = "channel:announcement"
    CHANNEL_THREAD = "channel:thread"
    CHANNEL_FORUM = "channel:forum"
    UNKNOWN = "unknown"


_ALIASES: dict[str, ArgType] = {
    "string": ArgType.STRING,
    "str": ArgType.STRING,
    "text": ArgType.STRING,
    "int": ArgType.INTEGER,
    "integer": ArgType.INTEGER,
    "intg": ArgType.INTEGER,
    "num": ArgType.FLOAT,
    "number": ArgType.FLOAT,
    "float": ArgType.FLOAT,
    "bool": ArgType.BOOLEAN,
    "boolean": ArgType.BOOLEAN,
    "user": ArgType.USER,
    "member": ArgType.USER,
    "role": ArgType.ROLE,
    "mention": ArgType.MENTIONABLE,
    "mentionable": ArgType.MENTIONABLE,
    "attachment": ArgType.ATTACHMENT,
    "file": ArgType.ATTACHMENT,
    "image": ArgType.ATTACHMENT,
    # bare channel kinds
    "vc": ArgType.CHANNEL_VOICE,
    "voice": ArgType.CHANNEL_VOICE,
    "stage": ArgType.CHANNEL_STAGE,
    "category": ArgType.CHANNEL_CATEGORY,
    "thread": ArgType.CHANNEL_THREAD,
    "forum": ArgType.CHANNEL_FORUM,
    "announcement": ArgType.CHANNEL_ANNOUNCEMENT,
}

_CHANNEL_ALIASES: dict[str, ArgType] = {
    "": ArgType.CHANNEL_ALL,
    "all": ArgType.CHANNEL_ALL,
    "any": ArgType.CHANNEL_ALL,
    "text": ArgType.CHANNEL_TEXT,
    "default": ArgType.CHANNEL_TEXT,
    "voice": ArgType.CHANNEL_VOICE,
    "vc": ArgType.CHANNEL_VOICE,
    "stage": ArgType.CHANNEL_STAGE,
    "category": ArgType.CHANNEL_CATEGORY,
    "cat": ArgType.CHANNEL_CATEGORY,
    "thread": ArgType.CHANNEL_THREAD,
    "announcement": ArgType.CHANNEL_ANNOUNCEMENT,
    "news": ArgType.CHANNEL_ANNOUNCEMENT,
    "forum": ArgType.CHANNEL_FORUM,
}

_CHANNEL_KINDS: dict[ArgType, tuple[discord.ChannelType, ...]] = {
    ArgType.CHANNEL_TEXT: (discord.ChannelType.text,),
    ArgType.CHANNEL_VOICE: (discord.ChannelType.voice,),
    ArgType.CHANNEL_STAGE: (discord.ChannelType.stage_voice,),
    ArgType.CHANNEL_CATEGORY: (discord.ChannelType.category,),
    ArgType.CHANNEL_ANNOUNCEMENT: (discord.ChannelType.news,),
    ArgType.CHANNEL_THREAD: (
        discord.ChannelType.news_thread,
        discord.ChannelType.private_thread,
        discord.ChannelType.public_thread,
    ),
    ArgType.CHANNEL_FORUM: (discord.ChannelType.forum,),
}

_OPTION_TYPES: dict[ArgType, discord.SlashCommandOptionType] = {
    ArgType.STRING: discord.SlashCommandOptionType.string,
    ArgType.INTEGER: discord.SlashCommandOptionType.integer,
    ArgType.FLOAT: discord.SlashCommandOptionType.number,
    ArgType.BOOLEAN: discord.SlashCommandOptionType.boolean,
    ArgType.USER: discord.SlashCommandOptionType.user,
    ArgType.ROLE: discord.SlashCommandOptionType.role,
    ArgType.MENTIONABLE: discord.SlashCommandOptionType.mentionable,
    ArgType.ATTACHMENT: discord.SlashCommandOptionType.attachment,
}

CHOICE_TYPES: frozenset[ArgType] = frozenset(
    {ArgType.STRING, ArgType.INTEGER, ArgType.FLOAT}
)

_NON_LETTERS = re.compile(r"[^a-zA-Z]")


def resolve_type(value: str | ArgType) -> ArgType:
    """Canonicalize a free-text type name such as ``"int"`` or ``"voice-channel"``."""
    if isinstance(value, ArgType):
        return value
    try:
        return ArgType(value.strip().lower())
    except ValueError:
        pass
    key = _NON_LETTERS.sub("", value).lower()
    if key.endswith("s"):
        key = key[:-1]
    if key.endswith("channel"):
        return _CHANNEL_ALIASES.get(key[: -len("channel")], ArgType.UNKNOWN)
    return _ALIASES.get(key, ArgType.UNKNOWN)


def is_numeric(value: str | ArgType) -> bool:
    return resolve_type(value) in {ArgType.INTEGER, ArgType.FLOAT}


def is_channel(value: str | ArgType) -> bool:
    return resolve_type(value).value.startswith("channel:")


def channel_types(value: str | ArgType) -> tuple[discord.ChannelType, ...]:
    kind = resolve_type(value)
    if kind is ArgType.CHANNEL_ALL:
        return tuple(ct for kinds in _CHANNEL_KINDS.values() for ct in kinds)
    return _CHANNEL_KINDS.get(kind, ())


def choice_compatible_types() -> frozenset[ArgType]:
    return CHOICE_TYPES


def primitive_of(value: str | ArgType) -> Primitive:
    kind = resolve_type(value)
    if kind in {ArgType.INTEGER, ArgType.FLOAT}:
        return "number"
    if kind is ArgType.BOOLEAN:
        return "boolean"
    return "string"


def option_type(value: str | ArgType) -> discord.SlashCommandOptionType:
    kind = resolve_type(value)
    if is_channel(kind):
        return discord.SlashCommandOptionType.channel
    return _OPTION_TYPES[kind]


def syntax_name(value: ArgType) -> str:
    """Shortest alias that resolves back to ``value``."""
    if is_channel(value):
        return value.value.split(":", 1)[1] + "channel"
    return {ArgType.INTEGER: "int", ArgType.FLOAT: "float"}.get(value, value.value)
