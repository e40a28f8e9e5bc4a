"""Msgspec models for the application-command registration payload."""

from __future__ import annotations

from typing import Any

import discord
import msgspec

from .model import ArgumentSpec, CommandSpec, SubcommandNode, SubgroupNode
from .types import channel_types, is_channel, option_type

__all__ = [
    "ChoicePayload",
    "CommandPayload",
    "OptionPayload",
    "build_payload",
    "encode_payload",
    "to_builtins",
]

CHAT_INPUT = 1


class ChoicePayload(msgspec.Struct, omit_defaults=True):
    name: str
    value: str | int | float


class OptionPayload(msgspec.Struct, omit_defaults=True):
    type: int
    name: str
    description: str
    required: bool | None = None
    choices: list[ChoicePayload] | None = None
    channel_types: list[int] | None = None
    min_value: int | float | None = None
    max_value: int | float | None = None
    min_length: int | None = None
    max_length: int | None = None
    autocomplete: bool | None = None
    options: list[OptionPayload] | None = None
    description_localizations: dict[str, str] | None = None


class CommandPayload(msgspec.Struct, omit_defaults=True):
    name: str
    description: str
    type: int = CHAT_INPUT
    options: list[OptionPayload] = msgspec.field(default_factory=list)
    description_localizations: dict[str, str] | None = None


def build_payload(spec: CommandSpec) -> CommandPayload:
    options: list[OptionPayload] = [
        _argument_option(arg) for arg in spec.arguments.values()
    ]
    options.extend(_group_option(group) for group in spec.subgroups.values())
    options.extend(_subcommand_option(sub) for sub in spec.subcommands.values())
    return CommandPayload(
        name=spec.name,
        description=spec.description,
        options=options,
        description_localizations=spec.description_localizations or None,
    )


def _group_option(group: SubgroupNode) -> OptionPayload:
    return OptionPayload(
        type=discord.SlashCommandOptionType.sub_command_group.value,
        name=group.name,
        description=group.description,
        options=[_subcommand_option(sub) for sub in group.subcommands.values()],
        description_localizations=group.description_localizations or None,
    )


def _subcommand_option(sub: SubcommandNode) -> OptionPayload:
    return OptionPayload(
        type=discord.SlashCommandOptionType.sub_command.value,
        name=sub.name,
        description=sub.description,
        options=[
            _argument_option(arg) for arg in sub.arguments.values()
        ],
        description_localizations=sub.description_localizations or None,
    )


def _argument_option(arg: ArgumentSpec) -> OptionPayload:
    option = OptionPayload(
        type=option_type(arg.datatype).value,
        name=arg.name,
        description=arg.description or "",
        required=arg.required,
        description_localizations=arg.description_localizations or None,
    )
    if arg.choices:
        option.choices = [
            ChoicePayload(name=str(choice), value=choice) for choice in arg.choices
        ]
    if arg.autocomplete:
        option.autocomplete = True
    if is_channel(arg.datatype):
        option.channel_types = [kind.value for kind in channel_types(arg.datatype)]
    option.min_value = arg.min_value
    option.max_value = arg.max_value
    option.min_length = arg.min_length
    option.max_length = arg.max_length
    return option


def to_builtins(payload: CommandPayload) -> dict[str, Any]:
    return msgspec.to_builtins(payload)


def encode_payload(payload: CommandPayload) -> bytes:
    return msgspec.json.encode(payload)
