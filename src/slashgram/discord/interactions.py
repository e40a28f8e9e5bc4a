"""Conversion of Pycord interactions into router events."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import discord

from ..events import AutocompleteRequest, CommandInvocation, Suggestion
from ..logging import get_logger
from ..model import ROOT, CommandPath

logger = get_logger(__name__)

SUB_COMMAND = discord.SlashCommandOptionType.sub_command.value
SUB_COMMAND_GROUP = discord.SlashCommandOptionType.sub_command_group.value


class InteractionResponder:
    """Reply capability backed by a Pycord interaction."""

    def __init__(self, interaction: discord.Interaction) -> None:
        self._interaction = interaction
        self._deferred = False
        self._replied = False

    @property
    def deferred(self) -> bool:
        return self._deferred

    @property
    def replied(self) -> bool:
        if self._replied:
            return True
        # the handler may have answered through the raw interaction
        return not self._deferred and self._interaction.response.is_done()

    async def reply(self, content: str, *, ephemeral: bool = False) -> None:
        if self._deferred or self._interaction.response.is_done():
            await self.follow_up(content, ephemeral=ephemeral)
            return
        await self._interaction.response.send_message(content, ephemeral=ephemeral)
        self._replied = True

    async def defer(self, *, ephemeral: bool = False) -> None:
        await self._interaction.response.defer(ephemeral=ephemeral)
        self._deferred = True

    async def edit_reply(self, content: str) -> None:
        await self._interaction.edit_original_response(content=content)
        self._replied = True

    async def follow_up(self, content: str, *, ephemeral: bool = False) -> None:
        await self._interaction.followup.send(content, ephemeral=ephemeral)
        self._replied = True


class AutocompleteResponder:
    def __init__(self, interaction: discord.Interaction) -> None:
        self._interaction = interaction

    async def suggest(self, suggestions: list[Suggestion]) -> None:
        await self._interaction.response.send_autocomplete_result(
            choices=[
                discord.OptionChoice(name=s.display, value=s.value) for s in suggestions
            ]
        )


def split_options(
    options: Sequence[Mapping[str, Any]] | None,
) -> tuple[CommandPath, list[Mapping[str, Any]]]:
    """Walk subgroup and subcommand wrappers down to the leaf options."""
    options = list(options or [])
    subgroup: str | None = None
    subcommand: str | None = None
    if len(options) == 1 and options[0].get("type") == SUB_COMMAND_GROUP:
        subgroup = options[0]["name"]
        options = list(options[0].get("options") or [])
    if len(options) == 1 and options[0].get("type") == SUB_COMMAND:
        subcommand = options[0]["name"]
        options = list(options[0].get("options") or [])
    if subgroup is None and subcommand is None:
        return ROOT, options
    return CommandPath.of(subgroup, subcommand), options


def _resolve_value(interaction: discord.Interaction, option: Mapping[str, Any]) -> Any:
    value = option.get("value")
    kind = option.get("type")
    guild = interaction.guild
    if guild is None or not isinstance(value, str) or not value.isdigit():
        return value
    snowflake = int(value)
    if kind == discord.SlashCommandOptionType.user.value:
        return guild.get_member(snowflake) or value
    if kind == discord.SlashCommandOptionType.role.value:
        return guild.get_role(snowflake) or value
    if kind == discord.SlashCommandOptionType.channel.value:
        return guild.get_channel_or_thread(snowflake) or value
    if kind == discord.SlashCommandOptionType.mentionable.value:
        return guild.get_member(snowflake) or guild.get_role(snowflake) or value
    return value


def _member_permissions(user: Any) -> frozenset[str]:
    perms = getattr(user, "guild_permissions", None)
    if perms is None:
        return frozenset()
    return frozenset(name for name, enabled in perms if enabled)


def _member_roles(user: Any) -> frozenset[str]:
    roles: set[str] = set()
    for role in getattr(user, "roles", None) or ():
        roles.add(role.name)
        roles.add(str(role.id))
    return frozenset(roles)


def _id(value: int | None) -> str | None:
    return None if value is None else str(value)


def invocation_from(interaction: discord.Interaction) -> CommandInvocation:
    data = interaction.data or {}
    path, options = split_options(data.get("options"))
    channel = interaction.channel
    user = interaction.user
    return CommandInvocation(
        command_name=data.get("name", ""),
        responder=InteractionResponder(interaction),
        path=path,
        options={opt["name"]: _resolve_value(interaction, opt) for opt in options},
        channel_id=_id(interaction.channel_id),
        channel_name=getattr(channel, "name", None),
        guild_id=_id(interaction.guild_id),
        user_id=_id(user.id) if user is not None else None,
        permissions=_member_permissions(user),
        roles=_member_roles(user),
        raw=interaction,
    )


def autocomplete_from(interaction: discord.Interaction) -> AutocompleteRequest | None:
    data = interaction.data or {}
    path, options = split_options(data.get("options"))
    focused = next((opt for opt in options if opt.get("focused")), None)
    if focused is None:
        logger.debug("autocomplete.no_focus", command=data.get("name"))
        return None
    user = interaction.user
    return AutocompleteRequest(
        command_name=data.get("name", ""),
        responder=AutocompleteResponder(interaction),
        focused=focused["name"],
        value=focused.get("value", ""),
        path=path,
        options={opt["name"]: opt.get("value") for opt in options},
        channel_id=_id(interaction.channel_id),
        guild_id=_id(interaction.guild_id),
        user_id=_id(user.id) if user is not None else None,
        raw=interaction,
    )
