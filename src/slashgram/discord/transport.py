"""Pycord-backed registration transport."""

from __future__ import annotations

from typing import Any

import discord

from ..logging import get_logger, is_configured, setup_logging
from ..registry import CommandRegistry, RegistryState, Scope, default_registry
from ..router import CommandRouter
from ..settings import SlashgramSettings
from .interactions import autocomplete_from, invocation_from

logger = get_logger(__name__)


class DiscordCommandTransport:
    """Registers payloads over the bot's HTTP client and feeds interactions to a router."""

    def __init__(self, bot: discord.Client) -> None:
        self._bot = bot
        self._router: CommandRouter | None = None

    @property
    def application_id(self) -> int:
        app_id = self._bot.application_id
        if app_id is None and self._bot.user is not None:
            app_id = self._bot.user.id
        if app_id is None:
            raise RuntimeError("application id is unavailable until the bot has logged in")
        return app_id

    async def list_scopes(self) -> list[Scope]:
        return [Scope(id=str(guild.id), name=guild.name) for guild in self._bot.guilds]

    async def bulk_register(
        self, scope: Scope | None, payloads: list[dict[str, Any]]
    ) -> None:
        http = self._bot.http
        if scope is None:
            await http.bulk_upsert_global_commands(self.application_id, payloads)
        else:
            await http.bulk_upsert_guild_commands(
                self.application_id, int(scope.id), payloads
            )

    async def create(self, scope: Scope | None, payload: dict[str, Any]) -> None:
        http = self._bot.http
        if scope is None:
            await http.upsert_global_command(self.application_id, payload)
        else:
            await http.upsert_guild_command(self.application_id, int(scope.id), payload)

    def install_listeners(self, router: CommandRouter) -> None:
        if self._router is None:
            self._bot.add_listener(self.on_interaction, "on_interaction")
        self._router = router

    async def on_interaction(self, interaction: discord.Interaction) -> None:
        router = self._router
        if router is None:
            return
        if interaction.type == discord.InteractionType.application_command:
            await router.dispatch(invocation_from(interaction))
        elif interaction.type == discord.InteractionType.auto_complete:
            request = autocomplete_from(interaction)
            if request is not None:
                await router.autocomplete(request)


def attach(
    bot: discord.Client,
    *,
    registry: CommandRegistry | None = None,
    settings: SlashgramSettings | None = None,
) -> DiscordCommandTransport:
    """Register sealed commands once ``bot`` is ready and keep serving hot-adds."""
    registry = registry if registry is not None else default_registry
    settings = settings if settings is not None else SlashgramSettings()
    if not is_configured():
        setup_logging(debug=settings.debug)
    transport = DiscordCommandTransport(bot)
    router = CommandRouter(registry, settings)
    if settings.debug and settings.test_guilds:
        registry.add_test_guilds(settings.test_guilds)

    async def on_ready() -> None:
        if registry.state is not RegistryState.UNINITIALIZED:
            logger.debug("discord.ready_again", state=registry.state.value)
            return
        logger.info("discord.ready", user=str(bot.user), guilds=len(bot.guilds))
        await registry.serve(transport, router)

    bot.add_listener(on_ready, "on_ready")
    return transport
