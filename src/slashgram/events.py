"""Events delivered by the invocation transport, and the capabilities they carry."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from .model import ROOT, Choice, CommandPath


class Responder(Protocol):
    """Reply capability of a command invocation."""

    @property
    def replied(self) -> bool: ...

    @property
    def deferred(self) -> bool: ...

    async def reply(self, content: str, *, ephemeral: bool = False) -> None: ...

    async def defer(self, *, ephemeral: bool = False) -> None: ...

    async def edit_reply(self, content: str) -> None: ...

    async def follow_up(self, content: str, *, ephemeral: bool = False) -> None: ...


@dataclass(frozen=True, slots=True)
class Suggestion:
    display: str
    value: Choice


class SuggestionSink(Protocol):
    async def suggest(self, suggestions: list[Suggestion]) -> None: ...


@dataclass(frozen=True, slots=True)
class CommandInvocation:
    command_name: str
    responder: Responder
    path: CommandPath = ROOT
    options: Mapping[str, Any] = field(default_factory=dict)
    channel_id: str | None = None
    channel_name: str | None = None
    guild_id: str | None = None
    user_id: str | None = None
    permissions: frozenset[str] = frozenset()
    # role names and ids, as strings
    roles: frozenset[str] = frozenset()
    raw: Any = field(default=None, compare=False, hash=False)

    async def reply(self, content: str, *, ephemeral: bool = False) -> None:
        await self.responder.reply(content, ephemeral=ephemeral)


@dataclass(frozen=True, slots=True)
class AutocompleteRequest:
    command_name: str
    responder: SuggestionSink
    focused: str
    value: Any = ""
    path: CommandPath = ROOT
    options: Mapping[str, Any] = field(default_factory=dict)
    channel_id: str | None = None
    guild_id: str | None = None
    user_id: str | None = None
    raw: Any = field(default=None, compare=False, hash=False)
