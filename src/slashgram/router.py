"""Routes invocation and autocomplete events to the handlers of sealed commands."""

from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping
from enum import StrEnum
from typing import Any

import anyio

from .errors import AutocompleteResultError
from .events import AutocompleteRequest, CommandInvocation, Suggestion
from .logging import bind_context, clear_context, get_logger
from .model import DEFAULT, CommandPath, CommandSpec, Handler
from .registry import CommandRegistry, default_registry
from .settings import SlashgramSettings

logger = get_logger(__name__)

MAX_SUGGESTIONS = 25


class DispatchOutcome(StrEnum):
    IGNORED = "ignored"
    REJECTED = "rejected"
    COMPLETED = "completed"
    FAILED = "failed"


def resolve_handler(spec: CommandSpec, path: CommandPath) -> Handler | None:
    """Most specific handler for ``path``: exact, then subgroup, then default."""
    handler = spec.handler
    if handler is None or callable(handler):
        return handler
    candidates = [path]
    if path.subgroup is not None:
        candidates.append(path.group_only())
    for key in candidates:
        if key in handler:
            return handler[key]
    return handler.get(DEFAULT)


async def _call(func: Callable[[Any], Any], arg: Any) -> Any:
    result = func(arg)
    if inspect.isawaitable(result):
        result = await result
    return result


class CommandRouter:
    def __init__(
        self,
        registry: CommandRegistry | None = None,
        settings: SlashgramSettings | None = None,
    ) -> None:
        self._registry = registry if registry is not None else default_registry
        self._settings = settings if settings is not None else SlashgramSettings()

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    def gate(self, spec: CommandSpec, event: CommandInvocation) -> str | None:
        """Rejection message for the first failing gate, or None."""
        messages = self._settings.messages
        if spec.channels and not any(
            channel in (event.channel_id, event.channel_name) for channel in spec.channels
        ):
            return messages.channel_denied
        if not spec.permissions <= event.permissions:
            return messages.permission_denied
        if not spec.roles <= event.roles:
            return messages.role_denied
        return None

    async def dispatch(self, event: CommandInvocation) -> DispatchOutcome:
        spec = self._registry.get(event.command_name)
        if spec is None:
            # may belong to another integration
            return DispatchOutcome.IGNORED

        rejection = self.gate(spec, event)
        if rejection is not None:
            logger.info(
                "command.rejected",
                command=spec.name,
                path=event.path.key,
                user_id=event.user_id,
                channel_id=event.channel_id,
            )
            await self._send_notice(event, rejection)
            return DispatchOutcome.REJECTED

        handler = resolve_handler(spec, event.path)
        if handler is None:
            logger.debug("command.no_handler", command=spec.name, path=event.path.key)
            return DispatchOutcome.COMPLETED

        bind_context(
            command=spec.name,
            path=event.path.key or None,
            channel_id=event.channel_id,
            user_id=event.user_id,
        )
        try:
            await self._execute(handler, event)
        except Exception as exc:
            logger.exception(
                "command.failed",
                command=spec.name,
                path=event.path.key,
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
            await self._notify_failure(event)
            return DispatchOutcome.FAILED
        finally:
            clear_context()
        logger.debug("command.completed", command=spec.name, path=event.path.key)
        return DispatchOutcome.COMPLETED

    async def _execute(self, handler: Handler, event: CommandInvocation) -> None:
        timeout = self._settings.handler_timeout
        if timeout is None:
            await _call(handler, event)
            return
        with anyio.fail_after(timeout):
            await _call(handler, event)

    async def _notify_failure(self, event: CommandInvocation) -> None:
        delay = self._settings.failure_notice_delay
        if delay > 0:
            await anyio.sleep(delay)
        await self._send_notice(event, self._settings.messages.failure)

    async def _send_notice(self, event: CommandInvocation, content: str) -> None:
        responder = event.responder
        try:
            if responder.deferred and not responder.replied:
                await responder.edit_reply(content)
            elif responder.replied:
                await responder.follow_up(content, ephemeral=True)
            else:
                await responder.reply(content, ephemeral=True)
        except Exception as exc:
            logger.exception(
                "command.notice_failed",
                command=event.command_name,
                error=str(exc),
                error_type=exc.__class__.__name__,
            )

    async def autocomplete(self, request: AutocompleteRequest) -> bool:
        """Answer an autocomplete request; False when nothing handled it."""
        spec = self._registry.get(request.command_name)
        if spec is None:
            return False
        callback = spec.autocomplete.get((request.path, request.focused))
        if callback is None:
            callback = spec.autocomplete.get(DEFAULT)
        if callback is None:
            return False
        try:
            result = await _call(callback, request)
            if not isinstance(result, (list, tuple)):
                raise AutocompleteResultError(
                    f"Invalid result returned by the autocomplete callback for "
                    f"{request.focused!r}: expected a list, got {type(result).__name__}."
                )
            suggestions = [_suggestion(entry) for entry in result[:MAX_SUGGESTIONS]]
            await request.responder.suggest(suggestions)
        except Exception as exc:
            logger.exception(
                "autocomplete.failed",
                command=spec.name,
                path=request.path.key,
                argument=request.focused,
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
            return False
        return True


def _suggestion(entry: Any) -> Suggestion:
    if isinstance(entry, Suggestion):
        return entry
    if isinstance(entry, tuple) and len(entry) == 2:
        display, value = entry
        return Suggestion(display=str(display), value=_choice_value(value))
    if isinstance(entry, Mapping) and "name" in entry and "value" in entry:
        return Suggestion(display=str(entry["name"]), value=_choice_value(entry["value"]))
    return Suggestion(display=str(entry), value=_choice_value(entry))


def _choice_value(value: Any) -> str | int | float:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return str(value)
    return value


def arguments_of(
    event: CommandInvocation, registry: CommandRegistry | None = None
) -> dict[str, Any]:
    """The invocation's argument values, with declared defaults filled in."""
    registry = registry if registry is not None else default_registry
    spec = registry.get(event.command_name)
    values: dict[str, Any] = dict(spec.defaults_at(event.path)) if spec else {}
    values.update(event.options)
    return values
