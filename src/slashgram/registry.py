"""Process-wide cache of sealed commands and their registration lifecycle.

Commands sealed before ``initialize`` are registered in bulk, one batch for
global commands and one per guild scope. Commands sealed afterwards are
registered one at a time by a task started in the task group that
``initialize`` was given (``serve`` opens one and keeps it running).
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Protocol

import anyio
from anyio.abc import TaskGroup, TaskStatus

from . import validation
from .errors import SealedError
from .logging import get_logger
from .model import CommandSpec
from .payload import to_builtins

if TYPE_CHECKING:
    from .router import CommandRouter

logger = get_logger(__name__)


class RegistryState(StrEnum):
    UNINITIALIZED = "uninitialized"
    SYNCING = "syncing"
    READY = "ready"


@dataclass(frozen=True, slots=True)
class Scope:
    """A guild commands can be registered in."""

    id: str
    name: str | None = None

    def matches(self, value: str) -> bool:
        return value == self.id or (self.name is not None and value == self.name)


class RegistrationTransport(Protocol):
    async def list_scopes(self) -> Sequence[Scope]: ...

    async def bulk_register(
        self, scope: Scope | None, payloads: list[dict[str, Any]]
    ) -> None: ...

    async def create(self, scope: Scope | None, payload: dict[str, Any]) -> None: ...

    def install_listeners(self, router: CommandRouter) -> None: ...


class CommandRegistry:
    def __init__(self) -> None:
        self._cache: dict[str, CommandSpec] = {}
        self._state = RegistryState.UNINITIALIZED
        self._transport: RegistrationTransport | None = None
        self._task_group: TaskGroup | None = None
        self._test_guilds: list[str] = []
        self._synced: set[str] = set()

    @property
    def state(self) -> RegistryState:
        return self._state

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, name: object) -> bool:
        return name in self._cache

    def __iter__(self) -> Iterator[CommandSpec]:
        return iter(list(self._cache.values()))

    def get(self, name: str) -> CommandSpec | None:
        return self._cache.get(name)

    def seal(self, spec: CommandSpec) -> None:
        """Cache a sealed spec; after ``initialize`` has begun it is also hot-added."""
        if not spec.sealed:
            raise SealedError(f"Command {spec.name!r} must be sealed before it is cached.")
        validation.reject_duplicate(spec.name, self._cache, "command name")
        self._cache[spec.name] = spec
        logger.debug("registry.cached", command=spec.name, state=self._state.value)
        if self._state is RegistryState.UNINITIALIZED:
            return
        self._inject_test_guilds(spec)
        if self._task_group is None:
            logger.warning("registry.hot_add_unavailable", command=spec.name)
            return
        self._task_group.start_soon(self._hot_add, spec, name=f"hot_add:{spec.name}")

    def add_test_guilds(self, guilds: Iterable[str]) -> None:
        """Scope every not-yet-registered command to the given guilds as well."""
        for guild in guilds:
            if guild not in self._test_guilds:
                self._test_guilds.append(guild)
        for spec in self._cache.values():
            if spec.name not in self._synced:
                self._inject_test_guilds(spec)

    def _inject_test_guilds(self, spec: CommandSpec) -> None:
        spec.guilds.update(self._test_guilds)

    async def initialize(
        self,
        transport: RegistrationTransport,
        router: CommandRouter | None = None,
        *,
        task_group: TaskGroup,
    ) -> None:
        """Bulk-register cached commands and install the listeners.

        Commands sealed from now on are registered by tasks started in
        ``task_group``, so it must outlive the registration of every command.
        """
        if self._state is not RegistryState.UNINITIALIZED:
            logger.debug("registry.already_initialized", state=self._state.value)
            return
        self._state = RegistryState.SYNCING
        self._transport = transport
        self._task_group = task_group
        specs = list(self._cache.values())
        global_specs = [spec for spec in specs if not spec.guilds]
        scoped_specs = [spec for spec in specs if spec.guilds]

        if global_specs:
            await self._bulk(transport, None, global_specs)

        if scoped_specs:
            scopes = await self._list_scopes(transport)
            for scope in scopes:
                subset = [
                    spec
                    for spec in scoped_specs
                    if any(scope.matches(guild) for guild in spec.guilds)
                ]
                if subset:
                    await self._bulk(transport, scope, subset)
            self._warn_unmatched(scoped_specs, scopes)

        self._synced.update(spec.name for spec in specs)

        if router is None:
            from .router import CommandRouter

            router = CommandRouter(self)
        transport.install_listeners(router)
        self._state = RegistryState.READY
        logger.info("registry.ready", commands=len(specs))

    async def serve(
        self,
        transport: RegistrationTransport,
        router: CommandRouter | None = None,
        *,
        task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
    ) -> None:
        """Initialize, then keep registering hot-added commands until cancelled."""
        async with anyio.create_task_group() as tg:
            try:
                await self.initialize(transport, router, task_group=tg)
                task_status.started()
                await anyio.sleep_forever()
            finally:
                if self._task_group is tg:
                    self._task_group = None

    async def _hot_add(self, spec: CommandSpec) -> None:
        transport = self._transport
        assert transport is not None and spec.payload is not None
        payload = to_builtins(spec.payload)
        if not spec.guilds:
            await self._create(transport, None, spec, payload)
        else:
            scopes = await self._list_scopes(transport)
            for scope in scopes:
                if any(scope.matches(guild) for guild in spec.guilds):
                    await self._create(transport, scope, spec, payload)
            self._warn_unmatched([spec], scopes)
        self._synced.add(spec.name)

    async def _bulk(
        self,
        transport: RegistrationTransport,
        scope: Scope | None,
        specs: list[CommandSpec],
    ) -> None:
        payloads = [to_builtins(spec.payload) for spec in specs if spec.payload is not None]
        scope_id = scope.id if scope is not None else None
        try:
            await transport.bulk_register(scope, payloads)
        except Exception as exc:
            logger.exception(
                "registry.bulk_failed",
                scope=scope_id,
                commands=[spec.name for spec in specs],
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
            return
        for spec in specs:
            logger.debug("registry.registered", command=spec.name, scope=scope_id)
        logger.info("registry.bulk_registered", scope=scope_id, count=len(payloads))

    async def _create(
        self,
        transport: RegistrationTransport,
        scope: Scope | None,
        spec: CommandSpec,
        payload: dict[str, Any],
    ) -> None:
        scope_id = scope.id if scope is not None else None
        try:
            await transport.create(scope, payload)
        except Exception as exc:
            logger.exception(
                "registry.create_failed",
                command=spec.name,
                scope=scope_id,
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
            return
        logger.info("registry.hot_added", command=spec.name, scope=scope_id)

    async def _list_scopes(self, transport: RegistrationTransport) -> list[Scope]:
        try:
            return list(await transport.list_scopes())
        except Exception as exc:
            logger.exception(
                "registry.list_scopes_failed",
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
            return []

    def _warn_unmatched(self, specs: Iterable[CommandSpec], scopes: list[Scope]) -> None:
        for spec in specs:
            for guild in spec.guilds:
                if not any(scope.matches(guild) for scope in scopes):
                    logger.warning(
                        "registry.scope_unavailable", command=spec.name, guild=guild
                    )


default_registry = CommandRegistry()
