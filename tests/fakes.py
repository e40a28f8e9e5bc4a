from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from slashgram.events import Suggestion
from slashgram.registry import Scope


@dataclass
class FakeTransport:
    scopes: list[Scope] = field(default_factory=list)
    bulk_calls: list[tuple[str | None, list[dict[str, Any]]]] = field(
        default_factory=list
    )
    create_calls: list[tuple[str | None, dict[str, Any]]] = field(default_factory=list)
    routers: list[Any] = field(default_factory=list)
    fail_bulk_for: set[str | None] = field(default_factory=set)
    fail_create: bool = False

    async def list_scopes(self) -> list[Scope]:
        return list(self.scopes)

    async def bulk_register(
        self, scope: Scope | None, payloads: list[dict[str, Any]]
    ) -> None:
        scope_id = scope.id if scope is not None else None
        if scope_id in self.fail_bulk_for:
            raise RuntimeError(f"bulk failed for {scope_id}")
        self.bulk_calls.append((scope_id, payloads))

    async def create(self, scope: Scope | None, payload: dict[str, Any]) -> None:
        if self.fail_create:
            raise RuntimeError("create failed")
        self.create_calls.append((scope.id if scope is not None else None, payload))

    def install_listeners(self, router: Any) -> None:
        self.routers.append(router)


@dataclass
class FakeResponder:
    replied: bool = False
    deferred: bool = False
    replies: list[tuple[str, bool]] = field(default_factory=list)
    edits: list[str] = field(default_factory=list)
    follow_ups: list[tuple[str, bool]] = field(default_factory=list)
    fail: bool = False

    @property
    def notices(self) -> list[str]:
        return (
            [content for content, _ in self.replies]
            + self.edits
            + [content for content, _ in self.follow_ups]
        )

    async def reply(self, content: str, *, ephemeral: bool = False) -> None:
        if self.fail:
            raise RuntimeError("reply failed")
        self.replies.append((content, ephemeral))
        self.replied = True

    async def defer(self, *, ephemeral: bool = False) -> None:
        self.deferred = True

    async def edit_reply(self, content: str) -> None:
        self.edits.append(content)
        self.replied = True

    async def follow_up(self, content: str, *, ephemeral: bool = False) -> None:
        self.follow_ups.append((content, ephemeral))


@dataclass
class FakeSink:
    suggestions: list[list[Suggestion]] = field(default_factory=list)

    async def suggest(self, suggestions: list[Suggestion]) -> None:
        self.suggestions.append(suggestions)
