import os
from collections.abc import Callable

import pytest

from slashgram.builder import CommandBuilder
from slashgram.registry import CommandRegistry
from slashgram.settings import SlashgramSettings
from tests.fakes import FakeResponder, FakeSink, FakeTransport


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path) -> None:
    for key in list(os.environ):
        if key.startswith("SLASHGRAM__"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def registry() -> CommandRegistry:
    return CommandRegistry()


@pytest.fixture
def settings() -> SlashgramSettings:
    return SlashgramSettings(failure_notice_delay=0)


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def responder() -> FakeResponder:
    return FakeResponder()


@pytest.fixture
def sink() -> FakeSink:
    return FakeSink()


@pytest.fixture
def build(
    registry: CommandRegistry, settings: SlashgramSettings
) -> Callable[..., CommandBuilder]:
    def _factory(name: str, description: str | None = None) -> CommandBuilder:
        return CommandBuilder(name, description, registry=registry, settings=settings)

    return _factory
