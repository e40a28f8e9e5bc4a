from pathlib import Path

import pytest

from slashgram.errors import ConfigError
from slashgram.settings import SlashgramSettings, load_settings, validate_settings_data


def test_defaults() -> None:
    settings = SlashgramSettings()
    assert settings.debug is False
    assert settings.test_guilds == []
    assert settings.failure_notice_delay == 1.0
    assert settings.handler_timeout is None
    assert settings.placeholder_description == "No description provided."
    assert "channel" in settings.messages.channel_denied


def test_load_settings_from_toml(tmp_path: Path) -> None:
    config_path = tmp_path / "slashgram.toml"
    config_path.write_text(
        "debug = true\n"
        'test_guilds = ["dev", 123]\n'
        "failure_notice_delay = 0.5\n"
        "\n"
        "[messages]\n"
        'failure = "oops"\n',
        encoding="utf-8",
    )

    settings, path = load_settings(config_path)

    assert path == config_path
    assert settings.debug is True
    assert settings.test_guilds == ["dev", "123"]
    assert settings.failure_notice_delay == 0.5
    assert settings.messages.failure == "oops"
    assert settings.messages.role_denied.endswith("roles to use this command.**")


def test_missing_file_uses_defaults(tmp_path: Path) -> None:
    settings, _ = load_settings(tmp_path / "missing.toml")
    assert settings.model_dump() == SlashgramSettings().model_dump()


def test_env_overrides_file(tmp_path: Path, monkeypatch) -> None:
    config_path = tmp_path / "slashgram.toml"
    config_path.write_text("debug = false\n", encoding="utf-8")
    monkeypatch.setenv("SLASHGRAM__DEBUG", "1")
    monkeypatch.setenv("SLASHGRAM__MESSAGES__FAILURE", "from env")

    settings, _ = load_settings(config_path)

    assert settings.debug is True
    assert settings.messages.failure == "from env"


def test_directory_config_path_fails(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not a file"):
        load_settings(tmp_path)


def test_invalid_file_raises_config_error(tmp_path: Path) -> None:
    config_path = tmp_path / "slashgram.toml"
    config_path.write_text("failure_notice_delay = -1\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="Invalid config"):
        load_settings(config_path)


@pytest.mark.parametrize(
    "data",
    [
        {"unknown": True},
        {"handler_timeout": 0},
        {"test_guilds": "dev"},
        {"test_guilds": [""]},
        {"test_guilds": [True]},
        {"placeholder_description": "   "},
        {"messages": {"failure": ""}},
        {"messages": {"other": "x"}},
    ],
)
def test_validate_settings_data_rejects(data: dict) -> None:
    with pytest.raises(ConfigError, match="Invalid config in x.toml"):
        validate_settings_data(data, config_path=Path("x.toml"))


def test_validate_settings_data_accepts() -> None:
    settings = validate_settings_data(
        {"handler_timeout": 2.5, "placeholder_description": "  TBD  "},
        config_path=Path("x.toml"),
    )
    assert settings.handler_timeout == 2.5
    assert settings.placeholder_description == "TBD"
