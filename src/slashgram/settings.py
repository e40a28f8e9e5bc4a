from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import TomlConfigSettingsSource

from .errors import ConfigError

HOME_CONFIG_PATH = Path.home() / ".slashgram" / "slashgram.toml"


class MessageSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    channel_denied: str = "> **You cannot use this command in this channel.**"
    permission_denied: str = "> **You do not have the necessary perms to use this command.**"
    role_denied: str = "> **You do not have the necessary roles to use this command.**"
    failure: str = "> **Something went wrong while running this command.**"

    @field_validator("*", mode="before")
    @classmethod
    def _validate_message(cls, value: Any, info) -> Any:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{info.field_name} must be a non-empty string")
        return value


class SlashgramSettings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="forbid",
        env_prefix="SLASHGRAM__",
        env_nested_delimiter="__",
    )

    debug: bool = False
    test_guilds: list[str] = Field(default_factory=list)
    failure_notice_delay: float = 1.0
    handler_timeout: float | None = None
    placeholder_description: str = "No description provided."
    messages: MessageSettings = Field(default_factory=MessageSettings)

    @field_validator("test_guilds", mode="before")
    @classmethod
    def _validate_test_guilds(cls, value: Any) -> Any:
        if value is None:
            return []
        if not isinstance(value, list):
            raise ValueError("test_guilds must be a list")
        cleaned: list[str] = []
        for item in value:
            if isinstance(item, bool) or not isinstance(item, (str, int)):
                raise ValueError("test_guilds entries must be ids or names")
            text = str(item).strip()
            if not text:
                raise ValueError("test_guilds entries must be non-empty")
            cleaned.append(text)
        return cleaned

    @field_validator("failure_notice_delay")
    @classmethod
    def _validate_delay(cls, value: float) -> float:
        if value < 0:
            raise ValueError("failure_notice_delay must not be negative")
        return value

    @field_validator("handler_timeout")
    @classmethod
    def _validate_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError("handler_timeout must be positive")
        return value

    @field_validator("placeholder_description")
    @classmethod
    def _validate_placeholder(cls, value: str) -> str:
        cleaned = value.strip()
        if not 1 <= len(cleaned) <= 100:
            raise ValueError("placeholder_description must be 1-100 characters")
        return cleaned

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def validate_settings_data(
    data: dict[str, Any], *, config_path: Path
) -> SlashgramSettings:
    try:
        return SlashgramSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config in {config_path}: {exc}") from exc


def load_settings(path: str | Path | None = None) -> tuple[SlashgramSettings, Path]:
    cfg_path = Path(path).expanduser() if path else HOME_CONFIG_PATH
    if cfg_path.exists() and not cfg_path.is_file():
        raise ConfigError(f"Config path {cfg_path} exists but is not a file.") from None
    return _load_settings_from_path(cfg_path), cfg_path


def _load_settings_from_path(cfg_path: Path) -> SlashgramSettings:
    cfg = dict(SlashgramSettings.model_config)
    cfg["toml_file"] = cfg_path
    Bound = type(
        "SlashgramSettingsBound",
        (SlashgramSettings,),
        {"model_config": SettingsConfigDict(**cfg)},
    )
    try:
        return Bound()
    except ValidationError as exc:
        raise ConfigError(f"Invalid config in {cfg_path}: {exc}") from exc
