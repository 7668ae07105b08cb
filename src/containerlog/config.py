"""Centralized configuration: Pydantic BaseSettings with TOML + dotenv sources.

Settings live in config.toml. Environment variables override it using ``__``
as the nested delimiter (e.g. ``CONTAINERS__STREAM=stderr``).

Priority (highest wins): init args > env vars > .env > config.toml

Usage::

    from containerlog.config import get_settings

    s = get_settings()
    print(s.containers.path)
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

DEFAULT_CONTAINERS_PATH = "/var/lib/docker/containers"


class _StrictModel(BaseModel):
    """Base for all config sub-models. Rejects unknown keys so typos fail loudly."""

    model_config = {"extra": "forbid"}


class ContainersConfig(_StrictModel):
    ids: list[str] = []
    path: str = DEFAULT_CONTAINERS_PATH
    stream: Literal["all", "stdout", "stderr"] = "all"
    # Join lines the runtime split because they exceeded 16k
    concat_partial: bool = False

    @field_validator("stream", mode="before")
    @classmethod
    def normalize_stream(cls, v: object) -> object:
        return v.strip().lower() if isinstance(v, str) else v


class LoggingConfig(_StrictModel):
    level: str = "INFO"

    @field_validator("level")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        return v.upper()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        toml_file="config.toml",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    containers: ContainersConfig = ContainersConfig()
    logging: LoggingConfig = LoggingConfig()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Priority: init > env vars > .env > config.toml > file secrets."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide Settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached Settings so the next get_settings() re-reads config."""
    global _settings
    _settings = None
