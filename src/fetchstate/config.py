"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Constructor arguments
  2. Environment variables  (FETCHSTATE__TRANSPORT__BASE_URL=https://api.example.com)
  3. fetchstate.yaml        (searched in cwd, then platform config dir)
  4. Hardcoded defaults

The config file is optional; every field has a default.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_CONFIG_FILENAME = "fetchstate.yaml"


def _find_config_file() -> str | None:
    """Return the path of the first fetchstate.yaml found, or None."""
    candidates = [
        Path(_CONFIG_FILENAME),
        Path(platformdirs.user_config_dir("fetchstate")) / _CONFIG_FILENAME,
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class TransportSettings(BaseModel):
    base_url: str = ""  # Empty → targets must be absolute URLs
    timeout_seconds: float = Field(default=30.0, gt=0)
    user_agent: str = ""  # Empty → "fetchstate/<version>"
    follow_redirects: bool = True
    max_connections: int = Field(default=10, ge=1)
    max_keepalive_connections: int = Field(default=5, ge=0)


class ControllerSettings(BaseModel):
    cache_enabled: bool = True


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: FETCHSTATE__LOGGING__LEVEL=DEBUG
        env_prefix="FETCHSTATE__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    transport: TransportSettings = TransportSettings()
    controller: ControllerSettings = ControllerSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls),
            # dotenv and file secrets are not read
        )
