"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (DROMEDARY__CACHE__MAX_SIZE=100)
  2. dromedary.yaml         (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional; all fields have defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_CONFIG_DIR = platformdirs.user_config_dir("dromedary")


def _find_config_file() -> str | None:
    """Return the path of the first dromedary.yaml found, or None."""
    candidates = [
        Path("dromedary.yaml"),
        Path(_DEFAULT_CONFIG_DIR) / "dromedary.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 5000


class ContentSettings(BaseModel):
    posts_root: str = "posts"
    templates_root: str = "templates"
    metadata_marker: str = "@@"
    posts_per_page: int = 5


class CacheSettings(BaseModel):
    max_size: int = 50
    reset_interval_seconds: int = 1800


class FeedSettings(BaseModel):
    max_items: int = 10
    ttl_seconds: int = 3600
    site_url: str = "http://localhost:5000"
    feed_path: str = "/rss"
    author: str = ""
    image_url: str = ""
    language: str = "en"
    copyright: str = ""
    # Post dates are written in local time without a zone; this is their UTC offset.
    utc_offset_hours: int = -5


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: DROMEDARY__SERVER__PORT=9090
        env_prefix="DROMEDARY__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    server: ServerSettings = ServerSettings()
    content: ContentSettings = ContentSettings()
    cache: CacheSettings = CacheSettings()
    feed: FeedSettings = FeedSettings()
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
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
