"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Constructor arguments
  2. Environment variables  (FRESHCATALOG__SOURCE__KIND=http)
  3. freshcatalog.yaml      (searched in cwd, then the platform config dir)
  4. Hardcoded defaults

The config file is optional; every field has a default. Unknown keys are
rejected at every nesting level so a typo fails loudly.

The freshness policy is deliberately not configurable: it is a static choice
per route (see ``freshcatalog.policy.ROUTE_POLICIES``).
"""

from __future__ import annotations

from importlib.resources import files
from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_DATA_DIR = platformdirs.user_data_dir("freshcatalog")
_DEFAULT_DB_PATH = str(Path(_DEFAULT_DATA_DIR) / "catalog.db")
_DEFAULT_FIXTURE_PATH = str(files("freshcatalog").joinpath("data", "products.json"))


def _find_config_file() -> str | None:
    """Return the path of the first freshcatalog.yaml found, or None."""
    candidates = [
        Path("freshcatalog.yaml"),
        Path(platformdirs.user_config_dir("freshcatalog")) / "freshcatalog.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class SourceSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["json", "static", "http", "sqlite"] = "json"
    json_path: str = _DEFAULT_FIXTURE_PATH
    url: str = "http://localhost:3000/api/products"
    timeout_seconds: float = 10.0
    db_path: str = _DEFAULT_DB_PATH

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout_seconds must be > 0")
        return v

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("url must use http or https scheme")
        return v


class FrozenSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # Fetch the FROZEN snapshot during startup instead of on first use.
    prime_on_startup: bool = True


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: FRESHCATALOG__LOGGING__LEVEL=DEBUG
        env_prefix="FRESHCATALOG__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
        extra="forbid",
    )

    source: SourceSettings = SourceSettings()
    frozen: FrozenSettings = FrozenSettings()
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
