"""Application configuration using Pydantic Settings."""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

# Keys of settings.json that belong to other layers (e.g. the matching engine)
_NON_SETTINGS_SECTIONS = ("matching",)


def _default_data_dir() -> Path:
    # Container deployments mount /config; otherwise keep data next to the package
    if Path("/config").exists():
        return Path("/config")
    return (Path(__file__).parent.parent.parent / "data").resolve()


def json_config_settings_source(
    settings: BaseSettings | None = None,
) -> dict[str, Any]:  # noqa: ANN001
    """Load settings from settings.json file.

    This source has lowest priority - env vars will override JSON values.

    Args:
        settings: The Settings class (not instance) being constructed.

    Returns:
        Dictionary with setting keys (lowercase) and values from JSON file.
        Values are Any because JSON deserialization can produce any
        JSON-serializable type.
    """
    # SUBSCOUT_DATA_DIR wins so tests can point at a temporary directory
    data_dir_env = os.environ.get("SUBSCOUT_DATA_DIR", "")
    if data_dir_env and Path(data_dir_env).exists():
        data_dir = Path(data_dir_env)
    else:
        data_dir = _default_data_dir()

    settings_file = data_dir / "config" / "settings.json"
    if not settings_file.exists():
        return {}

    try:
        with settings_file.open("r") as f:
            data = json.load(f)
    except (OSError, ValueError):
        return {}
    if not isinstance(data, dict):
        return {}

    flattened: dict[str, Any] = {}

    # Nested sections: {"host": {"bind_address": ..., "port": ...}, "github": {"token": ...}}
    for section in ("host", "github", "omdb"):
        if isinstance(data.get(section), dict):
            for key, value in data[section].items():
                flattened[f"{section}_{key}"] = value

    for key, value in data.items():
        if key in ("host", "github", "omdb") or key in _NON_SETTINGS_SECTIONS:
            continue
        flattened[key] = value

    # Convert keys to lowercase to match field names
    return {k.lower(): v for k, v in flattened.items()}


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from:
    1. JSON file (settings.json in config directory) - lowest priority
    2. .env file
    3. Environment variables - highest priority (override JSON/.env)

    All settings are prefixed with SUBSCOUT_ (e.g., SUBSCOUT_ENV=production).

    See: https://docs.pydantic.dev/latest/concepts/pydantic_settings/
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SUBSCOUT_",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources - JSON file lowest, init settings highest.

        Priority (lowest to highest):
        1. JSON file (settings.json)
        2. .env file
        3. Environment variables
        4. Init settings (values passed to Settings()) - highest priority
        """
        # Earlier sources win. json_config_settings_source is a plain callable
        # returning a dict, which pydantic-settings accepts at runtime
        return (  # type: ignore[return-value]
            init_settings,
            env_settings,
            dotenv_settings,
            json_config_settings_source,
        )

    # Application
    env: Literal["development", "production", "testing"] = Field(
        default="development",
        description="Application environment (development, production, testing)",
    )

    # Host settings
    host_bind_address: str = Field(
        default="127.0.0.1",
        description="Host address to bind the server to",
    )

    host_port: int = Field(
        default=7000,
        ge=1,
        le=65535,
        description="Port number to bind the server to",
    )

    host_base_url: str = Field(
        default="",
        description="Base URL path for reverse proxy setups (e.g., /subscout)",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    data_dir: Path = Field(
        default_factory=_default_data_dir,
        description="Base directory for all application data (config, cache, logs)",
    )

    # GitHub listing provider
    github_api_url: str = Field(
        default="https://api.github.com",
        description="GitHub REST API base URL",
    )

    github_token: str | None = Field(
        default=None,
        description="Optional GitHub token (raises the anonymous rate limit)",
    )

    # OMDb metadata provider
    omdb_api_url: str = Field(
        default="https://www.omdbapi.com/",
        description="OMDb API endpoint",
    )

    omdb_api_key: str = Field(
        default="trilogy",
        description="OMDb API key",
    )

    http_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Timeout for outbound HTTP calls",
    )

    # Metadata cache
    metadata_cache_ttl_seconds: int = Field(
        default=86400,
        ge=0,
        description="Lifetime of cached metadata lookups in seconds (0 = never expire)",
    )

    metadata_cache_max_entries: int = Field(
        default=1000,
        ge=1,
        description="Maximum number of cached metadata lookups",
    )

    # Used when a request carries no add-on configuration
    default_github_repo: str | None = Field(
        default=None,
        description="Fallback repository (owner/repo) for unconfigured requests",
    )

    default_github_path: str = Field(
        default="",
        description="Fallback path inside the repository",
    )

    addon_version: str = Field(
        default="1.0.0",
        description="Version reported in the add-on manifest",
    )

    # Subdirectories under data_dir
    @property
    def config_dir(self) -> Path:
        """Directory for configuration files (settings.json, etc.)."""
        return self.data_dir / "config"

    @property
    def logs_dir(self) -> Path:
        """Directory for log files (if file logging is enabled)."""
        return self.data_dir / "logs"

    @property
    def is_debug(self) -> bool:
        """Check if running in debug/development mode."""
        return self.env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.env == "testing"

    def model_post_init(self, __context: object) -> None:
        """Post-initialization: create data directories if they don't exist."""
        self.data_dir = self.data_dir.resolve()

        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir.mkdir(parents=True, exist_ok=True)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the cached settings instance.

    Creates and caches the settings instance on first call.
    Subsequent calls return the cached instance.

    The cache is cleared when reload_settings() is called.

    Returns:
        Settings instance
    """
    return Settings()


def reload_settings() -> Settings:
    """Reload settings from all sources (JSON, .env, env vars).

    Clears the cache and creates a new Settings instance.
    Useful for testing or when settings change.

    Returns:
        New Settings instance
    """
    get_settings.cache_clear()
    return get_settings()
