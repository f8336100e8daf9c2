"""Application settings powered by Pydantic BaseSettings."""

from datetime import timedelta
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from flickrate.config.constants import DEFAULT_CACHE_FILE, DEFAULT_CONFIG_FILE, ENV_PREFIX


class AppSettings(BaseSettings):
    """Process-level settings, overridable through ``FLICKRATE_*`` variables."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    config_path: Path = Field(default_factory=lambda: Path.home() / DEFAULT_CONFIG_FILE)
    cache_path: Path = Field(default_factory=lambda: Path.home() / DEFAULT_CACHE_FILE)
    cache_ttl_seconds: float = Field(default=3600.0, gt=0)
    http_timeout_seconds: float = Field(default=30.0, gt=0)
    verifier_timeout_seconds: float = Field(default=300.0, gt=0)
    workers: int = Field(default=20, ge=1)

    @property
    def cache_ttl(self) -> timedelta:
        """Get the cache freshness window."""
        return timedelta(seconds=self.cache_ttl_seconds)


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
