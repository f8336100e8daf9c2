"""Process settings and persisted user configuration."""

from flickrate.config.models import UserConfig
from flickrate.config.settings import AppSettings, get_settings
from flickrate.config.store import ConfigStore


__all__ = [
    "AppSettings",
    "ConfigStore",
    "UserConfig",
    "get_settings",
]
