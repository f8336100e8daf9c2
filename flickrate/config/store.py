"""Load and save the persisted user configuration."""

import os
from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from flickrate.config.constants import COMPONENT_CONFIG, CONFIG_FILE_MODE
from flickrate.config.models import UserConfig
from flickrate.errors import ConfigError


logger = structlog.get_logger()


class ConfigStore:
    """YAML-backed storage of a UserConfig.

    JSON is a subset of YAML, so configuration files written by earlier
    releases load unchanged.
    """

    def __init__(self, path: Path, run_id: str = "") -> None:
        """Initialize the store.

        Args:
            path: Configuration file location.
            run_id: Run identifier for logging.
        """
        self._path = path
        self._log = logger.bind(component=COMPONENT_CONFIG, run_id=run_id)

    @property
    def path(self) -> Path:
        """Get the configuration file location."""
        return self._path

    def load(self) -> UserConfig:
        """Read the configuration.

        Returns:
            The stored configuration, or an empty one if the file is missing.

        Raises:
            ConfigError: If the file cannot be read, parsed or validated.
        """
        if not self._path.exists():
            self._log.info("config_missing", path=str(self._path))
            return UserConfig()

        try:
            data = yaml.safe_load(self._path.read_text(encoding="utf-8")) or {}
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            msg = f"Cannot read configuration {self._path}: {e}"
            raise ConfigError(msg) from e

        if not isinstance(data, dict):
            msg = f"Configuration {self._path} must be a mapping"
            raise ConfigError(msg)

        try:
            config = UserConfig.model_validate(data)
        except ValidationError as e:
            msg = f"Invalid configuration {self._path}: {e.error_count()} errors"
            raise ConfigError(msg) from e

        self._log.debug(
            "config_loaded",
            path=str(self._path),
            has_user=bool(config.auth_user),
            has_token=bool(config.oauth_token_secret),
        )
        return config

    def save(self, config: UserConfig) -> None:
        """Write the configuration atomically, readable by the owner only.

        Args:
            config: Configuration to persist.

        Raises:
            ConfigError: If the file cannot be written.
        """
        content = yaml.safe_dump(
            config.model_dump(by_alias=True),
            default_flow_style=False,
            sort_keys=False,
        )

        temp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(temp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, CONFIG_FILE_MODE)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            temp_path.chmod(CONFIG_FILE_MODE)
            temp_path.replace(self._path)
        except OSError as e:
            msg = f"Cannot write configuration {self._path}: {e}"
            raise ConfigError(msg) from e

        self._log.info("config_saved", path=str(self._path))
