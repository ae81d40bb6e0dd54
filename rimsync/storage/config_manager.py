"""
Loads the optional INI configuration file and merges it with command-line options.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from rimsync.exceptions import ConfigError
from rimsync.models.config import SyncConfig

log = logging.getLogger(__name__)

_INT_KEYS = {"app_id", "max_attempts", "max_protocol_lines", "poll_attempts"}
_FLOAT_KEYS = {"login_timeout", "download_timeout", "poll_step_seconds"}
_BOOL_KEYS = {"strict_staging"}


class ConfigManager:
    """Handles reading the INI config file and building a validated SyncConfig."""

    def __init__(self, config_file_path: Path | None = None):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser(interpolation=None)

    def load_config(self, cli_options: dict[str, Any] | None = None) -> SyncConfig:
        """
        Loads settings from the INI file (if any), applies CLI overrides, and
        validates the result.

        Args:
            cli_options: A dictionary of options provided via the command line.
                Options whose value is None are ignored.

        Returns:
            A validated SyncConfig object.

        Raises:
            ConfigError: If the config file is missing or unreadable, or
            validation fails.
        """
        settings: dict[str, Any] = {}
        if self.config_file_path is not None:
            settings.update(self._read_file())

        if cli_options:
            settings.update({k: v for k, v in cli_options.items() if v is not None})

        try:
            return SyncConfig(
                **settings,
                config_path=str(self.config_file_path)
                if self.config_file_path
                else None,
            )
        except ValidationError as e:
            raise ConfigError(_format_validation_error(e)) from e

    def _read_file(self) -> dict[str, Any]:
        if not self.config_file_path.is_file():
            raise ConfigError(
                f"Configuration file not found at '{self.config_file_path}'."
            )

        try:
            self._parser.read(self.config_file_path, encoding="utf-8")
        except configparser.Error as e:
            raise ConfigError(f"Error parsing configuration file: {e}") from e

        return self._get_config_as_dict()

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Reads the 'DEFAULT' section of the INI file into a dictionary."""
        section = self._parser["DEFAULT"]
        known_keys = SyncConfig.get_ini_keys()
        values: dict[str, Any] = {}

        for key in section:
            if key not in known_keys:
                log.warning(f"[yellow]Ignoring unknown config key '{key}'.[/yellow]")
                continue
            try:
                if key in _INT_KEYS:
                    values[key] = section.getint(key)
                elif key in _FLOAT_KEYS:
                    values[key] = section.getfloat(key)
                elif key in _BOOL_KEYS:
                    values[key] = section.getboolean(key)
                else:
                    values[key] = section.get(key)
            except ValueError as e:
                raise ConfigError(f"Invalid value for '{key}' in config: {e}") from e

        return values


def _format_validation_error(error: ValidationError) -> str:
    """Turns a pydantic error into one line per offending setting."""
    lines = []
    for detail in error.errors():
        location = ".".join(str(p) for p in detail["loc"]) or "config"
        message = detail["msg"].removeprefix("Value error, ")
        lines.append(f"{location}: {message}")
    return "Configuration validation failed:\n" + "\n".join(lines)
