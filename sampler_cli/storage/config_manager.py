"""
Manages loading, validation, and migration of the INI configuration file.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from rich.markup import escape

from sampler_cli.exceptions import ConfigurationError
from sampler_cli.models.config import ServiceConfig

log = logging.getLogger(__name__)


class ConfigManager:
    """Handles all operations related to the application's INI config file."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser()

    def load_config(self, cli_options: dict[str, Any] | None = None) -> ServiceConfig:
        """
        Loads configuration from the INI file, applies CLI overrides, and validates it.

        A missing file is not an error; the built-in defaults are used instead.

        Args:
            cli_options: A dictionary of options provided via the command line.

        Returns:
            A validated ServiceConfig object.

        Raises:
            ConfigurationError: If the config file is unreadable or validation fails.
        """
        config_from_file: dict[str, Any] = {}
        if self.config_file_path.is_file():
            try:
                self._parser.read(self.config_file_path, encoding="utf-8")
                if self._migrate_if_needed():
                    log.info(
                        "[yellow]Configuration file was updated with new default "
                        "values.[/yellow]"
                    )
                config_from_file = self._get_config_as_dict()
            except (configparser.Error, ValueError) as e:
                raise ConfigurationError(
                    f"Error parsing configuration file: {e}"
                ) from e
        else:
            log.debug(
                f"No config file at '{escape(str(self.config_file_path))}', "
                "using defaults."
            )

        if cli_options:
            config_from_file.update(cli_options)

        try:
            config_dir = self.config_file_path.parent
            return ServiceConfig(**config_from_file, config_path=str(config_dir))
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def save_new_config(self, settings: dict[str, Any]) -> None:
        """
        Creates and saves a new configuration file.

        Args:
            settings: A dictionary of settings to save.
        """
        try:
            validated = ServiceConfig(**settings)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

        config = configparser.ConfigParser()
        config["DEFAULT"] = {
            key: self._to_ini(getattr(validated, key))
            for key in sorted(ServiceConfig.get_ini_keys())
        }

        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e

    @staticmethod
    def _to_ini(value: Any) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Reads the 'DEFAULT' section of the INI file into a dictionary."""
        section = self._parser["DEFAULT"]
        defaults = ServiceConfig()
        return {
            "service_url": section.get("service_url", defaults.service_url),
            "timeout": section.getfloat("timeout", defaults.timeout),
            "connect_timeout": section.getfloat(
                "connect_timeout", defaults.connect_timeout
            ),
            "output_dir": section.get("output_dir", defaults.output_dir),
            "json_logs": section.getboolean("json_logs", defaults.json_logs),
            "splice_duration": section.getfloat(
                "splice_duration", defaults.splice_duration
            ),
            "splice_count": section.getint("splice_count", defaults.splice_count),
            "reverse": section.getboolean("reverse", defaults.reverse),
            "target_level": section.getfloat("target_level", defaults.target_level),
            "apply_to_segments": section.getboolean(
                "apply_to_segments", defaults.apply_to_segments
            ),
        }

    def _migrate_if_needed(self) -> bool:
        """Adds missing default values to an existing config file."""
        defaults = ServiceConfig()
        needs_saving = False

        config_section = self._parser["DEFAULT"]

        for key in sorted(ServiceConfig.get_ini_keys()):
            if key not in config_section:
                config_section[key] = self._to_ini(getattr(defaults, key))
                needs_saving = True
                log.debug(
                    f"Migrating config: added missing key '{key}' with "
                    f"value '{escape(config_section[key])}'."
                )

        if needs_saving:
            try:
                with open(self.config_file_path, "w", encoding="utf-8") as f:
                    self._parser.write(f)
            except OSError as e:
                log.error(
                    f"Could not save migrated configuration file: {escape(str(e))}"
                )
                return False

        return needs_saving
