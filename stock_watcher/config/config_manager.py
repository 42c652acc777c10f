"""
Configuration manager for loading and validating watcher settings.
"""

import yaml
import logging
from pathlib import Path
from typing import Optional, Dict, Any, List

from pydantic import ValidationError

from .models import WatcherConfig
from ..exceptions import ConfigurationError


logger = logging.getLogger(__name__)


def parse_symbols(value: str) -> List[str]:
    """Split a comma-separated symbol list (no spaces expected) into symbols."""
    return value.split(",")


class ConfigurationManager:
    """Builds a WatcherConfig from an optional YAML file and CLI overrides."""

    DEFAULT_CONFIG_FILENAME = "stock_watcher.yaml"

    def load_config(
        self,
        config_path: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None
    ) -> WatcherConfig:
        """
        Load settings from YAML, apply overrides and validate the result.

        Args:
            config_path: Path to configuration file. If None, the default file
                is used when it exists.
            overrides: Values from the command line; entries set to None are ignored.

        Returns:
            Validated WatcherConfig instance.
        """
        if config_path is None:
            default_path = Path(self.get_default_config_path())
            settings = self._load_yaml_file(str(default_path)) if default_path.exists() else {}
        else:
            settings = self._load_yaml_file(config_path)

        for key, value in (overrides or {}).items():
            if value is not None:
                settings[key] = value

        return self.validate_config(settings)

    def validate_config(self, config: Dict[str, Any]) -> WatcherConfig:
        """
        Validate configuration dictionary using Pydantic.

        Args:
            config: Configuration dictionary to validate.

        Returns:
            Validated WatcherConfig instance.
        """
        try:
            return WatcherConfig(**config)
        except ValidationError as e:
            logger.debug(f"Configuration validation failed: {e}")
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigurationError(f"Invalid configuration - {problems}") from e

    def get_default_config_path(self) -> str:
        """Get the default configuration file path."""
        return self.DEFAULT_CONFIG_FILENAME

    def _load_yaml_file(self, file_path: str) -> Dict[str, Any]:
        """Load YAML file and return as dictionary."""
        path = Path(file_path)
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {file_path}")

        try:
            with open(path, 'r', encoding='utf-8') as file:
                data = yaml.safe_load(file) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Configuration file is not valid YAML: {file_path}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file must contain a mapping: {file_path}")

        logger.debug(f"Loaded configuration from {path}")
        return data
