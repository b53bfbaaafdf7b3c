"""Configuration manager with YAML and environment override support."""

import logging
import os
from pathlib import Path
from typing import Dict, Any, Optional, Union

import yaml

from . import defaults

logger = logging.getLogger(__name__)


class Config:
    """Configuration for the multiplier.

    Precedence, lowest first: built-in defaults, YAML file, environment
    variables. Process units inherit the environment of their parent, so
    a whole recursion tree shares one configuration.
    """

    def __init__(self, config_file: Optional[Union[str, Path]] = None,
                 environ: Optional[Dict[str, str]] = None):
        self.environ = os.environ if environ is None else environ
        self.settings = self.load_defaults()
        self.config_file: Optional[Path] = None

        if config_file is None:
            config_file = self._find_config_file()
        elif not isinstance(config_file, Path):
            config_file = Path(config_file)

        if config_file is not None:
            if not config_file.is_file():
                raise FileNotFoundError(f"config file not found: {config_file}")
            self._load_yaml_config(config_file)
            self.config_file = config_file
            logger.debug(f"Loaded configuration from {config_file}")

        self._apply_environment()
        self._validate()

    def _find_config_file(self) -> Optional[Path]:
        """Find intmul.yml in the usual locations."""
        explicit = self.environ.get(defaults.ENV_CONFIG_FILE)
        if explicit:
            return Path(explicit)

        potential_locations = [
            Path.cwd() / defaults.CONFIG_FILE_NAME,
            defaults.USER_CONFIG_DIR / defaults.CONFIG_FILE_NAME,
        ]

        for location in potential_locations:
            if location.exists() and location.is_file():
                return location

        return None

    def load_defaults(self) -> Dict[str, Any]:
        return {
            'workers': defaults.WORKERS.copy(),
            'logging': defaults.LOGGING.copy(),
        }

    def _load_yaml_config(self, config_file: Path):
        """Load and merge configuration from a YAML file."""
        with open(config_file, 'r') as file:
            yaml_config = yaml.safe_load(file)
        if yaml_config:
            if not isinstance(yaml_config, dict):
                raise ValueError(f"{config_file}: top level must be a mapping")
            self._deep_merge(self.settings, yaml_config)

    def _deep_merge(self, base: dict, override: dict):
        """Deep merge override into base dictionary."""
        for key, value in override.items():
            if isinstance(value, dict) and key in base and isinstance(base[key], dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _apply_environment(self):
        backend = self.environ.get(defaults.ENV_BACKEND)
        if backend:
            self.settings['workers']['backend'] = backend.lower()

        level = self.environ.get(defaults.ENV_LOG_LEVEL)
        if level:
            self.settings['logging']['level'] = level.upper()

    def _validate(self):
        backend = self.get('workers.backend')
        if backend not in defaults.BACKENDS:
            raise ValueError(
                f"workers.backend must be one of {', '.join(defaults.BACKENDS)}, got {backend!r}"
            )

        size = self.get('workers.initial_buffer_size')
        if not isinstance(size, int) or size <= 0:
            raise ValueError("'workers.initial_buffer_size' must be a positive integer")

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation."""
        value = self.settings
        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def set(self, key: str, value: Any):
        """Set a configuration value using dot notation."""
        keys = key.split(".")
        target = self.settings
        for k in keys[:-1]:
            target = target.setdefault(k, {})
        target[keys[-1]] = value

    @property
    def backend(self) -> str:
        return self.settings['workers']['backend']
