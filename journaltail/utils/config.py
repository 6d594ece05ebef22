"""
Layered configuration for journaltail.

Configuration is merged from, in increasing precedence:
- The bundled ``config/default.yaml``
- A user-supplied YAML file
- Environment variables
"""

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "default.yaml"

# Environment variable -> (dotted key, converter)
ENV_OVERRIDES = {
    "JOURNAL_PATH": ("input.journald.path", str),
    "JOURNAL_SEEKTO": ("input.journald.seekto", str),
    "SINCEDB_PATH": ("input.journald.sincedb_path", str),
    "SINCEDB_WRITE_INTERVAL": ("input.journald.sincedb_write_interval", float),
    "LOG_LEVEL": ("logging.level", str),
}


def deep_merge(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge ``override`` into a copy of ``base``.

    Nested mappings are merged key by key; any other value replaces the
    base value outright.
    """
    result = dict(base)
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, Mapping):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class Config:
    """Dot-addressable configuration tree."""

    def __init__(
        self,
        config_file: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
        load_defaults: bool = True,
    ):
        """
        Initialize configuration.

        Args:
            config_file: Path to a YAML configuration file
            environ: Environment to read overrides from (defaults to os.environ)
            load_defaults: Whether to load the bundled default.yaml first
        """
        self._config: Dict[str, Any] = {}

        if load_defaults and DEFAULT_CONFIG_PATH.exists():
            self.load_file(DEFAULT_CONFIG_PATH)

        if config_file:
            self.load_file(config_file)

        self._apply_env_overrides(os.environ if environ is None else environ)

    def load_file(self, config_file) -> None:
        """
        Merge a YAML file into the configuration.

        Args:
            config_file: Path to YAML configuration file

        Raises:
            OSError: If the file cannot be read
            yaml.YAMLError: If the file is not valid YAML
        """
        with open(config_file, "r") as f:
            file_config = yaml.safe_load(f) or {}

        if not isinstance(file_config, Mapping):
            raise ValueError(f"Configuration root must be a mapping: {config_file}")

        self._config = deep_merge(self._config, file_config)

    def _apply_env_overrides(self, environ: Mapping[str, str]) -> None:
        for var, (key, convert) in ENV_OVERRIDES.items():
            if value := environ.get(var):
                self.set(key, convert(value))

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key in dot notation (e.g., "input.journald.seekto")
            default: Default value if key not found

        Returns:
            Configuration value
        """
        value: Any = self._config
        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        """Set configuration value using dot notation."""
        keys = key.split(".")
        config = self._config
        for k in keys[:-1]:
            config = config.setdefault(k, {})
        config[keys[-1]] = value

    def section(self, key: str) -> Dict[str, Any]:
        """Return a copy of a nested section, or an empty dict."""
        value = self.get(key, {})
        return dict(value) if isinstance(value, dict) else {}

    def to_dict(self) -> Dict[str, Any]:
        """Get entire configuration as dictionary."""
        return self._config.copy()


# Global configuration instance
_config: Optional[Config] = None


def get_config(config_file: Optional[str] = None) -> Config:
    """
    Get global configuration instance.

    Args:
        config_file: Optional configuration file path

    Returns:
        Configuration instance
    """
    global _config
    if _config is None:
        _config = Config(config_file)
    return _config


def reset_config() -> None:
    """Reset global configuration (mainly for testing)."""
    global _config
    _config = None
