"""Configuration management for mcp-hello."""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from functools import lru_cache

from ..core.exceptions import ConfigurationError


DEFAULT_CONFIG: Dict[str, Any] = {
    "server": {
        "host": "0.0.0.0",
        "port": 8787,
        "sse_path": "/sse",
    },
    "logging": {
        "level": "INFO",
        "format": "text",
        "file": None,
        "max_size": "10MB",
        "backup_count": 3,
    },
}


@lru_cache(maxsize=1)
def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file, layered over built-in defaults.

    Args:
        config_path: Path to config file. If None, uses MCP_HELLO_CONFIG or
            searches the default locations, falling back to the defaults
            when none exists.

    Returns:
        Configuration dictionary

    Raises:
        ConfigurationError: If the config file is invalid or unreadable
    """
    if config_path is None:
        config_path = os.getenv("MCP_HELLO_CONFIG")

    if config_path is None:
        possible_paths = [
            Path("config/settings.yaml"),
            Path("/etc/mcp-hello/settings.yaml"),
            Path.home() / ".mcp-hello" / "settings.yaml",
        ]

        for path in possible_paths:
            if path.exists():
                config_path = str(path)
                break

    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path is not None:
        try:
            with open(config_path, "r") as f:
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}")
        except FileNotFoundError:
            raise ConfigurationError(f"Config file not found: {config_path}")

        if not isinstance(loaded, dict):
            raise ConfigurationError(
                f"Config file must contain a mapping, got {type(loaded).__name__}"
            )
        _merge(config, loaded)

    return _apply_env_overrides(config)


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """Recursively merge override into base in place."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value


def _apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to config."""
    # Later entries win, so MCP_HELLO_PORT beats the generic PORT
    env_mappings = {
        "PORT": ("server", "port"),
        "MCP_HELLO_PORT": ("server", "port"),
        "MCP_HELLO_HOST": ("server", "host"),
        "MCP_HELLO_LOG_LEVEL": ("logging", "level"),
        "MCP_HELLO_LOG_FORMAT": ("logging", "format"),
    }

    for env_var, config_path in env_mappings.items():
        value = os.getenv(env_var)
        if value is not None:
            current = config
            for key in config_path[:-1]:
                current = current.setdefault(key, {})

            if "port" in config_path[-1].lower():
                try:
                    value = int(value)
                except ValueError:
                    continue

            current[config_path[-1]] = value

    return config


def get_config_value(path: str, default: Any = None) -> Any:
    """
    Get a specific configuration value by path.

    Args:
        path: Dot-separated path (e.g., 'server.port')
        default: Default value if path not found

    Returns:
        Configuration value or default
    """
    config = load_config()

    try:
        value = config
        for key in path.split("."):
            value = value[key]
        return value
    except (KeyError, TypeError):
        return default


class Config:
    """Configuration wrapper with attribute access."""

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None):
        if config_dict is None:
            config_dict = load_config()
        self._config = config_dict

    def __getattr__(self, name: str) -> Any:
        if name in self._config:
            value = self._config[name]
            if isinstance(value, dict):
                return Config(value)
            return value
        raise AttributeError(f"Config has no attribute '{name}'")
