"""
Configuration management for AutoSecScan.

Supports multiple configuration sources in order of priority:
1. Environment variables (highest priority)
2. Global config file (~/.autosecscan/config.yml)
3. Default values (lowest priority)
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_SCAN_TIMEOUT = 300.0
DEFAULT_REQUEST_TIMEOUT = 15.0
DEFAULT_OUTPUT_DIR = "./reports"

ENV_KEYS = (
    "AUTOSECSCAN_TIMEOUT",
    "AUTOSECSCAN_VERBOSE",
    "AUTOSECSCAN_LOG_FILE",
    "AUTOSECSCAN_REQUEST_TIMEOUT",
    "AUTOSECSCAN_OUTPUT_DIR",
)

_TRUTHY = {"1", "true", "yes", "on"}


def global_config_path() -> Path:
    """Return the path of the global config file."""
    return Path.home() / ".autosecscan" / "config.yml"


def load_global_config() -> dict[str, Any]:
    """Load global configuration from ~/.autosecscan/config.yml."""
    config_path = global_config_path()
    if not config_path.exists():
        return {}
    with open(config_path) as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            logger.warning("Ignoring unreadable config file %s: %s", config_path, exc)
            return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config file %s: expected a mapping", config_path)
        return {}
    return data


def get_config(key: str, default: Any = None) -> Any:
    """
    Get configuration value with priority:
    1. Environment variable
    2. Global config file
    3. Default value

    Args:
        key: Configuration key
        default: Default value if not found

    Returns:
        Configuration value or default
    """
    env_value = os.environ.get(key)
    if env_value:
        return env_value

    global_config = load_global_config()
    if key in global_config and global_config[key] is not None:
        return global_config[key]

    return default


def _positive_float(key: str, default: float) -> float:
    value = get_config(key, default)
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid %s=%r, using %s", key, value, default)
        return default
    if number <= 0:
        logger.warning("Non-positive %s=%r, using %s", key, value, default)
        return default
    return number


def get_scan_timeout() -> float:
    """Global scan timeout in seconds (default: 300)."""
    return _positive_float("AUTOSECSCAN_TIMEOUT", DEFAULT_SCAN_TIMEOUT)


def get_request_timeout() -> float:
    """Per-request HTTP timeout in seconds (default: 15)."""
    return _positive_float("AUTOSECSCAN_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT)


def get_verbose() -> bool:
    """Get verbose logging flag."""
    value = get_config("AUTOSECSCAN_VERBOSE", False)
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def get_log_file() -> str | None:
    """Get log file path, if file logging is configured."""
    value = get_config("AUTOSECSCAN_LOG_FILE")
    return str(value) if value else None


def get_output_dir() -> Path:
    """Directory reports are written to (default: ./reports)."""
    return Path(str(get_config("AUTOSECSCAN_OUTPUT_DIR", DEFAULT_OUTPUT_DIR))).expanduser()
