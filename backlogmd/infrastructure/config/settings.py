"""Provides functions for loading and accessing configuration settings.

Supports loading from a YAML file (~/.backlogmd/config.yaml), a .env file
and environment variables, in increasing order of priority.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import load_dotenv

from backlogmd.domain.errors import ConfigurationError
from backlogmd.infrastructure.backlog.http_client import DEFAULT_TIMEOUT_SECONDS
from backlogmd.infrastructure.resilience.api_retry import (
    DEFAULT_DELAY_SECONDS, DEFAULT_MAX_RETRIES, RetryPolicy,
)

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".backlogmd"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"

# Dotted config key -> environment variable
ENV_VARS: Dict[str, str] = {
    "backlog.host": "BACKLOG_HOST",
    "backlog.api_key": "BACKLOG_API_KEY",
    "backlog.timeout_seconds": "BACKLOG_TIMEOUT_SECONDS",
    "retry.max_retries": "BACKLOG_RETRY_MAX_RETRIES",
    "retry.delay_seconds": "BACKLOG_RETRY_DELAY_SECONDS",
    "logging.level": "BACKLOG_LOG_LEVEL",
    "logging.file": "BACKLOG_LOG_FILE",
}

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}
_loaded = False


@dataclass(frozen=True)
class BacklogConfig:
    """Connection settings for a Backlog space."""
    host: str
    api_key: str
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def __repr__(self) -> str:
        return f"BacklogConfig(host={self.host!r}, api_key='***', timeout_seconds={self.timeout_seconds})"


def _flatten(data: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flattens nested mappings into dotted keys ({'a': {'b': 1}} -> {'a.b': 1})."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, Mapping):
            flat.update(_flatten(value, f"{dotted}."))
        else:
            flat[dotted] = value
    return flat


def load_configuration(config_file: Path = DEFAULT_CONFIG_FILE, env_file: Optional[Path] = None, force: bool = False) -> None:
    """Loads configuration from the YAML file and .env file.

    Environment variables are read lazily by get_config and take precedence
    over both.

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
        force: Reload even if configuration was already loaded.
    """
    global _config, _loaded
    if _loaded and not force:
        logger.debug("Configuration already loaded.")
        return

    _config = {}

    # 1. YAML file (lowest priority)
    if config_file.exists():
        with open(config_file, "r", encoding="utf-8") as f:
            try:
                yaml_config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Failed to parse YAML config {config_file}: {e}") from e
        if isinstance(yaml_config, dict):
            _config.update(_flatten(yaml_config))
            logger.info(f"Loaded configuration from YAML: {config_file}")
        elif yaml_config is not None:
            logger.warning(f"YAML config file {config_file} did not contain a dictionary.")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. .env file; override=False keeps real environment variables on top
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path and load_dotenv(dotenv_path=dotenv_path, override=False):
        logger.info(f"Loaded environment variables from: {dotenv_path}")

    _loaded = True


def get_config(key: str, default: Any = None) -> Any:
    """Gets a configuration value by dotted key.

    Priority:
    1. Test configuration
    2. Environment variable (see ENV_VARS)
    3. YAML config
    4. Default value
    """
    if key in _test_config:
        return _test_config[key]

    env_var = ENV_VARS.get(key)
    if env_var and env_var in os.environ:
        return os.environ[env_var]

    if key in _config:
        return _config[key]

    return default


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None


def _as_number(key: str, value: Any, kind: type) -> Any:
    try:
        return kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Config '{key}' must be a {kind.__name__}, got {value!r}") from e


# --- Convenience Functions ---

def get_backlog_config(host: Optional[str] = None, api_key: Optional[str] = None) -> BacklogConfig:
    """Builds the Backlog connection settings, letting explicit arguments win.

    Raises:
        ConfigurationError: If host or API key is missing.
    """
    effective_host = host or get_config("backlog.host")
    effective_key = api_key or get_config("backlog.api_key")
    if not effective_host:
        raise ConfigurationError("Backlog host not configured (set BACKLOG_HOST or backlog.host).")
    if not effective_key:
        raise ConfigurationError("Backlog API key not configured (set BACKLOG_API_KEY or backlog.api_key).")

    timeout = _as_number(
        "backlog.timeout_seconds", get_config("backlog.timeout_seconds", DEFAULT_TIMEOUT_SECONDS), float
    )
    return BacklogConfig(host=str(effective_host), api_key=str(effective_key), timeout_seconds=timeout)


def get_retry_policy() -> RetryPolicy:
    """Builds the retry policy from configuration."""
    return RetryPolicy(
        max_retries=_as_number("retry.max_retries", get_config("retry.max_retries", DEFAULT_MAX_RETRIES), int),
        delay_seconds=_as_number("retry.delay_seconds", get_config("retry.delay_seconds", DEFAULT_DELAY_SECONDS), float),
    )


def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """Sets configuration values that override every other source."""
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration keys: {sorted(config_dict)}")


def clear_test_config() -> None:
    """Clears all testing configuration values."""
    _test_config.clear()
