"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a dedicated
YAML configuration file (~/.randcli/config.yaml).
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from randcli.domain.models.common import (
    DEFAULT_ENDPOINT,
    DEFAULT_MAX_BLOCKING_TIME_MS,
    DEFAULT_POLL_INTERVAL_MS,
    DEFAULT_REQUEST_TIMEOUT_S,
)

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".randcli"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"
ENV_PREFIX = "RANDCLI_"

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}
_loaded = False


def _flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Turns nested YAML mappings into dotted keys ({'api': {'key': x}} -> {'api.key': x})."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, prefix=f"{dotted}."))
        else:
            flat[dotted] = value
    return flat


def load_configuration(config_file: Optional[Path] = None, env_file: Optional[Path] = None) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file
    3. YAML configuration file
    4. Default values passed to get_config

    Args:
        config_file: Path to the YAML configuration file (~/.randcli/config.yaml if None).
        env_file: Path to the .env file (searches upwards from cwd if None).
    """
    global _config, _loaded
    if _loaded:
        logger.debug("Configuration already loaded.")
        return

    _config = {}
    config_file = config_file or DEFAULT_CONFIG_FILE

    # 1. Load from YAML file (Lowest priority)
    if config_file.exists():
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(_flatten(yaml_config))
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a dictionary.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. Load from .env file (Medium priority)
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        # override=False: real environment variables take precedence
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug(".env file not found at or above current directory.")

    # 3. Environment Variables (Highest priority) are handled in get_config

    _loaded = True
    logger.debug("Configuration loading process completed.")


def reset_configuration() -> None:
    """Forgets loaded configuration so the next load reads the sources again."""
    global _config, _loaded
    _config = {}
    _loaded = False


def env_key_for(key: str) -> str:
    """Maps a dotted config key to its environment variable ('api.key' -> 'RANDCLI_API_KEY')."""
    return ENV_PREFIX + key.upper().replace('.', '_')


def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by key.

    Priority:
    1. Test configuration (if in testing mode)
    2. Environment variable
    3. YAML config
    4. Default value

    Args:
        key: The dotted configuration key (e.g. 'client.max_blocking_time_ms')
        default: Default value if the key is not found

    Returns:
        The configuration value. Environment values are returned as strings.
    """
    if key in _test_config:
        return _test_config[key]

    env_key = env_key_for(key)
    if env_key in os.environ:
        return os.environ[env_key]

    if key in _config:
        return _config[key]

    logger.debug(f"Config key '{key}' not found in environment or loaded config. Returning default: {default}")
    return default


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None


def _get_positive_number(key: str, default: float) -> float:
    value = get_config(key, default)
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Config '{key}' must be a number, got {value!r}") from e
    if number < 0:
        raise ValueError(f"Config '{key}' must not be negative, got {number}")
    return number

# --- Convenience Functions ---

def get_api_key() -> Optional[str]:
    """Gets the random.org API key (RANDCLI_API_KEY or api.key in YAML)."""
    key = get_config('api.key')
    return str(key) if key else None


def get_endpoint() -> str:
    return str(get_config('api.endpoint', DEFAULT_ENDPOINT))


def get_max_blocking_time_ms() -> float:
    """Longest advisory wait, in ms, the client accepts before failing."""
    return _get_positive_number('client.max_blocking_time_ms', DEFAULT_MAX_BLOCKING_TIME_MS)


def get_request_timeout_s() -> float:
    timeout = _get_positive_number('client.request_timeout_s', DEFAULT_REQUEST_TIMEOUT_S)
    if timeout == 0:
        raise ValueError("Config 'client.request_timeout_s' must be positive")
    return timeout


def get_poll_interval_ms() -> float:
    interval = _get_positive_number('client.poll_interval_ms', DEFAULT_POLL_INTERVAL_MS)
    if interval == 0:
        raise ValueError("Config 'client.poll_interval_ms' must be positive")
    return interval


def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """
    Set configuration values for testing purposes.
    These values will override any existing configuration.

    Args:
        config_dict: Dictionary of configuration values to set
    """
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration keys: {sorted(config_dict)}")


def clear_test_config() -> None:
    """Clear all testing configuration values."""
    _test_config.clear()
    logger.debug("Cleared testing configuration")
