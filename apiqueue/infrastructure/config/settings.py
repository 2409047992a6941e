"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a dedicated
YAML configuration file (~/.apiqueue/config.yaml).
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from apiqueue.infrastructure.resilience.backoff import (
    DEFAULT_BACKOFF_FACTOR, DEFAULT_COOLDOWN_S, DEFAULT_INITIAL_BACKOFF_S,
    DEFAULT_MAX_ATTEMPTS, DEFAULT_MAX_BACKOFF_S, QuotaQueryBackoff,
)

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".apiqueue"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"
ENV_PREFIX = "APIQUEUE_"

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}
_loaded = False

def load_configuration(config_file: Path = DEFAULT_CONFIG_FILE, env_file: Optional[Path] = None) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file
    3. YAML configuration file
    4. Default values passed to get_config

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
    """
    global _config, _loaded
    if _loaded:
        logger.debug("Configuration already loaded.")
        return

    _config = {}

    # 1. YAML file (lowest priority)
    if config_file.exists():
        try:
            with open(config_file, 'r') as f:
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

    # 2. .env file; override=False so real environment variables win
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug("Skipping .env file loading (no file found).")

    _loaded = True
    logger.debug("Configuration loading process completed.")

def _flatten(values: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Turns nested YAML mappings into dotted keys ('queue.max_retries')."""
    flat: Dict[str, Any] = {}
    for key, value in values.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, f"{dotted}."))
        else:
            flat[dotted] = value
    return flat

def env_var_name(key: str) -> str:
    """Environment variable consulted for a dotted key, e.g. APIQUEUE_QUEUE_MAX_RETRIES."""
    return ENV_PREFIX + key.upper().replace('.', '_')

def _convert(value: str) -> Any:
    if value.lower() == 'true':
        return True
    if value.lower() == 'false':
        return False
    try:
        if '.' in value:
            return float(value)
        return int(value)
    except ValueError:
        return value

def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by dotted key.

    Priority:
    1. Test configuration
    2. Environment variable (APIQUEUE_ prefix, dots become underscores)
    3. YAML config
    4. Default value
    """
    if key in _test_config:
        return _test_config[key]

    env_key = env_var_name(key)
    if env_key in os.environ:
        return _convert(os.environ[env_key])

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

# --- Convenience Functions ---

def get_base_url() -> Optional[str]:
    url = get_config('api.base_url')
    return str(url) if url is not None else None

def get_api_token() -> Optional[str]:
    token = get_config('api.token')
    return str(token) if token is not None else None

def get_items_path() -> str:
    return str(get_config('api.items_path', '/items'))

def get_rate_limit_path() -> str:
    return str(get_config('api.rate_limit_path', '/rate_limit'))

def get_timeout() -> float:
    return float(get_config('api.timeout', 30.0))

def get_max_retries() -> Optional[int]:
    """Resubmission limit for quota-exceeded failures; 'none' or a negative value disables it."""
    value = get_config('queue.max_retries', 10)
    if value is None or (isinstance(value, str) and value.lower() == 'none'):
        return None
    value = int(value)
    return None if value < 0 else value

def get_quota_backoff() -> QuotaQueryBackoff:
    """Builds the quota-query backoff policy from configuration."""
    return QuotaQueryBackoff(
        max_attempts=int(get_config('quota.max_attempts', DEFAULT_MAX_ATTEMPTS)),
        initial_backoff_s=float(get_config('quota.initial_backoff', DEFAULT_INITIAL_BACKOFF_S)),
        backoff_factor=float(get_config('quota.backoff_factor', DEFAULT_BACKOFF_FACTOR)),
        max_backoff_s=float(get_config('quota.max_backoff', DEFAULT_MAX_BACKOFF_S)),
        cooldown_s=float(get_config('quota.cooldown', DEFAULT_COOLDOWN_S)),
    )

def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """
    Set configuration values for testing purposes.
    These values will override any existing configuration.
    """
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration: {config_dict}")

def clear_test_config() -> None:
    """Clear all testing configuration values."""
    _test_config.clear()
    logger.debug("Cleared testing configuration")
