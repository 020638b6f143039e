"""
Configuration loader module for the Pushbullet client.

Provides YAML-based configuration file loading with support for:
- Loading configuration from a given path
- Graceful handling of missing configuration files
- Basic validation of configuration structure
- Rewriting single keys in place (used for the sync watermark)
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml

# Key holding the API access token
API_KEY = "PB_API_KEY"

# Key holding the incremental sync watermark
LAST_MODIFIED_KEY = "PB_LASTMODIFIED"

# Environment variable that overrides the API key from the config file
API_KEY_ENV_VAR = "PB_API_KEY"

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


class ConfigLoader:
    """
    YAML configuration file loader.

    Usage:
        loader = ConfigLoader()
        config = loader.load_from_file(config_path)
        loader.validate(config)
    """

    def load_from_file(self, path: Path | str) -> dict[str, Any]:
        """
        Load configuration from a specific file.

        Returns an empty dict if the file doesn't exist, allowing
        graceful operation with CLI defaults.

        Args:
            path: Path to the configuration file

        Returns:
            Dictionary containing configuration values

        Raises:
            ConfigError: If the configuration file exists but cannot be parsed
        """
        path = Path(path)

        if not path.exists():
            logger.debug(f"Configuration file not found: {path}")
            return {}

        try:
            with open(path, encoding="utf-8") as f:
                config = yaml.safe_load(f)

            if config is None:
                logger.debug(f"Configuration file is empty: {path}")
                return {}

            if not isinstance(config, dict):
                raise ConfigError(
                    f"Configuration file must contain a YAML dictionary, "
                    f"got {type(config).__name__}"
                )

            logger.debug(f"Loaded configuration from {path}")
            return config

        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse YAML configuration file: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read configuration file: {e}") from e

    def validate(self, config: dict[str, Any]) -> None:
        """
        Validate configuration structure and values.

        Unknown keys are allowed so older clients can read newer files.

        Args:
            config: Configuration dictionary to validate

        Raises:
            ConfigError: If configuration is invalid
        """
        if not isinstance(config, dict):
            raise ConfigError(
                f"Configuration must be a dictionary, got {type(config).__name__}"
            )

        valid_keys: dict[str, type[Any] | tuple[type[Any], ...]] = {
            API_KEY: str,
            LAST_MODIFIED_KEY: (int, float),
            "verbose": bool,
            "log_dir": str,
            "log_retention_count": int,
            "api_url": str,
            "api_timeout": (int, float),
            "page_limit": int,
        }

        for key, value in config.items():
            if key not in valid_keys:
                continue
            expected_type = valid_keys[key]
            # bool is an int subclass; reject it for numeric keys
            if isinstance(value, bool) and expected_type is not bool:
                value_ok = False
            else:
                value_ok = isinstance(value, expected_type)
            if not value_ok:
                if isinstance(expected_type, tuple):
                    type_name = " or ".join(t.__name__ for t in expected_type)
                else:
                    type_name = expected_type.__name__
                raise ConfigError(
                    f"Invalid type for '{key}': expected {type_name}, "
                    f"got {type(value).__name__}"
                )

        if LAST_MODIFIED_KEY in config and config[LAST_MODIFIED_KEY] < 0:
            raise ConfigError(
                f"{LAST_MODIFIED_KEY} must be >= 0, got {config[LAST_MODIFIED_KEY]}"
            )

        if "log_retention_count" in config and config["log_retention_count"] < 0:
            raise ConfigError(
                f"log_retention_count must be >= 0, got {config['log_retention_count']}"
            )

        if "page_limit" in config and config["page_limit"] < 1:
            raise ConfigError(f"page_limit must be >= 1, got {config['page_limit']}")

        if "api_timeout" in config and config["api_timeout"] <= 0:
            raise ConfigError(f"api_timeout must be > 0, got {config['api_timeout']}")


def update_config_value(path: Path, key: str, value: Any) -> None:
    """
    Rewrite a single key of a YAML config file in place.

    Other keys are preserved. Comments are not, since the file is re-dumped.

    Args:
        path: Path to the configuration file (created if missing)
        key: Key to set
        value: New value

    Raises:
        ConfigError: If the file cannot be read or written
    """
    config = ConfigLoader().load_from_file(path)
    config[key] = value

    try:
        path.parent.mkdir(parents=True, mode=0o700, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False)
        path.chmod(0o600)
    except OSError as e:
        raise ConfigError(f"Failed to write configuration file: {e}") from e

    logger.debug(f"Updated {key} in {path}")


def get_api_key(config: dict[str, Any]) -> Optional[str]:
    """
    Return the API key, preferring the environment over the config file.

    Args:
        config: Loaded configuration dictionary

    Returns:
        The access token, or None if none is configured
    """
    return os.environ.get(API_KEY_ENV_VAR) or config.get(API_KEY) or None
