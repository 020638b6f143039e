"""
pushbullet_cli.config - Configuration management module

Contains configuration loading, validation, and default settings.
"""

from pushbullet_cli.config.generator import generate_default_config, save_config_file
from pushbullet_cli.config.loader import (
    API_KEY,
    LAST_MODIFIED_KEY,
    ConfigError,
    ConfigLoader,
    get_api_key,
    update_config_value,
)

__all__ = [
    "API_KEY",
    "LAST_MODIFIED_KEY",
    "ConfigError",
    "ConfigLoader",
    "generate_default_config",
    "get_api_key",
    "save_config_file",
    "update_config_value",
]
