"""
pushbullet_cli.utils - Utility module

Common utilities including logging configuration and path resolution.
"""

from pushbullet_cli.utils.paths import (
    CONFIG_FILE_NAME,
    DEFAULT_CONFIG_DIR,
    resolve_config_dir,
)

__all__ = ["resolve_config_dir", "DEFAULT_CONFIG_DIR", "CONFIG_FILE_NAME"]
