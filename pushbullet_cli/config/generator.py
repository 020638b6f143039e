"""
Configuration file generator for the Pushbullet client.

Provides functionality to generate a default configuration file with
documentation for all available options.
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def generate_default_config() -> str:
    """
    Generate default YAML configuration with all options documented.

    Returns:
        String containing YAML configuration with comments
    """
    return """# Pushbullet CLI Configuration
# ============================
#
# CLI arguments always override these values. The PB_API_KEY environment
# variable overrides the key stored here.

# Access token from https://www.pushbullet.com/#settings/account
# PB_API_KEY: o.xxxxxxxxxxxxxxxxxxxxxxxxxxxxxxxx

# Timestamp of the newest push already seen by `pushbullet pull`.
# Maintained automatically; delete it (or run `pull --reset`) to start over.
# PB_LASTMODIFIED: 0


# Logging Options
# ---------------

# Enable verbose output with detailed logging
# Default: false
# verbose: true

# Directory for log files
# Default: ~/.config/pushbullet/logs
# log_dir: /path/to/logs

# Number of daily log files to keep (0 disables cleanup)
# Default: 10
# log_retention_count: 10


# API Options
# -----------

# Base URL of the Pushbullet API
# Default: https://api.pushbullet.com/v2
# api_url: https://api.pushbullet.com/v2

# Request timeout in seconds
# Default: 30
# api_timeout: 30

# Items requested per page when listing
# Default: 500
# page_limit: 500
"""


def save_config_file(
    config_path: Path, overwrite: bool = False
) -> tuple[bool, str | None]:
    """
    Save default configuration file to specified path.

    Creates parent directories if they don't exist and saves the
    configuration readable by the owner only, since it holds the API key.

    Args:
        config_path: Path where the config file should be saved
        overwrite: If True, overwrite existing file. If False, fail if file exists.

    Returns:
        Tuple of (success, error_message)
    """
    try:
        config_path = config_path.expanduser().resolve()

        if config_path.exists() and not overwrite:
            return (
                False,
                f"Configuration file already exists: {config_path}\n"
                "Use --force to overwrite.",
            )

        config_path.parent.mkdir(parents=True, mode=0o700, exist_ok=True)
        config_path.write_text(generate_default_config(), encoding="utf-8")
        config_path.chmod(0o600)

        logger.info(f"Created configuration file: {config_path}")
        return (True, None)

    except OSError as e:
        error_msg = f"Failed to create configuration file: {e}"
        logger.error(error_msg)
        return (False, error_msg)
