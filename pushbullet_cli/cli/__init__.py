"""CLI package for pushbullet_cli."""

from pushbullet_cli.cli.formatters import (
    show_chats,
    show_devices,
    show_push,
    show_pushes,
)
from pushbullet_cli.cli.main import (
    PUSH_KINDS,
    build_push,
    cli,
    get_config_dir,
    parse_count,
    validate_url,
)
from pushbullet_cli.utils import DEFAULT_CONFIG_DIR

__all__ = [
    "DEFAULT_CONFIG_DIR",
    "PUSH_KINDS",
    "build_push",
    "cli",
    "get_config_dir",
    "parse_count",
    "show_chats",
    "show_devices",
    "show_push",
    "show_pushes",
    "validate_url",
]
