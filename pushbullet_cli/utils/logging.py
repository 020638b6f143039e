"""
Logging setup for pushbullet_cli.

Everything logs under the "pushbullet_cli" logger. Console records go to
stderr so stdout carries only command output; a daily file under the log
directory keeps the DEBUG trail of every run.

Environment overrides:
    PUSHBULLET_DEBUG      "1"/"true"/"yes" forces DEBUG on the console
    PUSHBULLET_LOG_LEVEL  console level name (default WARNING)
    PUSHBULLET_LOG_FILE   explicit log file, or "none" to disable the file
"""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from pushbullet_cli.utils.paths import resolve_config_dir

CONSOLE_FORMAT = "%(levelname)s: %(message)s"
VERBOSE_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
)
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Daily log files are named pushbullet_YYYYMMDD.log
LOG_FILE_PREFIX = "pushbullet_"

ENV_LOG_LEVEL = "PUSHBULLET_LOG_LEVEL"
ENV_DEBUG = "PUSHBULLET_DEBUG"
ENV_LOG_FILE = "PUSHBULLET_LOG_FILE"

ROOT_LOGGER = "pushbullet_cli"

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level and message on a capable terminal."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        fmt: Optional[str] = None,
        datefmt: Optional[str] = None,
        use_colors: bool = True,
    ):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors and self._supports_color()

    @staticmethod
    def _supports_color() -> bool:
        stream = sys.stderr
        if not getattr(stream, "isatty", None) or not stream.isatty():
            return False
        # https://no-color.org/
        if os.environ.get("NO_COLOR"):
            return False
        return os.environ.get("TERM", "") != "dumb"

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors or record.levelname not in self.COLORS:
            return super().format(record)

        # Color a copy; the file handler formats the same record
        colored = logging.makeLogRecord(record.__dict__)
        color = self.COLORS[record.levelname]
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        colored.msg = f"{color}{record.msg}{self.RESET}"
        return super().format(colored)


def get_log_level_from_env() -> int:
    """Console level from PUSHBULLET_DEBUG / PUSHBULLET_LOG_LEVEL."""
    if os.environ.get(ENV_DEBUG, "").lower() in ("1", "true", "yes"):
        return logging.DEBUG
    name = os.environ.get(ENV_LOG_LEVEL, "WARNING").upper()
    return LEVELS.get(name, logging.WARNING)


def get_log_file_path(log_dir: Optional[Path] = None) -> Optional[Path]:
    """
    Return today's log file, or None when file logging is switched off.

    Args:
        log_dir: Directory for log files (default <config dir>/logs)
    """
    override = os.environ.get(ENV_LOG_FILE)
    if override is not None:
        if override.lower() in ("", "none", "disabled"):
            return None
        return Path(override)

    directory = log_dir or resolve_config_dir() / "logs"
    return directory / f"{LOG_FILE_PREFIX}{datetime.now():%Y%m%d}.log"


def setup_logging(
    level: Optional[int] = None,
    verbose: bool = False,
    log_dir: Optional[Path] = None,
    log_file: Optional[Path] = None,
    enable_file_logging: bool = True,
    use_colors: bool = True,
) -> logging.Logger:
    """
    Configure the pushbullet_cli logger.

    Replaces any handlers from an earlier call, so it is safe to run once
    per command invocation.

    Args:
        level: Console level; taken from the environment when None
        verbose: Force DEBUG and the detailed format on the console
        log_dir: Directory for the daily log file
        log_file: Explicit log file, overriding log_dir
        enable_file_logging: Attach the DEBUG file handler
        use_colors: Color console output when the terminal allows it

    Returns:
        The configured pushbullet_cli logger
    """
    if verbose:
        level = logging.DEBUG
    elif level is None:
        level = get_log_level_from_env()

    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()
    logger.propagate = False
    logger.setLevel(logging.DEBUG if enable_file_logging else level)

    console_format = VERBOSE_FORMAT if verbose else CONSOLE_FORMAT
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(
        ColoredFormatter(console_format, DATE_FORMAT)
        if use_colors
        else logging.Formatter(console_format, DATE_FORMAT)
    )
    logger.addHandler(console)

    if not enable_file_logging:
        return logger

    path = log_file or get_log_file_path(log_dir)
    if path is None:
        return logger

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
    except OSError as e:
        logger.warning(f"Could not create log file {path}: {e}")
        return logger

    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(VERBOSE_FORMAT, DATE_FORMAT))
    logger.addHandler(file_handler)
    logger.debug(f"Log file: {path}")
    return logger


def cleanup_old_logs(log_dir: Optional[Path] = None, keep_count: int = 10) -> int:
    """
    Delete all but the keep_count newest daily log files.

    Args:
        log_dir: Directory holding the logs (default <config dir>/logs)
        keep_count: Files to keep; 0 disables cleanup

    Returns:
        Number of files deleted
    """
    if keep_count <= 0:
        return 0

    directory = log_dir or resolve_config_dir() / "logs"
    if not directory.exists():
        return 0

    logs = sorted(
        directory.glob(f"{LOG_FILE_PREFIX}*.log"),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    )

    deleted = 0
    for old in logs[keep_count:]:
        try:
            old.unlink()
        except OSError as e:
            logging.getLogger(ROOT_LOGGER).debug(f"Could not delete {old}: {e}")
            continue
        deleted += 1
    return deleted


def get_logger(name: str) -> logging.Logger:
    """Return a logger inside the pushbullet_cli hierarchy."""
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


__all__ = [
    "ColoredFormatter",
    "cleanup_old_logs",
    "get_log_file_path",
    "get_log_level_from_env",
    "get_logger",
    "setup_logging",
]
