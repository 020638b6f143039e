"""
Watermark storage for incremental sync.

The watermark is the modification time of the newest item already seen.
Stores expose two operations, load() and save(), so the tracker can run
against the real config file or an in-memory value in tests.
"""

import logging
from pathlib import Path
from typing import Any, Optional, Protocol

from pushbullet_cli.config.loader import (
    LAST_MODIFIED_KEY,
    ConfigError,
    ConfigLoader,
    update_config_value,
)

# Watermark meaning "nothing seen yet"
INITIAL_WATERMARK = 0.0

logger = logging.getLogger(__name__)


class WatermarkStore(Protocol):
    """Persistence interface for the sync watermark."""

    def load(self) -> float: ...

    def save(self, watermark: float) -> None: ...


class MemoryWatermarkStore:
    """Watermark held in memory; nothing survives the process."""

    def __init__(self, watermark: float = INITIAL_WATERMARK):
        self.watermark = watermark
        self.saves = 0

    def load(self) -> float:
        return self.watermark

    def save(self, watermark: float) -> None:
        self.watermark = watermark
        self.saves += 1


class ConfigWatermarkStore:
    """
    Watermark kept under PB_LASTMODIFIED in the YAML configuration file.

    The value is rewritten in place; other keys in the file are preserved.
    There is no locking, so two concurrent invocations may lose an update.

    Args:
        config_path: Configuration file holding the watermark
        config: Contents of that file if the caller already loaded it; the
                file is then not read again
    """

    def __init__(self, config_path: Path, config: Optional[dict[str, Any]] = None):
        self.config_path = Path(config_path)
        self._config = config

    def load(self) -> float:
        if self._config is None:
            self._config = ConfigLoader().load_from_file(self.config_path)
        config = self._config
        value = config.get(LAST_MODIFIED_KEY, INITIAL_WATERMARK)
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(
                f"Invalid {LAST_MODIFIED_KEY} value in {self.config_path}: {value!r}"
            ) from e

    def save(self, watermark: float) -> None:
        # Store whole seconds as an int so the file stays readable
        value = int(watermark) if float(watermark).is_integer() else watermark
        update_config_value(self.config_path, LAST_MODIFIED_KEY, value)
        if self._config is not None:
            self._config = {**self._config, LAST_MODIFIED_KEY: value}
        logger.debug(f"Saved watermark {value} to {self.config_path}")
