"""
pushbullet_cli.sync - Incremental sync and target resolution

Contains the watermark-based sync tracker, watermark stores and the
device/contact resolver.
"""

from pushbullet_cli.sync.resolver import (
    ResolvedTarget,
    resolve_device,
    resolve_push_target,
)
from pushbullet_cli.sync.tracker import SyncResult, SyncTracker
from pushbullet_cli.sync.watermark import (
    ConfigWatermarkStore,
    MemoryWatermarkStore,
    WatermarkStore,
)

__all__ = [
    "ConfigWatermarkStore",
    "MemoryWatermarkStore",
    "ResolvedTarget",
    "SyncResult",
    "SyncTracker",
    "WatermarkStore",
    "resolve_device",
    "resolve_push_target",
]
