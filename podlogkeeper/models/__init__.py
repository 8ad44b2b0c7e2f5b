"""Core data structures for podlogkeeper."""

from podlogkeeper.models.config import (
    APIConfig,
    CaptureConfig,
    KeeperConfig,
    LogConfig,
    StorageConfig,
    WatchConfig,
)
from podlogkeeper.models.pods import (
    FINALIZER_NAME,
    TERMINAL_PHASES,
    PodPhase,
    WatchEvent,
    WatchEventType,
)

__all__ = [
    "APIConfig",
    "CaptureConfig",
    "FINALIZER_NAME",
    "KeeperConfig",
    "LogConfig",
    "PodPhase",
    "StorageConfig",
    "TERMINAL_PHASES",
    "WatchConfig",
    "WatchEvent",
    "WatchEventType",
]
