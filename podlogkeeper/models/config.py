"""Configuration data structures.

Every section is frozen: the configuration is built once at process entry
and handed to the components that need it.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class WatchConfig:
    """Which pods are watched."""

    namespace: str = "default"
    label_selector: str = "app=arangodb"
    # Accepted for compatibility with existing deployments; never applied.
    deployment: str = ""


@dataclass(frozen=True)
class StorageConfig:
    """Where captured logs are written."""

    log_directory: str = "logs"


@dataclass(frozen=True)
class CaptureConfig:
    """Log capture behaviour."""

    container: str = ""
    timeout_seconds: int = 0


@dataclass(frozen=True)
class APIConfig:
    """Log listing API configuration."""

    enabled: bool = True
    port: int = 8080


@dataclass(frozen=True)
class LogConfig:
    """Logging configuration."""

    level: str = "info"
    format: str = "json"


@dataclass(frozen=True)
class KeeperConfig:
    """Top-level podlogkeeper configuration."""

    watch: WatchConfig = field(default_factory=WatchConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    capture: CaptureConfig = field(default_factory=CaptureConfig)
    api: APIConfig = field(default_factory=APIConfig)
    log: LogConfig = field(default_factory=LogConfig)
