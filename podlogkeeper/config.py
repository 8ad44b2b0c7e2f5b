"""Configuration loading from environment variables."""

from __future__ import annotations

import os
import re

from podlogkeeper.models.config import (
    APIConfig,
    CaptureConfig,
    KeeperConfig,
    LogConfig,
    StorageConfig,
    WatchConfig,
)
from podlogkeeper.observability.logging import LOG_FORMATS

# RFC 1123 label, the format Kubernetes requires for namespace names.
_RE_NAMESPACE = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"PODLOGKEEPER_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def validate_namespace(value: str) -> str:
    if len(value) > 63 or not _RE_NAMESPACE.match(value):
        raise ValueError(f"Invalid namespace: {value!r}")
    return value


def validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def validate_log_format(value: str) -> str:
    if value.lower() not in LOG_FORMATS:
        raise ValueError(f"Invalid log format: {value}. Must be one of {LOG_FORMATS}")
    return value.lower()


def validate_log_directory(value: str) -> str:
    if not value.strip():
        raise ValueError("Log directory must not be empty")
    return value


def load_config() -> KeeperConfig:
    """Load configuration from PODLOGKEEPER_* environment variables."""
    return KeeperConfig(
        watch=WatchConfig(
            namespace=validate_namespace(_env("NAMESPACE", "default")),
            label_selector=_env("LABEL_SELECTOR", "app=arangodb"),
            deployment=_env("DEPLOYMENT", ""),
        ),
        storage=StorageConfig(
            log_directory=validate_log_directory(_env("LOG_DIRECTORY", "logs")),
        ),
        capture=CaptureConfig(
            container=_env("CONTAINER", ""),
            timeout_seconds=_env_int("CAPTURE_TIMEOUT", 0, min_val=0, max_val=3600),
        ),
        api=APIConfig(
            enabled=_env_bool("API_ENABLED", True),
            port=_env_int("API_PORT", 8080, min_val=1024, max_val=65535),
        ),
        log=LogConfig(
            level=validate_log_level(_env("LOG_LEVEL", "info")),
            format=validate_log_format(_env("LOG_FORMAT", "json")),
        ),
    )
