"""Copy a finished pod's container log to the log directory.

One file per pod, named ``<RFC3339 UTC creation time>_<pod name>.log``.
The file is created or truncated and then written straight from the stream;
an interrupted copy leaves the partial file where it is.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from podlogkeeper.cluster.base import ClusterClient, ClusterError
from podlogkeeper.controller.errors import CaptureError
from podlogkeeper.models.pods import pod_name
from podlogkeeper.observability.logging import get_logger

_log = get_logger("controller.capture")

# Rendering of a missing timestamp, matching the zero time of the API server.
_ZERO_TIME = "0001-01-01T00:00:00Z"


def format_rfc3339(ts: datetime | None) -> str:
    """Render *ts* as second-precision RFC 3339 in UTC (``2024-01-15T10:30:00Z``)."""
    if ts is None:
        return _ZERO_TIME
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    return ts.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def log_filename(pod: Any) -> str:
    """File name for *pod*'s log.  Pods sharing creation time and name share it."""
    return f"{format_rfc3339(pod.metadata.creation_timestamp)}_{pod_name(pod)}.log"


def primary_container(pod: Any) -> str:
    spec = getattr(pod, "spec", None)
    containers = getattr(spec, "containers", None) or []
    return containers[0].name if containers else ""


class LogCapture:
    """Streams pod logs into ``log_directory``.

    Args:
        cluster:         Cluster client used to open log streams.
        log_directory:   Directory that receives one file per pod.
        container:       Container to read.  Empty selects the pod's first
                         declared container.
        timeout_seconds: Upper bound for one capture.  0 disables the bound.
    """

    def __init__(
        self,
        cluster: ClusterClient,
        log_directory: str | Path,
        container: str = "",
        timeout_seconds: float = 0,
    ) -> None:
        self._cluster = cluster
        self._log_directory = Path(log_directory)
        self._container = container
        self._timeout = timeout_seconds

    @property
    def log_directory(self) -> Path:
        return self._log_directory

    def target_path(self, pod: Any) -> Path:
        return self._log_directory / log_filename(pod)

    async def capture(self, pod: Any) -> Path:
        """Copy the pod's log to its target file and return the file path.

        Raises:
            CaptureError: if the stream cannot be opened, the file cannot be
                          written, the copy breaks off or the timeout expires.
        """
        name = pod_name(pod)
        deadline = asyncio.timeout(self._timeout if self._timeout > 0 else None)
        try:
            async with deadline:
                return await self._copy(pod)
        except TimeoutError as exc:
            # Only our own deadline gets the capture-timeout message.
            cause: Exception = exc
            if deadline.expired():
                cause = TimeoutError(f"no end of log within {self._timeout}s")
            raise CaptureError(name, cause) from exc
        except (ClusterError, OSError) as exc:
            raise CaptureError(name, exc) from exc

    async def _copy(self, pod: Any) -> Path:
        name = pod_name(pod)
        path = self.target_path(pod)
        container = self._container or primary_container(pod)

        async with self._cluster.open_log_stream(pod, container) as stream:
            with open(path, "wb") as fh:
                _log.info("log_capture_started", pod=name, container=container, path=str(path))
                written = 0
                async for chunk in stream:
                    fh.write(chunk)
                    written += len(chunk)

        _log.info("log_capture_completed", pod=name, path=str(path), bytes=written)
        return path
