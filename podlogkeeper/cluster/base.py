"""Cluster client contract.

The controller only talks to the cluster through ``ClusterClient`` so that
tests can drive it with an in-memory implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager
from typing import Any

from podlogkeeper.models.pods import WatchEvent


class ClusterError(Exception):
    """Raised for any failed request against the cluster API."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ClusterClient(ABC):
    """Read, watch and update pods in a cluster."""

    @abstractmethod
    def watch_pods(self, namespace: str, label_selector: str) -> AsyncIterator[WatchEvent]:
        """Yield watch events for matching pods in cluster delivery order.

        The iterator ends when the server closes the stream for good and
        raises ClusterError when the stream fails.
        """

    @abstractmethod
    async def replace_pod(self, pod: Any) -> Any:
        """Write *pod* back to the cluster with whole-object semantics.

        Returns the object as accepted by the cluster.

        Raises:
            ClusterError: if the update is rejected.
        """

    @abstractmethod
    def open_log_stream(self, pod: Any, container: str) -> AbstractAsyncContextManager[AsyncIterator[bytes]]:
        """Open the log of *container* in *pod* as an async byte-chunk iterator.

        Entering the context raises ClusterError when the stream cannot be
        opened; iterating raises ClusterError when it breaks off.  The stream
        is released when the context exits.
        """

    async def close(self) -> None:  # noqa: B027
        """Release connections held by the client."""
