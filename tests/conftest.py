"""Shared fixtures for podlogkeeper tests.

Provides pod factories and an in-memory ClusterClient so the controller,
dispatcher and application can be exercised without a real cluster.
"""

from __future__ import annotations

import asyncio
import copy
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

import pytest
from kubernetes_asyncio.client import (  # type: ignore[import-untyped]
    V1Container,
    V1ObjectMeta,
    V1Pod,
    V1PodSpec,
    V1PodStatus,
)

from podlogkeeper.cluster.base import ClusterClient, ClusterError
from podlogkeeper.models.pods import FINALIZER_NAME, WatchEvent, WatchEventType

CREATED = datetime(2024, 1, 15, 10, 30, 0, tzinfo=UTC)
CREATED_STR = "2024-01-15T10:30:00Z"
DELETED = datetime(2024, 1, 15, 11, 0, 0, tzinfo=UTC)


# ---------------------------------------------------------------------------
# Pod factories
# ---------------------------------------------------------------------------


def make_pod(
    name: str = "p1",
    phase: str | None = "Pending",
    finalizers: list[str] | None = None,
    deleted: bool = False,
    namespace: str = "default",
    created: datetime | None = CREATED,
    containers: list[str] | None = None,
    resource_version: str = "100",
) -> V1Pod:
    """Create a V1Pod snapshot as the watch stream would deliver it."""
    return V1Pod(
        metadata=V1ObjectMeta(
            name=name,
            namespace=namespace,
            finalizers=finalizers,
            deletion_timestamp=DELETED if deleted else None,
            creation_timestamp=created,
            resource_version=resource_version,
            labels={"app": "arangodb"},
        ),
        spec=V1PodSpec(containers=[V1Container(name=c) for c in (containers or ["server"])]),
        status=V1PodStatus(phase=phase),
    )


def marked(**kwargs: Any) -> V1Pod:
    """A pod that already carries the log capture finalizer."""
    return make_pod(finalizers=[FINALIZER_NAME], **kwargs)


def event(pod: Any, type_: WatchEventType | str = WatchEventType.MODIFIED) -> WatchEvent:
    return WatchEvent(type=type_, object=pod)


# ---------------------------------------------------------------------------
# Fake cluster
# ---------------------------------------------------------------------------


class FakeClusterClient(ClusterClient):
    """In-memory ClusterClient recording every request.

    Attributes:
        logs:            pod name -> log bytes served by open_log_stream.
        log_open_errors: pod names whose log stream cannot be opened.
        log_break_after: pod name -> byte count after which the stream fails.
        log_delay:       seconds to wait before each chunk.
        reject_updates:  when True every replace_pod raises ClusterError(409).
        events:          events yielded by watch_pods, in order.
        watch_error:     raised by watch_pods after the events are exhausted.
    """

    chunk_size = 4

    def __init__(self) -> None:
        self.logs: dict[str, bytes] = {}
        self.log_open_errors: set[str] = set()
        self.log_break_after: dict[str, int] = {}
        self.log_delay = 0.0
        self.reject_updates = False
        self.events: list[WatchEvent] = []
        self.watch_error: Exception | None = None

        self.updates: list[tuple[str, list[str]]] = []
        self.log_requests: list[tuple[str, str]] = []
        self.watch_calls: list[tuple[str, str]] = []
        self.open_streams = 0
        self.released_streams = 0
        self.closed = False

    async def watch_pods(self, namespace: str, label_selector: str) -> AsyncIterator[WatchEvent]:
        self.watch_calls.append((namespace, label_selector))
        for ev in self.events:
            await asyncio.sleep(0)
            yield ev
        if self.watch_error is not None:
            raise self.watch_error

    async def replace_pod(self, pod: Any) -> Any:
        if self.reject_updates:
            raise ClusterError(f"update of pod {pod.metadata.name} failed: 409 Conflict", status=409)
        self.updates.append((pod.metadata.name, list(pod.metadata.finalizers or [])))
        accepted = copy.deepcopy(pod)
        accepted.metadata.resource_version = str(int(pod.metadata.resource_version or "0") + 1)
        return accepted

    @asynccontextmanager
    async def open_log_stream(self, pod: Any, container: str) -> AsyncIterator[AsyncIterator[bytes]]:
        name = pod.metadata.name
        self.log_requests.append((name, container))
        if name in self.log_open_errors:
            raise ClusterError(f"log stream of pod {name} failed: 400 Bad Request", status=400)
        self.open_streams += 1
        try:
            yield self._chunks(name)
        finally:
            self.open_streams -= 1
            self.released_streams += 1

    async def _chunks(self, name: str) -> AsyncIterator[bytes]:
        data = self.logs.get(name, b"")
        limit = self.log_break_after.get(name)
        for start in range(0, len(data), self.chunk_size):
            if self.log_delay:
                await asyncio.sleep(self.log_delay)
            if limit is not None and start >= limit:
                raise ClusterError(f"log stream of pod {name} failed: connection reset")
            yield data[start : start + self.chunk_size]

    async def close(self) -> None:
        self.closed = True

    def finalizers_of(self, name: str) -> list[str] | None:
        """Finalizers written by the last accepted update of *name*."""
        for pod_name, finalizers in reversed(self.updates):
            if pod_name == name:
                return finalizers
        return None


@pytest.fixture
def cluster() -> FakeClusterClient:
    return FakeClusterClient()
