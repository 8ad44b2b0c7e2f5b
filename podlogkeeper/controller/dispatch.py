"""Event dispatch loop: feeds the pod watch stream to the controller."""

from __future__ import annotations

from typing import Any

from kubernetes_asyncio.client import V1Pod  # type: ignore[import-untyped]

from podlogkeeper.cluster.base import ClusterClient
from podlogkeeper.controller.lifecycle import PodLifecycleController
from podlogkeeper.models.pods import WatchEvent, WatchEventType
from podlogkeeper.observability.logging import event_context, get_logger

_log = get_logger("controller.dispatch")

_HANDLED_TYPES = frozenset({WatchEventType.ADDED, WatchEventType.MODIFIED})


def _status_message(obj: Any) -> str:
    if isinstance(obj, dict):
        return str(obj.get("message", obj))
    message = getattr(obj, "message", None)
    return str(message if message is not None else obj)


class EventDispatcher:
    """Processes watch events one at a time, in delivery order.

    Only ADDED and MODIFIED pod events reach the controller.  An exception
    escaping the controller is logged and the loop moves on to the next
    event.  A failing watch stream propagates out of ``run``.
    """

    def __init__(
        self,
        cluster: ClusterClient,
        controller: PodLifecycleController,
        namespace: str,
        label_selector: str,
    ) -> None:
        self._cluster = cluster
        self._controller = controller
        self._namespace = namespace
        self._label_selector = label_selector
        self._processed = 0

    @property
    def processed(self) -> int:
        """Number of events handed to the controller so far."""
        return self._processed

    async def run(self) -> None:
        """Consume the watch stream until it ends.

        Raises:
            ClusterError: if the watch stream fails.
        """
        _log.info("watch_started", namespace=self._namespace, label_selector=self._label_selector)
        async for event in self._cluster.watch_pods(self._namespace, self._label_selector):
            await self.dispatch(event)
        _log.warning("watch_stream_ended", namespace=self._namespace, processed=self._processed)

    async def dispatch(self, event: WatchEvent) -> None:
        if event.type == WatchEventType.ERROR:
            _log.warning("watch_error_event", detail=_status_message(event.object))
            return

        pod = event.object
        if not isinstance(pod, V1Pod):
            _log.debug("non_pod_event_ignored", event_type=str(event.type))
            return
        if event.type not in _HANDLED_TYPES:
            _log.debug("pod_event_ignored", event_type=str(event.type), pod=pod.metadata.name)
            return

        self._processed += 1
        try:
            with event_context(str(event.type), pod.metadata.resource_version):
                await self._controller.handle(pod)
        except Exception as exc:  # noqa: BLE001
            _log.error(
                "pod_event_failed",
                event_type=str(event.type),
                pod=pod.metadata.name,
                error=str(exc),
            )
