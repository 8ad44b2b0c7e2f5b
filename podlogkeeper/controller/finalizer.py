"""Finalizer guard: attach and release the log capture finalizer.

Updates are last-write-wins against the finalizer list in the snapshot at
hand; there is no retry on conflict.  A rejected update leaves the snapshot
untouched so later checks in the same event still see the cluster's view.
"""

from __future__ import annotations

from typing import Any

from podlogkeeper.cluster.base import ClusterClient, ClusterError
from podlogkeeper.controller.errors import MutationError
from podlogkeeper.models.pods import FINALIZER_NAME, finalizers, pod_name
from podlogkeeper.observability.logging import get_logger

_log = get_logger("controller.finalizer")


def has_marker(pod: Any, marker: str = FINALIZER_NAME) -> bool:
    """True iff *marker* is one of the pod's finalizers."""
    return marker in finalizers(pod)


class FinalizerGuard:
    """Adds and removes the log capture finalizer on pods."""

    def __init__(self, cluster: ClusterClient, marker: str = FINALIZER_NAME) -> None:
        self._cluster = cluster
        self._marker = marker

    @property
    def marker(self) -> str:
        return self._marker

    def has_marker(self, pod: Any) -> bool:
        return has_marker(pod, self._marker)

    async def ensure_marker(self, pod: Any) -> bool:
        """Attach the marker unless present.

        Returns True when the cluster was updated, False for a no-op.

        Raises:
            MutationError: if the cluster rejects the update.
        """
        if self.has_marker(pod):
            return False
        await self._update(pod, finalizers(pod) + [self._marker])
        _log.info("finalizer_added", pod=pod_name(pod), namespace=pod.metadata.namespace)
        return True

    async def remove_marker(self, pod: Any) -> bool:
        """Release the marker if present, keeping the order of other finalizers.

        Returns True when the cluster was updated, False for a no-op.

        Raises:
            MutationError: if the cluster rejects the update.
        """
        if not self.has_marker(pod):
            return False
        await self._update(pod, [f for f in finalizers(pod) if f != self._marker])
        _log.info("finalizer_released", pod=pod_name(pod), namespace=pod.metadata.namespace)
        return True

    async def _update(self, pod: Any, new_finalizers: list[str]) -> None:
        previous = pod.metadata.finalizers
        pod.metadata.finalizers = new_finalizers
        try:
            accepted = await self._cluster.replace_pod(pod)
        except ClusterError as exc:
            pod.metadata.finalizers = previous
            raise MutationError(pod_name(pod), exc) from exc
        # Follow the accepted object so a second update in this event is not stale.
        accepted_meta = getattr(accepted, "metadata", None)
        if accepted_meta is not None and accepted_meta.resource_version:
            pod.metadata.resource_version = accepted_meta.resource_version
