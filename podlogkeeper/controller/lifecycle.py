"""Pod lifecycle controller.

Decides, from one pod snapshot alone, whether to attach the finalizer,
capture the log or release the finalizer.  Nothing is remembered between
events; a failed step is retried when the next event for the pod arrives.

    active (Pending/Running/Unknown), no deletion -> ensure finalizer
    terminal, finalizer present                   -> capture, then release
    terminal, finalizer absent                    -> nothing (already captured)
    deletion requested, finalizer present         -> release, whatever happened above
"""

from __future__ import annotations

from typing import Any

from podlogkeeper.controller.capture import LogCapture
from podlogkeeper.controller.errors import CaptureError, MutationError
from podlogkeeper.controller.finalizer import FinalizerGuard
from podlogkeeper.models.pods import deletion_requested, is_terminal, pod_name, pod_phase
from podlogkeeper.observability.logging import get_logger

_log = get_logger("controller.lifecycle")


class PodLifecycleController:
    """Runs the finalizer state machine for one pod snapshot at a time."""

    def __init__(self, guard: FinalizerGuard, capture: LogCapture) -> None:
        self._guard = guard
        self._capture = capture

    async def handle(self, pod: Any) -> None:
        """Process an ADDED or MODIFIED snapshot of *pod*.

        Failures of the inspection step are logged, never raised, and never
        keep a pod that is being deleted from losing the marker.
        """
        name = pod_name(pod)
        try:
            await self._inspect(pod)
        except CaptureError as exc:
            _log.error("pod_inspection_failed", pod=name, phase=pod_phase(pod), error=str(exc))
        except MutationError as exc:
            _log.error("finalizer_update_failed", pod=name, phase=pod_phase(pod), error=str(exc))
        except Exception as exc:  # noqa: BLE001
            _log.error("pod_inspection_failed", pod=name, phase=pod_phase(pod), error=repr(exc))

        if deletion_requested(pod) and self._guard.has_marker(pod):
            try:
                await self._guard.remove_marker(pod)
            except MutationError as exc:
                _log.error("finalizer_release_failed", pod=name, error=str(exc))
            else:
                _log.info("deletion_unblocked", pod=name, phase=pod_phase(pod))

    async def _inspect(self, pod: Any) -> None:
        if is_terminal(pod):
            if not self._guard.has_marker(pod):
                return
            await self._capture.capture(pod)
            await self._guard.remove_marker(pod)
        elif not deletion_requested(pod):
            await self._guard.ensure_marker(pod)
