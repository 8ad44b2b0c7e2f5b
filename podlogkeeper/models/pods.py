"""Pod and watch event data structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

# Presence of this finalizer means the pod's log still has to be captured.
FINALIZER_NAME = "logs.database.arangodb.com/receive-log"


class PodPhase(StrEnum):
    """Kubernetes pod lifecycle phase."""

    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"


TERMINAL_PHASES = frozenset({PodPhase.SUCCEEDED, PodPhase.FAILED})


class WatchEventType(StrEnum):
    """Type of a watch stream event."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    ERROR = "ERROR"
    BOOKMARK = "BOOKMARK"


@dataclass(frozen=True)
class WatchEvent:
    """One event from the pod watch stream.

    ``object`` is a ``V1Pod`` for pod events and a ``V1Status`` (or raw dict)
    for ERROR events.  ``type`` is kept as the raw string when the server
    sends a type this module does not know.
    """

    type: WatchEventType | str
    object: Any


def pod_name(pod: Any) -> str:
    return pod.metadata.name or ""


def pod_phase(pod: Any) -> str:
    status = pod.status
    if status is None or status.phase is None:
        return ""
    return str(status.phase)


def is_terminal(pod: Any) -> bool:
    """True once the pod reached Succeeded or Failed."""
    return pod_phase(pod) in TERMINAL_PHASES


def deletion_requested(pod: Any) -> bool:
    return pod.metadata.deletion_timestamp is not None


def finalizers(pod: Any) -> list[str]:
    return list(pod.metadata.finalizers or [])
