"""Errors raised by the finalizer guard and the log capture."""

from __future__ import annotations


class MutationError(Exception):
    """The cluster rejected a finalizer update."""

    def __init__(self, pod: str, cause: Exception) -> None:
        super().__init__(f"Finalizer update of pod '{pod}' rejected: {cause}")
        self.pod = pod
        self.cause = cause


class CaptureError(Exception):
    """A pod's log could not be copied to storage."""

    def __init__(self, pod: str, cause: Exception) -> None:
        super().__init__(f"Log capture of pod '{pod}' failed: {cause}")
        self.pod = pod
        self.cause = cause
