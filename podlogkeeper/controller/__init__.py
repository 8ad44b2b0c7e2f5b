"""Finalizer lifecycle controller for podlogkeeper.

Submodules
----------
finalizer -- FinalizerGuard: attach / release the log capture finalizer.
capture   -- LogCapture: stream a container log into the log directory.
lifecycle -- PodLifecycleController: per-snapshot state machine.
dispatch  -- EventDispatcher: sequential watch event loop.
errors    -- MutationError, CaptureError.
"""

from podlogkeeper.controller.capture import LogCapture, format_rfc3339, log_filename
from podlogkeeper.controller.dispatch import EventDispatcher
from podlogkeeper.controller.errors import CaptureError, MutationError
from podlogkeeper.controller.finalizer import FinalizerGuard, has_marker
from podlogkeeper.controller.lifecycle import PodLifecycleController

__all__ = [
    "CaptureError",
    "EventDispatcher",
    "FinalizerGuard",
    "LogCapture",
    "MutationError",
    "PodLifecycleController",
    "format_rfc3339",
    "has_marker",
    "log_filename",
]
