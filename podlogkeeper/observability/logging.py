"""Structured logging configuration using structlog.

Log lines go to stderr, JSON by default.  Values bound with
``event_context`` are merged into every line logged inside the block,
so a capture's start and completion lines carry the watch event that
triggered them.
"""

from __future__ import annotations

import logging
import sys
from contextlib import AbstractContextManager

import structlog

LOG_FORMATS = ("json", "console")


def setup_logging(level: str = "info", fmt: str = "json") -> None:
    """Configure structlog for *fmt* output to stderr."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    renderer: structlog.typing.Processor
    if fmt == "console":
        renderer = structlog.dev.ConsoleRenderer(colors=False)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound with a component name."""
    return structlog.get_logger(component=component)  # type: ignore[return-value]


def event_context(event_type: str, resource_version: str | None) -> AbstractContextManager[object]:
    """Bind the watch event being processed for the duration of a block."""
    return structlog.contextvars.bound_contextvars(
        event_type=event_type,
        resource_version=resource_version or "",
    )
