"""Tests for structlog configuration."""

from __future__ import annotations

import json
from collections.abc import Iterator

import pytest
import structlog

from podlogkeeper.observability.logging import event_context, get_logger, setup_logging


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


def test_json_lines_carry_component_and_event(capsys: pytest.CaptureFixture[str]) -> None:
    setup_logging("info", "json")

    with event_context("MODIFIED", "42"):
        get_logger("test").info("log_capture_started", pod="p1")

    line = json.loads(capsys.readouterr().err.strip())
    assert line["event"] == "log_capture_started"
    assert line["component"] == "test"
    assert line["pod"] == "p1"
    assert line["event_type"] == "MODIFIED"
    assert line["resource_version"] == "42"
    assert line["level"] == "info"
    assert "ts" in line


def test_level_filters_debug(capsys: pytest.CaptureFixture[str]) -> None:
    setup_logging("warning")

    get_logger("test").info("dropped")
    get_logger("test").warning("kept")

    err = capsys.readouterr().err
    assert "dropped" not in err
    assert "kept" in err


def test_console_format(capsys: pytest.CaptureFixture[str]) -> None:
    setup_logging("info", "console")

    get_logger("test").info("hello", pod="p1")

    err = capsys.readouterr().err
    assert "hello" in err
    assert "pod=p1" in err
    with pytest.raises(json.JSONDecodeError):
        json.loads(err)


def test_event_context_unbinds_on_exit() -> None:
    with event_context("ADDED", None):
        assert structlog.contextvars.get_contextvars() == {"event_type": "ADDED", "resource_version": ""}
    assert structlog.contextvars.get_contextvars() == {}
