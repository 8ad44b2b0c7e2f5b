"""Tests for the podlogkeeper console script."""

from __future__ import annotations

import os

import pytest
from click.testing import CliRunner

from podlogkeeper.cli import cli
from podlogkeeper.cli.main import apply_overrides
from podlogkeeper.models.config import KeeperConfig


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("PODLOGKEEPER_"):
            monkeypatch.delenv(key)


class TestLogname:
    def test_prints_filename(self) -> None:
        result = CliRunner().invoke(cli, ["logname", "--name", "p1", "--created", "2024-01-15T10:30:00Z"])
        assert result.exit_code == 0
        assert result.output.strip() == "2024-01-15T10:30:00Z_p1.log"

    def test_offset_normalised_to_utc(self) -> None:
        result = CliRunner().invoke(cli, ["logname", "--name", "p1", "--created", "2024-01-15T12:30:00+02:00"])
        assert result.output.strip() == "2024-01-15T10:30:00Z_p1.log"

    def test_bad_timestamp(self) -> None:
        result = CliRunner().invoke(cli, ["logname", "--name", "p1", "--created", "yesterday"])
        assert result.exit_code != 0
        assert "RFC 3339" in result.output


class TestApplyOverrides:
    def test_none_keeps_base(self) -> None:
        base = KeeperConfig()
        assert apply_overrides(base) == base

    def test_values_replace_sections(self) -> None:
        config = apply_overrides(
            KeeperConfig(),
            namespace="db",
            log_directory="/data/logs",
            capture_timeout=30,
            api_enabled=False,
        )
        assert config.watch.namespace == "db"
        assert config.watch.label_selector == "app=arangodb"
        assert config.storage.log_directory == "/data/logs"
        assert config.capture.timeout_seconds == 30
        assert config.api.enabled is False
        assert config.api.port == 8080


class TestRun:
    def test_flags_build_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        received: list[KeeperConfig] = []

        async def fake_main(config: KeeperConfig | None = None) -> None:
            assert config is not None
            received.append(config)

        monkeypatch.setattr("podlogkeeper.app.main", fake_main)
        monkeypatch.setenv("PODLOGKEEPER_LABEL_SELECTOR", "app=from-env")

        result = CliRunner().invoke(
            cli,
            [
                "run",
                "--namespace",
                "arangodb",
                "--log-directory",
                "captured",
                "--deployment",
                "cluster-a",
                "--no-api",
                "--log-level",
                "DEBUG",
                "--log-format",
                "console",
            ],
        )

        assert result.exit_code == 0, result.output
        (config,) = received
        assert config.watch.namespace == "arangodb"
        assert config.watch.label_selector == "app=from-env"
        assert config.watch.deployment == "cluster-a"
        assert config.storage.log_directory == "captured"
        assert config.api.enabled is False
        assert config.log.level == "debug"
        assert config.log.format == "console"

    def test_invalid_namespace_flag(self, monkeypatch: pytest.MonkeyPatch) -> None:
        async def fake_main(config: KeeperConfig | None = None) -> None:
            raise AssertionError("must not start")

        monkeypatch.setattr("podlogkeeper.app.main", fake_main)

        result = CliRunner().invoke(cli, ["run", "--namespace", "Bad_NS"])

        assert result.exit_code == 2
        assert "Invalid namespace" in result.output

    def test_invalid_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PODLOGKEEPER_LOG_LEVEL", "loud")
        result = CliRunner().invoke(cli, ["run"])
        assert result.exit_code == 1
        assert "invalid environment configuration" in result.output
