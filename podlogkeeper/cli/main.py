"""``podlogkeeper`` console script.

Commands:
    run      -- watch pods and capture their logs (flags override PODLOGKEEPER_* env vars).
    logname  -- print the file name a pod's log would be stored under.
"""

from __future__ import annotations

import asyncio
import dataclasses
from collections.abc import Callable
from datetime import datetime

import click
from kubernetes_asyncio.client import V1ObjectMeta, V1Pod  # type: ignore[import-untyped]

from podlogkeeper import __version__
from podlogkeeper.config import load_config, validate_log_level, validate_namespace
from podlogkeeper.controller.capture import log_filename
from podlogkeeper.models.config import KeeperConfig
from podlogkeeper.observability.logging import LOG_FORMATS


def apply_overrides(
    config: KeeperConfig,
    *,
    namespace: str | None = None,
    log_directory: str | None = None,
    deployment: str | None = None,
    label_selector: str | None = None,
    container: str | None = None,
    capture_timeout: int | None = None,
    port: int | None = None,
    api_enabled: bool | None = None,
    log_level: str | None = None,
    log_format: str | None = None,
) -> KeeperConfig:
    """Return *config* with every non-None override applied."""

    def _pick(**values: object) -> dict[str, object]:
        return {k: v for k, v in values.items() if v is not None}

    return dataclasses.replace(
        config,
        watch=dataclasses.replace(
            config.watch,
            **_pick(namespace=namespace, label_selector=label_selector, deployment=deployment),
        ),
        storage=dataclasses.replace(config.storage, **_pick(log_directory=log_directory)),
        capture=dataclasses.replace(
            config.capture,
            **_pick(container=container, timeout_seconds=capture_timeout),
        ),
        api=dataclasses.replace(config.api, **_pick(enabled=api_enabled, port=port)),
        log=dataclasses.replace(config.log, **_pick(level=log_level, format=log_format)),
    )


def _validated(validator: Callable[[str], str], value: str | None) -> str | None:
    if value is None:
        return None
    try:
        return validator(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


@click.group()
@click.version_option(__version__, prog_name="podlogkeeper")
def cli() -> None:
    """Capture the logs of finished pods before they are deleted."""


@cli.command()
@click.option("--namespace", default=None, help="Namespace to watch.")
@click.option("--log-directory", default=None, help="Directory that receives captured logs.")
@click.option(
    "--deployment",
    default=None,
    help="Deployment restriction (accepted for compatibility, not applied).",
)
@click.option("--label-selector", default=None, help="Label selector for watched pods.")
@click.option("--container", default=None, help="Container whose log is captured (default: first).")
@click.option(
    "--capture-timeout",
    type=click.IntRange(0, 3600),
    default=None,
    help="Seconds one capture may take; 0 disables the limit.",
)
@click.option("--port", type=click.IntRange(1024, 65535), default=None, help="Log listing API port.")
@click.option("--no-api", is_flag=True, default=False, help="Do not serve the log listing API.")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
)
@click.option("--log-format", type=click.Choice(LOG_FORMATS, case_sensitive=False), default=None)
def run(
    namespace: str | None,
    log_directory: str | None,
    deployment: str | None,
    label_selector: str | None,
    container: str | None,
    capture_timeout: int | None,
    port: int | None,
    no_api: bool,
    log_level: str | None,
    log_format: str | None,
) -> None:
    """Watch pods and capture their logs."""
    from podlogkeeper.app import main

    try:
        base = load_config()
    except ValueError as exc:
        raise click.ClickException(f"invalid environment configuration: {exc}") from exc

    config = apply_overrides(
        base,
        namespace=_validated(validate_namespace, namespace),
        log_directory=log_directory,
        deployment=deployment,
        label_selector=label_selector,
        container=container,
        capture_timeout=capture_timeout,
        port=port,
        api_enabled=False if no_api else None,
        log_level=_validated(validate_log_level, log_level),
        log_format=log_format,
    )
    asyncio.run(main(config))


@cli.command()
@click.option("--name", "pod_name", required=True, help="Pod name.")
@click.option("--created", required=True, help="Pod creation time, RFC 3339 (e.g. 2024-01-15T10:30:00Z).")
def logname(pod_name: str, created: str) -> None:
    """Print the file name a pod's log is stored under."""
    try:
        created_at = datetime.fromisoformat(created)
    except ValueError as exc:
        raise click.BadParameter(f"not an RFC 3339 timestamp: {created!r}", param_hint="--created") from exc
    pod = V1Pod(metadata=V1ObjectMeta(name=pod_name, creation_timestamp=created_at))
    click.echo(log_filename(pod))
