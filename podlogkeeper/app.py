"""Application bootstrap for podlogkeeper.

Wires all components in dependency order and manages the asyncio lifecycle.
Startup order: config → logging → storage → cluster client → controller
              → event dispatch → REST

Shutdown stops components in reverse startup order.  The process exits
non-zero when a mandatory component fails to start or when the pod watch
stream ends; restarting is left to the process supervisor.
"""

from __future__ import annotations

import asyncio
import signal
from pathlib import Path
from typing import TYPE_CHECKING

from podlogkeeper.cluster.base import ClusterClient
from podlogkeeper.config import load_config
from podlogkeeper.models.config import KeeperConfig
from podlogkeeper.observability.logging import get_logger, setup_logging

if TYPE_CHECKING:
    import structlog

    from podlogkeeper.controller import EventDispatcher, PodLifecycleController

_SHUTDOWN_GRACE_SECONDS = 15


class _ComponentError(Exception):
    """Raised when a mandatory component fails to start."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


class PodLogKeeperApp:
    """Application root.  Owns every component and coordinates their lifecycle.

    Args:
        config:  Configuration; loaded from the environment when omitted.
        cluster: Cluster client to use instead of connecting to Kubernetes.
    """

    def __init__(
        self,
        config: KeeperConfig | None = None,
        cluster: ClusterClient | None = None,
    ) -> None:
        self.config = config
        self._cluster: ClusterClient | None = cluster
        self._owns_cluster = cluster is None
        self._controller: PodLifecycleController | None = None
        self._dispatcher: EventDispatcher | None = None
        self._rest_server: object | None = None

        self._background_tasks: list[asyncio.Task[None]] = []

        self._running = False
        self._stopped = False
        self.watch_ended = False
        self._log: structlog.stdlib.BoundLogger | None = None

    @property
    def running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start all components in dependency order.

        Raises _ComponentError if a mandatory component cannot start.
        """
        # --- 1. Configuration -------------------------------------------
        if self.config is None:
            try:
                self.config = load_config()
            except ValueError as exc:
                raise _ComponentError("config", exc) from exc

        # --- 2. Logging -------------------------------------------------
        setup_logging(self.config.log.level, self.config.log.format)
        self._log = get_logger("app")
        self._log.info(
            "podlogkeeper starting",
            version=_podlogkeeper_version(),
            namespace=self.config.watch.namespace,
            log_directory=self.config.storage.log_directory,
        )
        if self.config.watch.deployment:
            self._log.warning(
                "deployment restriction is not applied; all pods matching the selector are handled",
                deployment=self.config.watch.deployment,
            )

        # --- 3. Log storage ---------------------------------------------
        await self._start_storage()

        # --- 4. Cluster client ------------------------------------------
        await self._start_cluster_client()

        # --- 5. Lifecycle controller ------------------------------------
        await self._start_controller()

        # --- 6. Event dispatch loop -------------------------------------
        await self._start_dispatcher()

        # --- 7. REST API ------------------------------------------------
        await self._start_rest()

        self._running = not self.watch_ended
        self._log.info("podlogkeeper up and running")

    # ------------------------------------------------------------------
    # Component startup helpers
    # ------------------------------------------------------------------

    async def _start_storage(self) -> None:
        """Create the log directory if it does not exist yet."""
        assert self._log is not None
        assert self.config is not None
        try:
            Path(self.config.storage.log_directory).mkdir(parents=True, exist_ok=True)
            self._log.info("log storage ready", path=self.config.storage.log_directory)
        except OSError as exc:
            raise _ComponentError("storage", exc) from exc

    async def _start_cluster_client(self) -> None:
        """Connect to Kubernetes and check that matching pods can be listed."""
        assert self._log is not None
        assert self.config is not None
        if self._cluster is not None:
            self._log.debug("using provided cluster client")
            return
        self._log.debug("starting cluster client")
        try:
            # Imported lazily so tests with an injected client never load kubeconfig.
            from podlogkeeper.cluster.client import KubeClusterClient, load_cluster_config

            source = await load_cluster_config()
            self._log.info("k8s client configured", source=source)

            cluster = KubeClusterClient()
            self._cluster = cluster
            visible = await cluster.verify_access(
                self.config.watch.namespace,
                self.config.watch.label_selector,
            )
            self._log.info("pod access verified", namespace=self.config.watch.namespace, probe_pods=visible)
        except Exception as exc:
            raise _ComponentError("cluster_client", exc) from exc

    async def _start_controller(self) -> None:
        assert self._log is not None
        assert self.config is not None
        assert self._cluster is not None
        from podlogkeeper.controller import FinalizerGuard, LogCapture, PodLifecycleController

        guard = FinalizerGuard(self._cluster)
        capture = LogCapture(
            self._cluster,
            log_directory=self.config.storage.log_directory,
            container=self.config.capture.container,
            timeout_seconds=self.config.capture.timeout_seconds,
        )
        self._controller = PodLifecycleController(guard, capture)
        self._log.info(
            "lifecycle controller started",
            finalizer=guard.marker,
            container=self.config.capture.container or "<first>",
            capture_timeout=self.config.capture.timeout_seconds,
        )

    async def _start_dispatcher(self) -> None:
        """Launch the watch loop as a background task."""
        assert self._log is not None
        assert self.config is not None
        assert self._cluster is not None
        assert self._controller is not None
        from podlogkeeper.controller import EventDispatcher

        self._dispatcher = EventDispatcher(
            self._cluster,
            self._controller,
            namespace=self.config.watch.namespace,
            label_selector=self.config.watch.label_selector,
        )
        task = asyncio.create_task(self._run_dispatcher(), name="event-dispatch")
        self._background_tasks.append(task)

    async def _run_dispatcher(self) -> None:
        assert self._dispatcher is not None
        log = self._log or get_logger("app")
        try:
            await self._dispatcher.run()
        except Exception as exc:  # noqa: BLE001
            log.error("watch stream failed", error=str(exc))
        self.watch_ended = True
        self._running = False

    async def _start_rest(self) -> None:
        """Start the uvicorn server for the log listing API."""
        assert self._log is not None
        assert self.config is not None
        if not self.config.api.enabled:
            self._log.info("rest api disabled (api.enabled=false)")
            return
        self._log.debug("starting rest api")
        try:
            import uvicorn  # type: ignore[import-untyped]

            from podlogkeeper.api import build_app

            fastapi_app = build_app(log_directory=self.config.storage.log_directory)
            uv_config = uvicorn.Config(
                app=fastapi_app,
                host="0.0.0.0",
                port=self.config.api.port,
                log_config=None,  # structlog handles all logging
                access_log=False,
            )
            server = uvicorn.Server(uv_config)
            task = asyncio.create_task(server.serve(), name="rest-server")
            self._background_tasks.append(task)
            self._rest_server = server
            self._log.info("rest api started", port=self.config.api.port)
        except Exception as exc:
            raise _ComponentError("rest", exc) from exc

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def stop(self) -> None:
        """Stop all components in reverse startup order.  Safe to call twice."""
        if self._stopped or (not self._running and self._log is None):
            return
        self._stopped = True

        log = self._log or get_logger("app")
        log.info("podlogkeeper shutting down")

        self._running = False

        for task in reversed(self._background_tasks):
            if not task.done():
                task.cancel()
        if self._background_tasks:
            try:
                await asyncio.wait_for(
                    asyncio.gather(*self._background_tasks, return_exceptions=True),
                    timeout=_SHUTDOWN_GRACE_SECONDS,
                )
            except TimeoutError:
                log.warning("background tasks did not stop in time", timeout=_SHUTDOWN_GRACE_SECONDS)
        self._background_tasks.clear()
        self._rest_server = None
        self._dispatcher = None
        self._controller = None

        await self._stop_cluster_client()
        log.info("podlogkeeper stopped")

    async def _stop_cluster_client(self) -> None:
        """Close the cluster client's connection pool if this app opened it."""
        if self._cluster is None or not self._owns_cluster:
            return
        log = self._log or get_logger("app")
        try:
            await self._cluster.close()
        except Exception as exc:  # noqa: BLE001
            log.debug("cluster client close raised (non-fatal)", error=str(exc))
        self._cluster = None


def _podlogkeeper_version() -> str:
    from podlogkeeper import __version__

    return __version__


# ---------------------------------------------------------------------------
# Async entrypoint
# ---------------------------------------------------------------------------


async def main(config: KeeperConfig | None = None) -> None:
    """Create the app, register OS signals, run until shutdown or watch end."""
    app = PodLogKeeperApp(config)
    loop = asyncio.get_running_loop()

    shutdown: list[asyncio.Task[None]] = []

    def _request_shutdown() -> None:
        if shutdown:
            return
        shutdown.append(asyncio.create_task(app.stop(), name="shutdown"))

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, _request_shutdown)

    try:
        await app.start()
        while app.running:
            await asyncio.sleep(1)
    except _ComponentError as exc:
        log = get_logger("app")
        log.critical(
            "fatal startup error",
            component=exc.component,
            error=str(exc.cause),
        )
        await app.stop()
        raise SystemExit(1) from exc
    finally:
        if shutdown:
            await shutdown[0]
        elif app.running:
            await app.stop()

    if app.watch_ended:
        await app.stop()
        raise SystemExit(1)
