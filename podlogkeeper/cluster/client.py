"""kubernetes-asyncio implementation of the cluster client."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import aiohttp
from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]
from kubernetes_asyncio import config as k8s_config  # type: ignore[import-untyped]
from kubernetes_asyncio import watch  # type: ignore[import-untyped]
from kubernetes_asyncio.client.rest import ApiException  # type: ignore[import-untyped]

from podlogkeeper.cluster.base import ClusterClient, ClusterError
from podlogkeeper.models.pods import WatchEvent, WatchEventType
from podlogkeeper.observability.logging import get_logger

_log = get_logger("cluster.client")

_LOG_CHUNK_SIZE = 64 * 1024


async def load_cluster_config() -> str:
    """Load credentials from the in-cluster service account or kubeconfig.

    Returns the source that was used ("in-cluster" or "kubeconfig").
    """
    try:
        # load_incluster_config() is synchronous in kubernetes-asyncio
        k8s_config.load_incluster_config()
        return "in-cluster"
    except k8s_config.ConfigException:
        await k8s_config.load_kube_config()
        return "kubeconfig"


def _event_type(value: str) -> WatchEventType | str:
    try:
        return WatchEventType(value)
    except ValueError:
        return value


def _cluster_error(action: str, exc: Exception) -> ClusterError:
    if isinstance(exc, ApiException):
        return ClusterError(f"{action} failed: {exc.status} {exc.reason}", status=exc.status)
    return ClusterError(f"{action} failed: {exc}")


class KubeClusterClient(ClusterClient):
    """Talks to the Kubernetes API through kubernetes-asyncio.

    Args:
        api_client: Shared ApiClient.  Created from the loaded default
                    configuration when omitted, so call
                    ``load_cluster_config()`` first.
    """

    def __init__(self, api_client: Any = None) -> None:
        self._api_client = api_client or k8s_client.ApiClient()
        self._core_v1 = k8s_client.CoreV1Api(self._api_client)

    async def verify_access(self, namespace: str, label_selector: str) -> int:
        """List matching pods once so auth and RBAC problems surface at startup.

        Returns the number of pods in the probe page.
        """
        try:
            pods = await self._core_v1.list_namespaced_pod(
                namespace=namespace,
                label_selector=label_selector,
                limit=1,
            )
        except (ApiException, aiohttp.ClientError) as exc:
            raise _cluster_error("pod list", exc) from exc
        return len(pods.items)

    async def watch_pods(self, namespace: str, label_selector: str) -> AsyncIterator[WatchEvent]:
        # kubernetes-asyncio raises ApiException for an ERROR object instead of
        # yielding it, so a server-side watch error ends the stream here.
        try:
            async with watch.Watch() as w:
                async for raw in w.stream(
                    self._core_v1.list_namespaced_pod,
                    namespace=namespace,
                    label_selector=label_selector,
                ):
                    yield WatchEvent(type=_event_type(str(raw.get("type", ""))), object=raw.get("object"))
        except (ApiException, aiohttp.ClientError) as exc:
            raise _cluster_error("pod watch", exc) from exc

    async def replace_pod(self, pod: Any) -> Any:
        try:
            return await self._core_v1.replace_namespaced_pod(
                name=pod.metadata.name,
                namespace=pod.metadata.namespace,
                body=pod,
            )
        except (ApiException, aiohttp.ClientError) as exc:
            raise _cluster_error(f"update of pod {pod.metadata.name}", exc) from exc

    @asynccontextmanager
    async def open_log_stream(self, pod: Any, container: str) -> AsyncIterator[AsyncIterator[bytes]]:
        name = pod.metadata.name
        try:
            resp = await self._core_v1.read_namespaced_pod_log(
                name=name,
                namespace=pod.metadata.namespace,
                container=container or None,
                _preload_content=False,
            )
        except (ApiException, aiohttp.ClientError) as exc:
            raise _cluster_error(f"log stream of pod {name}", exc) from exc

        async def _chunks() -> AsyncIterator[bytes]:
            try:
                async for chunk in resp.content.iter_chunked(_LOG_CHUNK_SIZE):
                    yield chunk
            except aiohttp.ClientError as exc:
                raise _cluster_error(f"log stream of pod {name}", exc) from exc

        try:
            yield _chunks()
        finally:
            resp.close()
            _log.debug("log_stream_released", pod=name)

    async def close(self) -> None:
        await self._api_client.close()
