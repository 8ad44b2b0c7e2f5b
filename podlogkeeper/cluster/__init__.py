"""Cluster access for podlogkeeper.

Exposes:
    ClusterClient      -- Abstract read/watch/update contract used by the controller.
    ClusterError       -- Raised for any failed cluster request.
    KubeClusterClient  -- kubernetes-asyncio implementation.
    load_cluster_config -- In-cluster service account first, kubeconfig second.
"""

from podlogkeeper.cluster.base import ClusterClient, ClusterError
from podlogkeeper.cluster.client import KubeClusterClient, load_cluster_config

__all__ = ["ClusterClient", "ClusterError", "KubeClusterClient", "load_cluster_config"]
