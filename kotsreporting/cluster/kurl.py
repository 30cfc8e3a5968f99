"""kURL and embedded-cluster node facts."""

from __future__ import annotations

from kotsreporting.cluster.objects import ClusterObjectStore, NodeInfo

KURL_CONFIGMAP_NAMESPACE = "kube-system"
KURL_CONFIGMAP_NAME = "kurl-config"


async def is_kurl(objects: ClusterObjectStore) -> bool:
    """A cluster is kURL-managed when the installer left its config behind."""
    return await objects.get_config_map(KURL_CONFIGMAP_NAMESPACE, KURL_CONFIGMAP_NAME) is not None


def count_nodes(nodes: list[NodeInfo]) -> tuple[int, int]:
    """Return ``(total, ready)`` node counts."""
    return len(nodes), sum(1 for node in nodes if node.ready)
