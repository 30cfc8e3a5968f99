"""Kubernetes client bootstrap."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import kubernetes_asyncio.config as k8s_config  # type: ignore[import-untyped]

from kotsreporting.cluster.objects import KubernetesObjectStore
from kotsreporting.observability.logging import get_logger

_log = get_logger("cluster.kube")


async def load_kube_config() -> None:
    """Configure kubernetes-asyncio from the in-cluster service account or kubeconfig."""
    try:
        k8s_config.load_incluster_config()
        source = "in_cluster"
    except k8s_config.ConfigException:
        await k8s_config.load_kube_config()
        source = "kubeconfig"
    _log.debug("kube_config_loaded", source=source)


@asynccontextmanager
async def kubernetes_object_store() -> AsyncIterator[KubernetesObjectStore]:
    """Yield a KubernetesObjectStore and close its connection pool afterwards."""
    await load_kube_config()
    store = KubernetesObjectStore()
    try:
        yield store
    finally:
        await store.close()
