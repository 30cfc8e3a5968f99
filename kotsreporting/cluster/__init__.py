"""Cluster access: object store adapter, identity, kURL facts, distribution detection."""

from kotsreporting.cluster.distribution import Distribution, DistributionDetector
from kotsreporting.cluster.identity import ClusterIdentity
from kotsreporting.cluster.objects import (
    ClusterObject,
    ClusterObjectStore,
    KubernetesObjectStore,
    NodeInfo,
)

__all__ = [
    "ClusterIdentity",
    "ClusterObject",
    "ClusterObjectStore",
    "Distribution",
    "DistributionDetector",
    "KubernetesObjectStore",
    "NodeInfo",
]
