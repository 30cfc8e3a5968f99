"""Kubernetes distribution detection.

Four strategies run in a fixed order and the first concrete answer wins:

1. API groups advertised by the server (OpenShift, Tanzu).
2. The first node's ``spec.providerID`` prefix (kind, DigitalOcean).
3. Node labels; the first node carrying any known marker decides.
4. Substrings of the server git version (GKE, EKS, RKE2, k3s, k0s).

Failing to classify is a valid outcome (``Distribution.UNKNOWN``), never an
error.  A strategy whose cluster call fails is treated as unknown.
"""

from __future__ import annotations

from enum import StrEnum

import structlog

from kotsreporting.cluster.objects import ClusterObjectStore, NodeInfo
from kotsreporting.observability.metrics import distribution_detections_total

_log = structlog.get_logger(component="cluster.distribution")


class Distribution(StrEnum):
    """Known Kubernetes distributions and providers."""

    UNKNOWN = "unknown"
    AKS = "aks"
    DIGITAL_OCEAN = "digital-ocean"
    EKS = "eks"
    EMBEDDED_CLUSTER = "embedded-cluster"
    GKE = "gke"
    K0S = "k0s"
    K3S = "k3s"
    KIND = "kind"
    KURL = "kurl"
    MICROK8S = "microk8s"
    MINIKUBE = "minikube"
    OKE = "oke"
    OPENSHIFT = "openshift"
    RKE2 = "rke2"
    TANZU = "tanzu"


_API_GROUP_PREFIXES: tuple[tuple[str, Distribution], ...] = (
    ("apps.openshift.io/", Distribution.OPENSHIFT),
    ("run.tanzu.vmware.com/", Distribution.TANZU),
)

_PROVIDER_ID_PREFIXES: tuple[tuple[str, Distribution], ...] = (
    ("kind:", Distribution.KIND),
    ("digitalocean:", Distribution.DIGITAL_OCEAN),
)

# (label key, required value or None for "any value", distribution)
_LABEL_MARKERS: tuple[tuple[str, str | None, Distribution], ...] = (
    ("kurl.sh/cluster", "true", Distribution.KURL),
    ("microk8s.io/cluster", "true", Distribution.MICROK8S),
    ("kubernetes.azure.com/role", None, Distribution.AKS),
    ("minikube.k8s.io/version", None, Distribution.MINIKUBE),
    ("oci.oraclecloud.com/fault-domain", None, Distribution.OKE),
    ("kots.io/embedded-cluster-role", None, Distribution.EMBEDDED_CLUSTER),
)

_VERSION_MARKERS: tuple[tuple[str, Distribution], ...] = (
    ("-gke.", Distribution.GKE),
    ("-eks-", Distribution.EKS),
    ("+rke2", Distribution.RKE2),
    ("+k3s", Distribution.K3S),
    ("+k0s", Distribution.K0S),
)


def distribution_from_api_groups(group_versions: list[str]) -> Distribution:
    for group_version in group_versions:
        for prefix, distribution in _API_GROUP_PREFIXES:
            if group_version.startswith(prefix):
                return distribution
    return Distribution.UNKNOWN


def distribution_from_provider_id(nodes: list[NodeInfo]) -> Distribution:
    if not nodes:
        return Distribution.UNKNOWN
    provider_id = nodes[0].provider_id
    for prefix, distribution in _PROVIDER_ID_PREFIXES:
        if provider_id.startswith(prefix):
            return distribution
    return Distribution.UNKNOWN


def distribution_from_labels(nodes: list[NodeInfo]) -> Distribution:
    for node in nodes:
        for key, value, distribution in _LABEL_MARKERS:
            if key not in node.labels:
                continue
            if value is None or node.labels[key] == value:
                return distribution
    return Distribution.UNKNOWN


def distribution_from_version(server_version: str) -> Distribution:
    for marker, distribution in _VERSION_MARKERS:
        if marker in server_version:
            return distribution
    return Distribution.UNKNOWN


class DistributionDetector:
    """Runs the detection chain against a live cluster."""

    def __init__(self, objects: ClusterObjectStore) -> None:
        self._objects = objects

    async def detect(self, server_version: str | None = None) -> Distribution:
        """Classify the cluster.

        Args:
            server_version: Already-fetched server git version; fetched on
                            demand when omitted and the chain gets that far.
        """
        result = await self._run_chain(server_version)
        distribution_detections_total.labels(distribution=result.value).inc()
        return result

    async def _run_chain(self, server_version: str | None) -> Distribution:
        try:
            result = distribution_from_api_groups(await self._objects.list_api_group_versions())
        except Exception as exc:
            _log.debug("distribution_api_groups_failed", error=str(exc))
            result = Distribution.UNKNOWN
        if result is not Distribution.UNKNOWN:
            return result

        try:
            nodes = await self._objects.list_nodes()
        except Exception as exc:
            _log.debug("distribution_list_nodes_failed", error=str(exc))
            nodes = []

        result = distribution_from_provider_id(nodes)
        if result is not Distribution.UNKNOWN:
            return result

        result = distribution_from_labels(nodes)
        if result is not Distribution.UNKNOWN:
            return result

        if server_version is None:
            try:
                server_version = await self._objects.get_server_version()
            except Exception as exc:
                _log.debug("distribution_server_version_failed", error=str(exc))
                return Distribution.UNKNOWN
        return distribution_from_version(server_version)
