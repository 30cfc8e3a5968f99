"""Tests for Kubernetes distribution detection."""

from __future__ import annotations

import pytest

from kotsreporting.cluster.distribution import (
    Distribution,
    DistributionDetector,
    distribution_from_api_groups,
    distribution_from_labels,
    distribution_from_provider_id,
    distribution_from_version,
)
from kotsreporting.cluster.objects import NodeInfo
from tests.fakes import InMemoryObjectStore


def _node(provider_id: str = "", labels: dict[str, str] | None = None) -> NodeInfo:
    return NodeInfo(name="n", provider_id=provider_id, labels=labels or {}, ready=True)


class TestPureStrategies:
    @pytest.mark.parametrize(
        ("groups", "expected"),
        [
            (["v1", "apps.openshift.io/v1"], Distribution.OPENSHIFT),
            (["run.tanzu.vmware.com/v1alpha1"], Distribution.TANZU),
            (["v1", "apps/v1"], Distribution.UNKNOWN),
            ([], Distribution.UNKNOWN),
        ],
    )
    def test_api_groups(self, groups: list[str], expected: Distribution) -> None:
        assert distribution_from_api_groups(groups) is expected

    @pytest.mark.parametrize(
        ("provider_id", "expected"),
        [
            ("kind://docker/kind/kind-control-plane", Distribution.KIND),
            ("digitalocean://12345", Distribution.DIGITAL_OCEAN),
            ("aws:///us-east-1a/i-0abc", Distribution.UNKNOWN),
            ("", Distribution.UNKNOWN),
        ],
    )
    def test_provider_id(self, provider_id: str, expected: Distribution) -> None:
        assert distribution_from_provider_id([_node(provider_id)]) is expected

    def test_provider_id_uses_first_node_only(self) -> None:
        nodes = [_node("aws:///i-1"), _node("kind://docker/kind/x")]
        assert distribution_from_provider_id(nodes) is Distribution.UNKNOWN

    def test_provider_id_no_nodes(self) -> None:
        assert distribution_from_provider_id([]) is Distribution.UNKNOWN

    @pytest.mark.parametrize(
        ("labels", "expected"),
        [
            ({"kurl.sh/cluster": "true"}, Distribution.KURL),
            ({"kurl.sh/cluster": "false"}, Distribution.UNKNOWN),
            ({"microk8s.io/cluster": "true"}, Distribution.MICROK8S),
            ({"kubernetes.azure.com/role": "agent"}, Distribution.AKS),
            ({"minikube.k8s.io/version": "v1.32.0"}, Distribution.MINIKUBE),
            ({"oci.oraclecloud.com/fault-domain": "FAULT-DOMAIN-1"}, Distribution.OKE),
            ({"kots.io/embedded-cluster-role": "total-1"}, Distribution.EMBEDDED_CLUSTER),
            ({"kubernetes.io/os": "linux"}, Distribution.UNKNOWN),
        ],
    )
    def test_labels(self, labels: dict[str, str], expected: Distribution) -> None:
        assert distribution_from_labels([_node(labels=labels)]) is expected

    def test_labels_any_node(self) -> None:
        nodes = [_node(labels={}), _node(labels={"minikube.k8s.io/version": "v1"})]
        assert distribution_from_labels(nodes) is Distribution.MINIKUBE

    @pytest.mark.parametrize(
        ("version", "expected"),
        [
            ("v1.27.3-gke.100", Distribution.GKE),
            ("v1.28.5-eks-5e0fdde", Distribution.EKS),
            ("v1.27.10+rke2r1", Distribution.RKE2),
            ("v1.28.4+k3s2", Distribution.K3S),
            ("v1.29.1+k0s", Distribution.K0S),
            ("v1.29.0", Distribution.UNKNOWN),
        ],
    )
    def test_version(self, version: str, expected: Distribution) -> None:
        assert distribution_from_version(version) is expected


class TestDetector:
    async def test_api_groups_win_over_labels(self) -> None:
        objects = InMemoryObjectStore(
            nodes=[
                _node(labels={"kurl.sh/cluster": "true"}),
                _node(labels={"minikube.k8s.io/version": "v1.32.0"}),
            ],
            group_versions=["apps.openshift.io/v1"],
        )
        assert await DistributionDetector(objects).detect() is Distribution.OPENSHIFT
        assert "list_nodes" not in objects.calls

    async def test_provider_id_wins_over_labels(self) -> None:
        objects = InMemoryObjectStore(nodes=[_node("kind://x", {"kurl.sh/cluster": "true"})])
        assert await DistributionDetector(objects).detect() is Distribution.KIND

    async def test_labels_win_over_version(self) -> None:
        objects = InMemoryObjectStore(
            nodes=[_node(labels={"kurl.sh/cluster": "true"})],
            server_version="v1.28.4+k3s2",
        )
        assert await DistributionDetector(objects).detect() is Distribution.KURL

    async def test_falls_through_to_version(self) -> None:
        objects = InMemoryObjectStore(nodes=[_node()], server_version="v1.28.5-eks-5e0fdde")
        assert await DistributionDetector(objects).detect() is Distribution.EKS

    async def test_supplied_version_is_not_refetched(self) -> None:
        objects = InMemoryObjectStore(nodes=[_node()])
        assert await DistributionDetector(objects).detect("v1.27.3-gke.100") is Distribution.GKE
        assert "get_server_version" not in objects.calls

    async def test_unknown(self) -> None:
        objects = InMemoryObjectStore(nodes=[_node()], server_version="v1.29.0")
        assert await DistributionDetector(objects).detect() is Distribution.UNKNOWN

    async def test_failing_calls_count_as_unknown(self) -> None:
        objects = InMemoryObjectStore(server_version="v1.28.4+k3s2")
        objects.fail("list_api_group_versions", "list_nodes")
        assert await DistributionDetector(objects).detect() is Distribution.K3S

    async def test_transport_error_falls_through_chain(self) -> None:
        objects = InMemoryObjectStore(server_version="v1.28.4+k3s2")
        objects.fail("list_api_group_versions", error=ConnectionResetError("connection reset"))
        assert await DistributionDetector(objects).detect() is Distribution.K3S
        assert "list_nodes" in objects.calls

    async def test_everything_failing_is_unknown(self) -> None:
        objects = InMemoryObjectStore()
        objects.fail("list_api_group_versions", "list_nodes", "get_server_version")
        assert await DistributionDetector(objects).detect() is Distribution.UNKNOWN
