"""Reporting snapshot data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class DownstreamInfo:
    """Facts about the version currently deployed to the primary downstream.

    Left zero-valued when nothing has been deployed yet.
    """

    cursor: str = ""
    channel_id: str = ""
    channel_name: str = ""
    sequence: int | None = None
    source: str = ""
    status: str = ""
    preflight_state: str = ""
    skip_preflights: bool = False
    repl_helm_installs: int = 0
    native_helm_installs: int = 0


@dataclass
class ReportingInfo:
    """Point-in-time snapshot of cluster and app facts.

    Built fresh for every delivery and never persisted as-is.  Any field the
    collector could not determine keeps its zero value.
    """

    instance_id: str
    cluster_id: str = ""
    k8s_version: str = ""
    k8s_distribution: str = ""
    app_status: str = ""
    downstream: DownstreamInfo = field(default_factory=DownstreamInfo)
    is_gitops_enabled: bool = False
    gitops_provider: str = ""
    is_kurl: bool = False
    kurl_node_count_total: int = 0
    kurl_node_count_ready: int = 0
    kots_install_id: str = ""
    kurl_install_id: str = ""
    embedded_cluster_id: str = ""
    embedded_cluster_version: str = ""
    kots_version: str = ""
