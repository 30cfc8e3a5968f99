"""ReportingInfo to request header encoding for the online endpoint.

The vendor endpoint reads the snapshot from ``X-Replicated-*`` headers rather
than a body.  Optional facts are omitted when unset, and the channel is sent
either by id or, only when no id is known, by name.
"""

from __future__ import annotations

from kotsreporting.models.info import ReportingInfo


def _bool(value: bool) -> str:
    return "true" if value else "false"


def reporting_info_headers(info: ReportingInfo | None) -> dict[str, str]:
    if info is None:
        return {}

    downstream = info.downstream
    headers = {
        "X-Replicated-K8sVersion": info.k8s_version,
        "X-Replicated-IsKurl": _bool(info.is_kurl),
        "X-Replicated-AppStatus": info.app_status,
        "X-Replicated-ClusterID": info.cluster_id,
        "X-Replicated-InstanceID": info.instance_id,
        "X-Replicated-ReplHelmInstalls": str(downstream.repl_helm_installs),
        "X-Replicated-NativeHelmInstalls": str(downstream.native_helm_installs),
    }

    if downstream.cursor:
        headers["X-Replicated-DownstreamChannelSequence"] = downstream.cursor
    if downstream.channel_id:
        headers["X-Replicated-DownstreamChannelID"] = downstream.channel_id
    elif downstream.channel_name:
        headers["X-Replicated-DownstreamChannelName"] = downstream.channel_name
    if downstream.status:
        headers["X-Replicated-InstallStatus"] = downstream.status
    if downstream.preflight_state:
        headers["X-Replicated-PreflightStatus"] = downstream.preflight_state
    if downstream.sequence is not None:
        headers["X-Replicated-DownstreamSequence"] = str(downstream.sequence)
    if downstream.source:
        headers["X-Replicated-DownstreamSource"] = downstream.source
    headers["X-Replicated-SkipPreflights"] = _bool(downstream.skip_preflights)

    if info.kots_install_id:
        headers["X-Replicated-KotsInstallID"] = info.kots_install_id
    if info.kurl_install_id:
        headers["X-Replicated-KurlInstallID"] = info.kurl_install_id
    if info.embedded_cluster_id:
        headers["X-Replicated-EmbeddedClusterID"] = info.embedded_cluster_id
    if info.embedded_cluster_version:
        headers["X-Replicated-EmbeddedClusterVersion"] = info.embedded_cluster_version

    headers["X-Replicated-KurlNodeCountTotal"] = str(info.kurl_node_count_total)
    headers["X-Replicated-KurlNodeCountReady"] = str(info.kurl_node_count_ready)
    headers["X-Replicated-IsGitOpsEnabled"] = _bool(info.is_gitops_enabled)
    headers["X-Replicated-GitOpsProvider"] = info.gitops_provider

    if info.k8s_distribution:
        headers["X-Replicated-K8sDistribution"] = info.k8s_distribution
    return headers
