"""Reporting info collector.

Assembles a ReportingInfo snapshot for an app:

    cluster id     -- persisted kotsadm-id ConfigMap (created on first use)
    downstream     -- deployed version of the app's first downstream
    k8s version    -- API server git version
    distribution   -- DistributionDetector chain
    app status     -- app store health state
    kURL / nodes   -- kurl-config presence and node counts
    gitops         -- downstream GitOps configuration

Each step is independent.  A failing step is logged at debug level and its
fields keep their zero value; ``collect`` itself never raises.
"""

from __future__ import annotations

import tempfile
from collections.abc import Awaitable
from pathlib import Path
from typing import TypeVar

import structlog

from kotsreporting.appstore import AppStore
from kotsreporting.cluster.distribution import Distribution, DistributionDetector
from kotsreporting.cluster.identity import ClusterIdentity
from kotsreporting.cluster.kurl import count_nodes, is_kurl
from kotsreporting.cluster.objects import ClusterObjectStore
from kotsreporting.collector.kotskinds import load_kots_kinds
from kotsreporting.collector.preflight import preflight_state
from kotsreporting.models.config import ReportingConfig
from kotsreporting.models.info import DownstreamInfo, ReportingInfo

_log = structlog.get_logger(component="collector.info")

_T = TypeVar("_T")


class ReportingInfoCollector:
    """Builds a fresh ReportingInfo on every call; nothing is cached.

    Args:
        objects:   Cluster object store (ConfigMaps, nodes, discovery).
        app_store: App/version store collaborator.
        config:    Reporting configuration (namespace, install ids, mock).
        detector:  Distribution detector; built from *objects* when omitted.
        identity:  Cluster identity; built from *objects* when omitted.
    """

    def __init__(
        self,
        objects: ClusterObjectStore,
        app_store: AppStore,
        config: ReportingConfig,
        detector: DistributionDetector | None = None,
        identity: ClusterIdentity | None = None,
    ) -> None:
        self._objects = objects
        self._app_store = app_store
        self._config = config
        self._detector = detector or DistributionDetector(objects)
        self._identity = identity or ClusterIdentity(objects, config.namespace)

    async def collect(self, app_id: str) -> ReportingInfo:
        if self._config.mock:
            return ReportingInfo(instance_id=app_id)

        info = ReportingInfo(
            instance_id=app_id,
            kots_install_id=self._config.kots_install_id,
            kurl_install_id=self._config.kurl_install_id,
            embedded_cluster_id=self._config.embedded_cluster_id,
            embedded_cluster_version=self._config.embedded_cluster_version,
            kots_version=self._config.kots_version,
        )

        info.cluster_id = await self._identity.get_cluster_id()

        downstream = await _attempt("downstream_info", self._downstream_info(app_id))
        if downstream is not None:
            info.downstream = downstream

        k8s_version = await _attempt("k8s_version", self._objects.get_server_version())
        if k8s_version is not None:
            info.k8s_version = k8s_version

        distribution = await _attempt("distribution", self._detector.detect(k8s_version))
        if distribution is not None and distribution is not Distribution.UNKNOWN:
            info.k8s_distribution = distribution.value

        app_status = await _attempt("app_status", self._app_store.get_app_status(app_id))
        if app_status is not None:
            info.app_status = app_status.state

        info.is_kurl = bool(await _attempt("kurl", is_kurl(self._objects)))
        if info.is_kurl or info.embedded_cluster_id:
            nodes = await _attempt("nodes", self._objects.list_nodes())
            if nodes is not None:
                info.kurl_node_count_total, info.kurl_node_count_ready = count_nodes(nodes)

        gitops = await _attempt("gitops", self._app_store.get_downstream_gitops(app_id, info.cluster_id))
        if gitops is not None:
            info.is_gitops_enabled = gitops.is_connected
            info.gitops_provider = gitops.provider

        return info

    async def _downstream_info(self, app_id: str) -> DownstreamInfo:
        downstreams = await self._app_store.list_downstreams_for_app(app_id)
        if not downstreams:
            _log.debug("no_downstreams_for_app", app_id=app_id)
            return DownstreamInfo()

        version = await self._app_store.get_current_downstream_version(app_id, downstreams[0].cluster_id)
        if version is None:
            return DownstreamInfo()

        with tempfile.TemporaryDirectory(prefix="kotsadm") as archive_dir:
            await self._app_store.get_app_version_archive(app_id, version.parent_sequence, Path(archive_dir))
            kinds = load_kots_kinds(Path(archive_dir) / "upstream")

        return DownstreamInfo(
            cursor=kinds.update_cursor,
            channel_id=kinds.channel_id,
            channel_name=kinds.channel_name,
            sequence=version.sequence,
            source=version.source,
            status=version.status,
            preflight_state=preflight_state(version.preflight_result),
            skip_preflights=version.preflight_skipped,
            repl_helm_installs=kinds.repl_helm_installs,
            native_helm_installs=kinds.native_helm_installs,
        )


async def _attempt(step: str, coro: Awaitable[_T]) -> _T | None:
    """Await *coro*; on any failure log at debug and return None."""
    try:
        return await coro
    except Exception as exc:
        _log.debug("reporting_info_step_failed", step=step, error=str(exc))
        return None
