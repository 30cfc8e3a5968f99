"""Airgap reporter: appends telemetry to the cluster-local report log.

No network access.  Each submission becomes a single-event report merged into
the app's stored report by the ReportStore; the accumulated log is exported
later (support bundle or the ``kotsreporting export`` command).
"""

from __future__ import annotations

import time

import structlog

from kotsreporting.appstore import AppStore
from kotsreporting.collector.info import ReportingInfoCollector
from kotsreporting.errors import AppNotFoundError, ReportingError
from kotsreporting.models.apps import License
from kotsreporting.models.events import InstanceReportEvent, PreflightReportEvent
from kotsreporting.models.info import ReportingInfo
from kotsreporting.observability.metrics import reports_submitted_total
from kotsreporting.report.report import InstanceReport, PreflightReport, Report
from kotsreporting.report.store import ReportStore
from kotsreporting.reporter.base import Reporter

_log = structlog.get_logger(component="reporter.airgap")


def _now_millis() -> int:
    return time.time_ns() // 1_000_000


def build_instance_event(
    license_id: str,
    info: ReportingInfo,
    user_agent: str,
    reported_at: int | None = None,
) -> InstanceReportEvent:
    """Flatten a snapshot into an instance report event."""
    downstream = info.downstream
    return InstanceReportEvent(
        reported_at=_now_millis() if reported_at is None else reported_at,
        license_id=license_id,
        instance_id=info.instance_id,
        cluster_id=info.cluster_id,
        app_status=info.app_status,
        is_kurl=info.is_kurl,
        kurl_node_count_total=info.kurl_node_count_total,
        kurl_node_count_ready=info.kurl_node_count_ready,
        k8s_version=info.k8s_version,
        k8s_distribution=info.k8s_distribution,
        user_agent=user_agent,
        kots_install_id=info.kots_install_id,
        kurl_install_id=info.kurl_install_id,
        embedded_cluster_id=info.embedded_cluster_id,
        embedded_cluster_version=info.embedded_cluster_version,
        is_gitops_enabled=info.is_gitops_enabled,
        gitops_provider=info.gitops_provider,
        downstream_channel_id=downstream.channel_id,
        downstream_channel_sequence=_cursor_sequence(downstream.cursor),
        downstream_channel_name=downstream.channel_name,
        downstream_sequence=downstream.sequence,
        downstream_source=downstream.source,
        install_status=downstream.status,
        preflight_state=downstream.preflight_state,
        skip_preflights=downstream.skip_preflights,
        repl_helm_installs=downstream.repl_helm_installs,
        native_helm_installs=downstream.native_helm_installs,
    )


def _cursor_sequence(cursor: str) -> int:
    # Update cursors are numeric channel sequences for replicated channels.
    try:
        return int(cursor)
    except ValueError:
        return 0


class AirgapReporter(Reporter):
    """Delivers telemetry into the ReportStore.

    Args:
        app_store:    App/version store collaborator.
        collector:    Builds the snapshot recorded for app info.
        report_store: Shared ReportStore (owns the per-variant locks).
        namespace:    Namespace holding the report Secrets.
        kots_version: Recorded in each event's user agent.
    """

    def __init__(
        self,
        app_store: AppStore,
        collector: ReportingInfoCollector,
        report_store: ReportStore,
        namespace: str,
        kots_version: str,
    ) -> None:
        self._app_store = app_store
        self._collector = collector
        self._report_store = report_store
        self._namespace = namespace
        self._user_agent = f"KOTS/{kots_version}"

    @property
    def reporter_name(self) -> str:
        return "airgap"

    async def submit_app_info(self, app_id: str) -> None:
        try:
            app = await self._app_store.get_app(app_id)
            if not app.is_airgap:
                _log.debug("app_info_skipped_not_airgap", app_id=app_id)
                return
            license = await self._app_store.get_latest_license_for_app(app.id)
        except AppNotFoundError:
            _log.debug("app_info_skipped_app_not_found", app_id=app_id)
            return

        info = await self._collector.collect(app_id)
        event = build_instance_event(license.license_id, info, self._user_agent)
        await self._append(app.slug, InstanceReport(events=[event]), kind="app_info")

    async def submit_preflight_data(
        self,
        license: License,
        app_id: str,
        cluster_id: str,
        sequence: int,
        skip_preflights: bool,
        install_status: str,
        is_cli: bool,
        preflight_status: str,
        app_status: str,
    ) -> None:
        try:
            app = await self._app_store.get_app(app_id)
        except AppNotFoundError:
            _log.debug("preflight_skipped_app_not_found", app_id=app_id)
            return

        event = PreflightReportEvent(
            reported_at=_now_millis(),
            license_id=license.license_id,
            instance_id=app_id,
            cluster_id=cluster_id,
            sequence=sequence,
            skip_preflights=skip_preflights,
            install_status=install_status,
            is_cli=is_cli,
            preflight_status=preflight_status,
            app_status=app_status,
            user_agent=self._user_agent,
        )
        await self._append(app.slug, PreflightReport(events=[event]), kind="preflight")

    async def _append(self, app_slug: str, report: Report, kind: str) -> None:
        try:
            await self._report_store.append(self._namespace, app_slug, report)
        except ReportingError:
            reports_submitted_total.labels(reporter=self.reporter_name, kind=kind, outcome="error").inc()
            raise
        reports_submitted_total.labels(reporter=self.reporter_name, kind=kind, outcome="ok").inc()
