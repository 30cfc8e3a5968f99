"""Reporting service: the single entry point callers hold.

Built once at startup by ``build_reporting_service``.  It owns the report
store (and so the per-variant append locks) and the one active reporter,
chosen from the connectivity mode and never swapped afterwards.

Two calling styles are offered:

* ``submit_*`` awaits delivery and raises ReportingError on failure.
* ``submit_*_nowait`` schedules delivery as a background task and logs any
  failure instead of raising, which is what HTTP handlers want after a
  deploy, a preflight run or a node change.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable

import httpx

from kotsreporting.appstore import AppStore
from kotsreporting.cluster.objects import ClusterObjectStore
from kotsreporting.collector.info import ReportingInfoCollector
from kotsreporting.errors import ReportingError
from kotsreporting.models.apps import License
from kotsreporting.models.config import KotsReportingConfig
from kotsreporting.observability.logging import app_log_context, get_logger
from kotsreporting.report.store import ReportStore
from kotsreporting.reporter.airgap import AirgapReporter
from kotsreporting.reporter.base import Reporter
from kotsreporting.reporter.online import OnlineReporter

_log = get_logger("service")


class ReportingService:
    """Holds the active reporter and tracks fire-and-forget submissions."""

    def __init__(self, reporter: Reporter, report_store: ReportStore | None = None) -> None:
        self._reporter = reporter
        self._report_store = report_store
        self._background_tasks: set[asyncio.Task[None]] = set()

    @property
    def reporter(self) -> Reporter:
        return self._reporter

    @property
    def report_store(self) -> ReportStore | None:
        return self._report_store

    async def submit_app_info(self, app_id: str) -> None:
        with app_log_context(app_id):
            await self._reporter.submit_app_info(app_id)

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
        with app_log_context(app_id, sequence=str(sequence)):
            await self._reporter.submit_preflight_data(
                license,
                app_id,
                cluster_id,
                sequence,
                skip_preflights,
                install_status,
                is_cli,
                preflight_status,
                app_status,
            )

    def submit_app_info_nowait(self, app_id: str) -> asyncio.Task[None]:
        return self._spawn("app_info", app_id, self.submit_app_info(app_id))

    def submit_preflight_data_nowait(
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
    ) -> asyncio.Task[None]:
        return self._spawn(
            "preflight",
            app_id,
            self.submit_preflight_data(
                license,
                app_id,
                cluster_id,
                sequence,
                skip_preflights,
                install_status,
                is_cli,
                preflight_status,
                app_status,
            ),
        )

    async def stop(self) -> None:
        """Wait for in-flight background submissions, then close the reporter."""
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)
        self._background_tasks.clear()
        await self._reporter.close()

    def _spawn(self, kind: str, app_id: str, submission: Awaitable[None]) -> asyncio.Task[None]:
        async def _run() -> None:
            try:
                await submission
            except ReportingError as exc:
                _log.warning("report_submission_failed", kind=kind, app_id=app_id, error=str(exc))
            except Exception as exc:
                # Telemetry must never take the console down.
                _log.error("report_submission_crashed", kind=kind, app_id=app_id, error=str(exc))

        task = asyncio.create_task(_run(), name=f"report-{kind}-{app_id}")
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        return task


def build_reporting_service(
    config: KotsReportingConfig,
    objects: ClusterObjectStore,
    app_store: AppStore,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ReportingService:
    """Wire the collector, store and the reporter matching the connectivity mode."""
    collector = ReportingInfoCollector(objects=objects, app_store=app_store, config=config.reporting)
    kots_version = config.reporting.kots_version

    if config.reporting.airgap:
        report_store = ReportStore(objects, conflict_retries=config.store.conflict_retries)
        reporter: Reporter = AirgapReporter(
            app_store=app_store,
            collector=collector,
            report_store=report_store,
            namespace=config.reporting.namespace,
            kots_version=kots_version,
        )
        _log.info("reporting_service_built", reporter="airgap", namespace=config.reporting.namespace)
        return ReportingService(reporter, report_store)

    reporter = OnlineReporter(
        app_store=app_store,
        collector=collector,
        kots_version=kots_version,
        timeout=config.http.timeout_seconds,
        submit_spacing=config.http.submit_spacing_seconds,
        transport=transport,
    )
    _log.info("reporting_service_built", reporter="online")
    return ReportingService(reporter)
