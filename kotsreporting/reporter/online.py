"""Online reporter: posts telemetry to the license's vendor endpoint.

App info goes to ``{endpoint}/kots_metrics/license_instance/info`` with the
snapshot in ``X-Replicated-*`` headers and Basic auth (license id as both
user and password); 200 is the only accepted status.  Preflight data goes to
``{endpoint}/kots_metrics/preflights/{app}/{cluster}`` with its facts in the
query string and the raw license id as Authorization; 201 is accepted.

Submissions from one process are serialized by a single lock that is held
for ``submit_spacing`` seconds after each send, so the endpoint sees calls in
order.  Separate processes are not coordinated.  Failed sends are raised to
the caller and never retried.
"""

from __future__ import annotations

import asyncio
import base64
from collections.abc import Awaitable, Callable

import httpx
import structlog

from kotsreporting.appstore import AppStore
from kotsreporting.collector.info import ReportingInfoCollector
from kotsreporting.errors import AppNotFoundError, ReportTransportError
from kotsreporting.models.apps import License
from kotsreporting.observability.metrics import reports_submitted_total
from kotsreporting.reporter.base import Reporter
from kotsreporting.reporter.headers import reporting_info_headers

_log = structlog.get_logger(component="reporter.online")


def _bool(value: bool) -> str:
    return "true" if value else "false"


def _basic_auth(license_id: str) -> str:
    token = base64.b64encode(f"{license_id}:{license_id}".encode()).decode("ascii")
    return f"Basic {token}"


class OnlineReporter(Reporter):
    """Delivers telemetry over HTTP.

    Args:
        app_store:      App/version store collaborator.
        collector:      Builds the snapshot sent with app info.
        kots_version:   Reported as ``kotsVersion`` and in the User-Agent.
        timeout:        httpx timeout in seconds; None means no timeout.
        submit_spacing: Seconds the send lock stays held after each send.
        transport:      Optional httpx transport (tests use MockTransport).
    """

    def __init__(
        self,
        app_store: AppStore,
        collector: ReportingInfoCollector,
        kots_version: str,
        timeout: float | None = None,
        submit_spacing: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._app_store = app_store
        self._collector = collector
        self._kots_version = kots_version
        self._timeout = timeout
        self._submit_spacing = submit_spacing
        self._transport = transport
        self._send_lock = asyncio.Lock()
        self._release_tasks: set[asyncio.Task[None]] = set()

    @property
    def reporter_name(self) -> str:
        return "online"

    @property
    def user_agent(self) -> str:
        return f"KOTS/{self._kots_version}"

    async def submit_app_info(self, app_id: str) -> None:
        try:
            app = await self._app_store.get_app(app_id)
            license = await self._app_store.get_latest_license_for_app(app.id)
        except AppNotFoundError:
            _log.debug("app_info_skipped_app_not_found", app_id=app_id)
            return

        url = f"{license.endpoint}/kots_metrics/license_instance/info"

        async def _send() -> None:
            info = await self._collector.collect(app_id)
            headers = {
                "Authorization": _basic_auth(license.license_id),
                "Content-Type": "application/json",
                "User-Agent": self.user_agent,
                **reporting_info_headers(info),
            }
            await self._post(url, headers=headers, params=None, expected_status=200, kind="app_info")

        await self._serialized(_send)

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
        url = f"{license.endpoint}/kots_metrics/preflights/{app_id}/{cluster_id}"
        params = {
            "sequence": str(sequence),
            "skipPreflights": _bool(skip_preflights),
            "installStatus": install_status,
            "isCLI": _bool(is_cli),
            "preflightStatus": preflight_status,
            "appStatus": app_status,
            "kotsVersion": self._kots_version,
        }
        headers = {
            "Authorization": license.license_id,
            "User-Agent": self.user_agent,
        }

        async def _send() -> None:
            await self._post(url, headers=headers, params=params, expected_status=201, kind="preflight")

        await self._serialized(_send)

    async def close(self) -> None:
        """Let pending spacing delays finish so the lock is released cleanly."""
        if self._release_tasks:
            await asyncio.gather(*self._release_tasks, return_exceptions=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _serialized(self, send: Callable[[], Awaitable[None]]) -> None:
        await self._send_lock.acquire()
        try:
            await send()
        finally:
            self._release_after_spacing()

    def _release_after_spacing(self) -> None:
        if self._submit_spacing <= 0:
            self._send_lock.release()
            return

        async def _release() -> None:
            try:
                await asyncio.sleep(self._submit_spacing)
            finally:
                self._send_lock.release()

        task = asyncio.create_task(_release(), name="online-reporter-spacing")
        self._release_tasks.add(task)
        task.add_done_callback(self._release_tasks.discard)

    async def _post(
        self,
        url: str,
        headers: dict[str, str],
        params: dict[str, str] | None,
        expected_status: int,
        kind: str,
    ) -> None:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, headers=headers, params=params)
        except httpx.HTTPError as exc:
            reports_submitted_total.labels(reporter=self.reporter_name, kind=kind, outcome="error").inc()
            _log.warning("online_report_http_error", kind=kind, error=str(exc))
            raise ReportTransportError(f"failed to post {kind} report: {exc}") from exc

        if response.status_code != expected_status:
            reports_submitted_total.labels(reporter=self.reporter_name, kind=kind, outcome="rejected").inc()
            _log.warning(
                "online_report_unexpected_status",
                kind=kind,
                status_code=response.status_code,
                body=response.text[:200],
            )
            raise ReportTransportError(
                f"unexpected status code {response.status_code} posting {kind} report",
                status_code=response.status_code,
            )

        reports_submitted_total.labels(reporter=self.reporter_name, kind=kind, outcome="ok").inc()
