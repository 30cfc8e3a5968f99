"""Tests for AirgapReporter and instance event construction."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from kotsreporting.errors import ObjectStoreError
from kotsreporting.models.apps import App, License
from kotsreporting.models.events import ReportType
from kotsreporting.models.info import DownstreamInfo, ReportingInfo
from kotsreporting.report.store import ReportStore
from kotsreporting.reporter.airgap import AirgapReporter, build_instance_event
from tests.fakes import FakeAppStore, InMemoryObjectStore


def _collector(info: ReportingInfo) -> MagicMock:
    collector = MagicMock()
    collector.collect = AsyncMock(return_value=info)
    return collector


def _reporter(
    objects: InMemoryObjectStore,
    app_store: FakeAppStore,
    info: ReportingInfo | None = None,
) -> tuple[AirgapReporter, ReportStore]:
    store = ReportStore(objects)
    reporter = AirgapReporter(
        app_store=app_store,
        collector=_collector(info or ReportingInfo(instance_id="app-1", cluster_id="c1")),
        report_store=store,
        namespace="kots",
        kots_version="1.109.0",
    )
    return reporter, store


class TestBuildInstanceEvent:
    def test_flattens_snapshot(self) -> None:
        info = ReportingInfo(
            instance_id="app-1",
            cluster_id="c1",
            k8s_version="v1.28.2",
            is_kurl=True,
            kurl_node_count_total=3,
            downstream=DownstreamInfo(cursor="42", channel_id="ch1", sequence=5, status="deployed"),
        )

        event = build_instance_event("lic-1", info, "KOTS/1.109.0", reported_at=1000)

        assert event.reported_at == 1000
        assert event.license_id == "lic-1"
        assert event.cluster_id == "c1"
        assert event.is_kurl is True
        assert event.kurl_node_count_total == 3
        assert event.downstream_channel_sequence == 42
        assert event.downstream_channel_id == "ch1"
        assert event.downstream_sequence == 5
        assert event.install_status == "deployed"
        assert event.user_agent == "KOTS/1.109.0"

    def test_non_numeric_cursor(self) -> None:
        info = ReportingInfo(instance_id="app-1", downstream=DownstreamInfo(cursor="2024.01.01-1"))
        assert build_instance_event("lic", info, "ua").downstream_channel_sequence == 0

    def test_reported_at_defaults_to_now(self) -> None:
        event = build_instance_event("lic", ReportingInfo(instance_id="app-1"), "ua")
        assert event.reported_at > 1_600_000_000_000


class TestSubmitAppInfo:
    async def test_accumulates_events_in_order(self) -> None:
        objects = InMemoryObjectStore()
        reporter, store = _reporter(objects, FakeAppStore())

        for _ in range(3):
            await reporter.submit_app_info("app-1")

        report = await store.read("kots", "my-app", ReportType.INSTANCE)
        assert len(report.events) == 3
        stamps = [e.reported_at for e in report.events]
        assert stamps == sorted(stamps)
        assert all(e.license_id == "lic-1" and e.cluster_id == "c1" for e in report.events)

    async def test_online_app_is_skipped(self) -> None:
        objects = InMemoryObjectStore()
        app_store = FakeAppStore(app=App(id="app-1", slug="my-app", is_airgap=False))
        reporter, _ = _reporter(objects, app_store)

        await reporter.submit_app_info("app-1")

        assert objects.secrets == {}

    async def test_deleted_app_is_noop(self) -> None:
        objects = InMemoryObjectStore()
        app_store = FakeAppStore()
        app_store.deleted = True
        reporter, _ = _reporter(objects, app_store)

        await reporter.submit_app_info("app-1")

        assert objects.secrets == {}

    async def test_store_failure_propagates(self) -> None:
        objects = InMemoryObjectStore()
        objects.fail("create_secret")
        reporter, _ = _reporter(objects, FakeAppStore())

        with pytest.raises(ObjectStoreError):
            await reporter.submit_app_info("app-1")


class TestSubmitPreflightData:
    async def test_appends_preflight_event(self) -> None:
        objects = InMemoryObjectStore()
        reporter, store = _reporter(objects, FakeAppStore())
        license = License(license_id="lic-9", endpoint="https://replicated.test")

        await reporter.submit_preflight_data(license, "app-1", "c1", 4, True, "installed", False, "warn", "ready")

        report = await store.read("kots", "my-app", ReportType.PREFLIGHT)
        [event] = report.events
        assert event.license_id == "lic-9"
        assert event.instance_id == "app-1"
        assert event.sequence == 4
        assert event.skip_preflights is True
        assert event.preflight_status == "warn"
        assert event.user_agent == "KOTS/1.109.0"
        assert ("kots", "kotsadm-my-app-instance-report") not in objects.secrets

    async def test_three_preflights_accumulate_in_submission_order(self) -> None:
        objects = InMemoryObjectStore()
        reporter, store = _reporter(objects, FakeAppStore())
        license = License(license_id="lic-1", endpoint="https://replicated.test")

        for sequence in (7, 8, 9):
            await reporter.submit_preflight_data(license, "app-1", "c1", sequence, False, "", True, "pass", "ready")

        report = await store.read("kots", "my-app", ReportType.PREFLIGHT)
        assert [e.sequence for e in report.events] == [7, 8, 9]
