"""Guarded, bounded persistence of reports in the cluster-local object store.

Each (app, report type) pair maps to one Secret holding the encoded report
under the ``report`` field.  An append is a read-merge-write:

1. take the lock for the report's variant,
2. read the Secret; when it is missing, create it with just the new events,
3. otherwise decode the stored report (a missing field is an empty report),
   append, re-encode and write it back.

A decode failure aborts the append before anything is written.

Locks are per variant, not per app: two apps' instance reports contend for
the same lock in one process.  Nothing coordinates separate processes.  By
default the write back is unconditional, so two replicas appending at once
can lose one update.  With ``conflict_retries`` > 0 the write carries the
resourceVersion that was read and a 409 restarts the read-merge-write, at
most that many times.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace

import structlog

from kotsreporting.cluster.objects import ClusterObject, ClusterObjectStore
from kotsreporting.errors import ObjectConflictError
from kotsreporting.models.events import ReportType
from kotsreporting.observability.metrics import report_events_evicted_total
from kotsreporting.report.codec import decode_report, encode_report
from kotsreporting.report.report import Report, empty_report

_log = structlog.get_logger(component="report.store")

REPORT_LABELS = {
    "kots.io/kotsadm": "true",
    "kots.io/backup": "velero",
}


class ReportStore:
    """Appends reports to, and reads them back from, the object store.

    Construct one per process and share it: the per-variant locks only
    serialize appends that go through the same instance.
    """

    def __init__(self, objects: ClusterObjectStore, conflict_retries: int = 0) -> None:
        self._objects = objects
        self._conflict_retries = max(conflict_retries, 0)
        self._locks: dict[ReportType, asyncio.Lock] = {t: asyncio.Lock() for t in ReportType}

    def lock_for(self, report_type: ReportType) -> asyncio.Lock:
        return self._locks[report_type]

    async def append(self, namespace: str, app_slug: str, report: Report) -> None:
        """Merge *report*'s events into the stored report for *app_slug*.

        Raises:
            ReportDecodeError: the stored report is corrupt; nothing written.
            ObjectStoreError: the object store rejected the read or write.
        """
        async with self._locks[report.type]:
            attempt = 0
            while True:
                try:
                    await self._append_once(namespace, app_slug, report)
                    return
                except ObjectConflictError:
                    if attempt >= self._conflict_retries:
                        raise
                    attempt += 1
                    _log.info(
                        "report_append_conflict_retry",
                        app_slug=app_slug,
                        report_type=report.type.value,
                        attempt=attempt,
                    )

    async def read(self, namespace: str, app_slug: str, report_type: ReportType) -> Report:
        """Return the stored report, or an empty one when nothing is stored."""
        base = empty_report(report_type)
        existing = await self._objects.get_secret(namespace, base.storage_key_for(app_slug))
        if existing is None:
            return base
        stored = existing.data.get(base.storage_field)
        if not stored:
            return base
        return decode_report(stored, report_type)

    async def _append_once(self, namespace: str, app_slug: str, report: Report) -> None:
        key = report.storage_key_for(app_slug)
        existing = await self._objects.get_secret(namespace, key)

        if existing is None:
            fresh = empty_report(report.type)
            fresh.append_events(report)
            await self._objects.create_secret(
                ClusterObject(
                    name=key,
                    namespace=namespace,
                    data={report.storage_field: self._encode_within_limits(fresh, len(report.events))},
                    labels=dict(REPORT_LABELS),
                )
            )
            _log.debug("report_created", app_slug=app_slug, report_type=report.type.value, events=len(fresh.events))
            return

        merged = empty_report(report.type)
        stored = existing.data.get(report.storage_field)
        if stored:
            merged = decode_report(stored, report.type)
        incoming = len(merged.events) + len(report.events)
        merged.append_events(report)

        updated = replace(
            existing,
            data={**existing.data, report.storage_field: self._encode_within_limits(merged, incoming)},
            resource_version=existing.resource_version if self._conflict_retries else "",
        )
        await self._objects.update_secret(updated)
        _log.debug("report_updated", app_slug=app_slug, report_type=report.type.value, events=len(merged.events))

    def _encode_within_limits(self, report: Report, incoming: int) -> bytes:
        """Encode *report*, dropping its oldest events until it fits ``size_limit``.

        *incoming* is the event count before the event-limit truncation, used
        to account for every evicted event.
        """
        encoded = encode_report(report)
        while len(encoded) > report.size_limit and report.events:
            report.drop_oldest()
            encoded = encode_report(report)

        evicted = incoming - len(report.events)
        if evicted > 0:
            report_events_evicted_total.labels(report_type=report.type.value).inc(evicted)
            _log.debug("report_events_evicted", report_type=report.type.value, evicted=evicted)
        return encoded
