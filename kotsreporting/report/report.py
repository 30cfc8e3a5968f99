"""Report variants: bounded, ordered event logs.

``Report`` is a closed sum type over ``InstanceReport`` and
``PreflightReport``.  The variant tag (``report_type``) is persisted with the
events so decoding never depends on the caller knowing what it stored.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar

from kotsreporting.errors import ReportTypeMismatchError
from kotsreporting.models.events import InstanceReportEvent, PreflightReportEvent, ReportType

REPORT_EVENT_LIMIT = 4000
REPORT_SIZE_LIMIT = 1024 * 1024  # encoded bytes
REPORT_STORAGE_FIELD = "report"
REPORT_STORAGE_KEY_FORMAT = "kotsadm-{app_slug}-{report_type}-report"


@dataclass
class Report:
    """Ordered events of a single variant, oldest first.

    Invariant: ``len(events) <= event_limit`` after every mutation.
    """

    events: list[Any] = field(default_factory=list)

    report_type: ClassVar[ReportType]
    event_cls: ClassVar[type]
    event_limit: ClassVar[int] = REPORT_EVENT_LIMIT
    size_limit: ClassVar[int] = REPORT_SIZE_LIMIT
    storage_field: ClassVar[str] = REPORT_STORAGE_FIELD

    @property
    def type(self) -> ReportType:
        return self.report_type

    def storage_key_for(self, app_slug: str) -> str:
        """Name of the object holding this report for *app_slug*."""
        return REPORT_STORAGE_KEY_FORMAT.format(app_slug=app_slug, report_type=self.report_type.value)

    def append_events(self, other: Report) -> None:
        """Append *other*'s events, then keep only the newest ``event_limit``.

        Raises:
            ReportTypeMismatchError: *other* is a different variant.  The
                receiver is left unmodified.
        """
        if type(other) is not type(self):
            raise ReportTypeMismatchError(expected=self.report_type.value, actual=str(other.type))
        self.events = _newest([*self.events, *other.events], self.event_limit)

    def drop_oldest(self, count: int = 1) -> None:
        del self.events[:count]


@dataclass
class InstanceReport(Report):
    """Log of instance snapshots recorded on every app-info submission."""

    events: list[InstanceReportEvent] = field(default_factory=list)

    report_type: ClassVar[ReportType] = ReportType.INSTANCE
    event_cls: ClassVar[type] = InstanceReportEvent


@dataclass
class PreflightReport(Report):
    """Log of preflight outcomes."""

    events: list[PreflightReportEvent] = field(default_factory=list)

    report_type: ClassVar[ReportType] = ReportType.PREFLIGHT
    event_cls: ClassVar[type] = PreflightReportEvent


REPORT_CLASSES: dict[ReportType, type[Report]] = {
    ReportType.INSTANCE: InstanceReport,
    ReportType.PREFLIGHT: PreflightReport,
}


def empty_report(report_type: ReportType) -> Report:
    return REPORT_CLASSES[report_type]()


def _newest(events: list[Any], limit: int) -> list[Any]:
    if len(events) <= limit:
        return events
    return events[len(events) - limit :]
