"""Report package — report variants, codec and guarded store.

Submodules:
    report -- Report sum type (instance, preflight) with event-limit eviction.
    codec  -- base64(gzip(json)) encoding with a persisted type tag.
    store  -- ReportStore: per-variant locked read-merge-write into Secrets.
"""

from kotsreporting.report.codec import decode_report, encode_report
from kotsreporting.report.report import (
    REPORT_EVENT_LIMIT,
    REPORT_SIZE_LIMIT,
    InstanceReport,
    PreflightReport,
    Report,
    empty_report,
)
from kotsreporting.report.store import ReportStore

__all__ = [
    "REPORT_EVENT_LIMIT",
    "REPORT_SIZE_LIMIT",
    "InstanceReport",
    "PreflightReport",
    "Report",
    "ReportStore",
    "decode_report",
    "empty_report",
    "encode_report",
]
