"""Report wire/storage encoding: ``base64(gzip(json(report)))``.

The JSON document is ``{"type": "<variant>", "events": [...]}``.  Documents
written before the tag was persisted (``{"events": [...]}``) decode with the
caller-supplied expected type.
"""

from __future__ import annotations

import base64
import binascii
import gzip
import json
import zlib
from typing import Any

from kotsreporting.errors import ReportDecodeError, ReportEncodeError, ReportTypeMismatchError
from kotsreporting.models.events import ReportType
from kotsreporting.report.report import REPORT_CLASSES, Report


def encode_report(report: Report) -> bytes:
    """Serialize *report*, keeping only its newest ``event_limit`` events."""
    events = report.events[-report.event_limit :] if report.event_limit else []
    payload = {
        "type": report.type.value,
        "events": [event.to_dict() for event in events],
    }
    try:
        raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise ReportEncodeError(f"failed to marshal {report.type} report: {exc}") from exc
    return base64.b64encode(gzip.compress(raw))


def decode_report(data: bytes | str, expected_type: ReportType | None = None) -> Report:
    """Inverse of encode_report.

    Raises:
        ReportDecodeError: *data* is not a valid encoded report, or carries no
            type tag and *expected_type* was not given.
        ReportTypeMismatchError: the stored tag disagrees with *expected_type*.
    """
    try:
        raw = gzip.decompress(base64.b64decode(data, validate=True))
        payload = json.loads(raw)
    except (binascii.Error, OSError, EOFError, zlib.error, ValueError) as exc:
        raise ReportDecodeError(f"failed to decode report: {exc}") from exc

    if not isinstance(payload, dict) or not isinstance(payload.get("events") or [], list):
        raise ReportDecodeError("failed to decode report: unexpected document shape")

    report_type = _resolve_type(payload.get("type"), expected_type)
    report_cls = REPORT_CLASSES[report_type]
    try:
        events = [report_cls.event_cls.from_dict(item) for item in payload.get("events") or []]
    except (TypeError, AttributeError) as exc:
        raise ReportDecodeError(f"failed to decode {report_type} events: {exc}") from exc
    return report_cls(events=events)


def _resolve_type(stored: Any, expected: ReportType | None) -> ReportType:
    if stored is None:
        if expected is None:
            raise ReportDecodeError("report has no type tag and no expected type was given")
        return expected
    try:
        report_type = ReportType(stored)
    except ValueError as exc:
        raise ReportDecodeError(f"unknown report type {stored!r}") from exc
    if expected is not None and report_type is not expected:
        raise ReportTypeMismatchError(expected=expected.value, actual=report_type.value)
    return report_type
