"""Prometheus counters for the reporting engine."""

from __future__ import annotations

from prometheus_client import Counter

reports_submitted_total = Counter(
    "kotsreporting_reports_submitted_total",
    "Report submissions by reporter, kind and outcome.",
    ["reporter", "kind", "outcome"],
)

report_events_evicted_total = Counter(
    "kotsreporting_report_events_evicted_total",
    "Events dropped from stored reports to honour the event and size limits.",
    ["report_type"],
)

distribution_detections_total = Counter(
    "kotsreporting_distribution_detections_total",
    "Distribution detector results.",
    ["distribution"],
)
