"""Delivery strategies.

Exports:
    Reporter       -- Abstract base both strategies implement.
    OnlineReporter -- HTTP delivery to the license endpoint.
    AirgapReporter -- Appends to the cluster-local report log.
    reporting_info_headers -- Snapshot to X-Replicated-* header encoding.
"""

from kotsreporting.reporter.airgap import AirgapReporter, build_instance_event
from kotsreporting.reporter.base import Reporter
from kotsreporting.reporter.headers import reporting_info_headers
from kotsreporting.reporter.online import OnlineReporter

__all__ = [
    "AirgapReporter",
    "OnlineReporter",
    "Reporter",
    "build_instance_event",
    "reporting_info_headers",
]
