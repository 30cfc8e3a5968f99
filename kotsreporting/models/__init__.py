"""Core data structures for kotsreporting."""

from kotsreporting.models.apps import (
    App,
    AppStatus,
    Downstream,
    DownstreamVersion,
    GitOpsInfo,
    License,
)
from kotsreporting.models.config import KotsReportingConfig
from kotsreporting.models.events import (
    InstanceReportEvent,
    PreflightReportEvent,
    ReportEvent,
    ReportType,
)
from kotsreporting.models.info import DownstreamInfo, ReportingInfo

__all__ = [
    "App",
    "AppStatus",
    "Downstream",
    "DownstreamInfo",
    "DownstreamVersion",
    "GitOpsInfo",
    "InstanceReportEvent",
    "KotsReportingConfig",
    "License",
    "PreflightReportEvent",
    "ReportEvent",
    "ReportType",
    "ReportingInfo",
]
