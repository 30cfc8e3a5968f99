"""Report event data structures and enumerations."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from enum import StrEnum
from typing import Any, Self


class ReportType(StrEnum):
    """Closed set of report variants."""

    INSTANCE = "instance"
    PREFLIGHT = "preflight"


class _EventMixin:
    """Dict conversion shared by both event variants."""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)  # type: ignore[call-overload]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Build an event from its JSON form, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}  # type: ignore[arg-type]
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass(frozen=True)
class InstanceReportEvent(_EventMixin):
    """One observation of the running instance.

    Immutable: an event is never changed after it is appended to a report.
    ``reported_at`` is a unix timestamp in milliseconds.
    """

    reported_at: int = 0
    license_id: str = ""
    instance_id: str = ""
    cluster_id: str = ""
    app_status: str = ""
    is_kurl: bool = False
    kurl_node_count_total: int = 0
    kurl_node_count_ready: int = 0
    k8s_version: str = ""
    k8s_distribution: str = ""
    user_agent: str = ""
    kots_install_id: str = ""
    kurl_install_id: str = ""
    embedded_cluster_id: str = ""
    embedded_cluster_version: str = ""
    is_gitops_enabled: bool = False
    gitops_provider: str = ""
    downstream_channel_id: str = ""
    downstream_channel_sequence: int = 0
    downstream_channel_name: str = ""
    downstream_sequence: int | None = None
    downstream_source: str = ""
    install_status: str = ""
    preflight_state: str = ""
    skip_preflights: bool = False
    repl_helm_installs: int = 0
    native_helm_installs: int = 0


@dataclass(frozen=True)
class PreflightReportEvent(_EventMixin):
    """Outcome of one preflight run."""

    reported_at: int = 0
    license_id: str = ""
    instance_id: str = ""
    cluster_id: str = ""
    sequence: int = 0
    skip_preflights: bool = False
    install_status: str = ""
    is_cli: bool = False
    preflight_status: str = ""
    app_status: str = ""
    user_agent: str = ""


ReportEvent = InstanceReportEvent | PreflightReportEvent
