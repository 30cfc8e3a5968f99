"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ReportingConfig:
    """What is reported and where reports are kept."""

    namespace: str = "default"
    airgap: bool = False
    mock: bool = False
    kots_version: str = ""
    kots_install_id: str = ""
    kurl_install_id: str = ""
    embedded_cluster_id: str = ""
    embedded_cluster_version: str = ""


@dataclass
class HTTPConfig:
    """Online reporter transport configuration."""

    timeout_seconds: float | None = None  # None: no client-side timeout
    submit_spacing_seconds: float = 1.0


@dataclass
class ReportStoreConfig:
    """Airgap report store configuration."""

    conflict_retries: int = 0  # 0 keeps last-writer-wins updates


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class KotsReportingConfig:
    """Top-level configuration."""

    reporting: ReportingConfig = field(default_factory=ReportingConfig)
    http: HTTPConfig = field(default_factory=HTTPConfig)
    store: ReportStoreConfig = field(default_factory=ReportStoreConfig)
    log: LogConfig = field(default_factory=LogConfig)
