"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from kotsreporting.models.config import (
    HTTPConfig,
    KotsReportingConfig,
    LogConfig,
    ReportingConfig,
    ReportStoreConfig,
)


def _env(key: str, default: str = "", fallback: str | None = None) -> str:
    """Read ``KOTSREPORTING_<key>``, then the platform-injected *fallback* name."""
    val = os.environ.get(f"KOTSREPORTING_{key}")
    if val is None and fallback is not None:
        val = os.environ.get(fallback)
    return default if val is None else val


def _env_bool(key: str, default: bool = False, fallback: str | None = None) -> bool:
    val = _env(key, str(default).lower(), fallback)
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _env_float(key: str, default: float, min_val: float | None = None, max_val: float | None = None) -> float:
    val = float(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _optional_timeout(value: float) -> float | None:
    return value if value > 0 else None


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def load_config() -> KotsReportingConfig:
    """Load configuration from KOTSREPORTING_* environment variables.

    The install identifiers, namespace and connectivity flags fall back to
    the variables the admin console deployment already injects.
    """
    from kotsreporting import __version__

    return KotsReportingConfig(
        reporting=ReportingConfig(
            namespace=_env("NAMESPACE", "default", fallback="POD_NAMESPACE"),
            airgap=_env_bool("AIRGAP", False, fallback="DISABLE_OUTBOUND_CONNECTIONS"),
            mock=_env_bool("MOCK", False, fallback="USE_MOCK_REPORTING"),
            kots_version=_env("KOTS_VERSION", __version__),
            kots_install_id=_env("KOTS_INSTALL_ID", "", fallback="KOTS_INSTALL_ID"),
            kurl_install_id=_env("KURL_INSTALL_ID", "", fallback="KURL_INSTALL_ID"),
            embedded_cluster_id=_env("EMBEDDED_CLUSTER_ID", "", fallback="EMBEDDED_CLUSTER_ID"),
            embedded_cluster_version=_env("EMBEDDED_CLUSTER_VERSION", "", fallback="EMBEDDED_CLUSTER_VERSION"),
        ),
        http=HTTPConfig(
            timeout_seconds=_optional_timeout(_env_float("HTTP_TIMEOUT", 0.0, min_val=0.0)),
            submit_spacing_seconds=_env_float("SUBMIT_SPACING", 1.0, min_val=0.0, max_val=10.0),
        ),
        store=ReportStoreConfig(
            conflict_retries=_env_int("STORE_CONFLICT_RETRIES", 0, min_val=0, max_val=5),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )
