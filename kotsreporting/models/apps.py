"""Records returned by the app/version store collaborator."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class App:
    """An installed application."""

    id: str
    slug: str
    name: str = ""
    is_airgap: bool = False


@dataclass(frozen=True)
class License:
    """Vendor-issued license.  The id doubles as the online credential."""

    license_id: str
    endpoint: str
    app_slug: str = ""


@dataclass(frozen=True)
class Downstream:
    """A deployment target (cluster) of an app."""

    cluster_id: str
    name: str = ""


@dataclass(frozen=True)
class DownstreamVersion:
    """The version currently deployed to a downstream."""

    sequence: int
    parent_sequence: int
    source: str = ""
    status: str = ""
    preflight_result: str = ""  # raw JSON from the preflight engine
    preflight_skipped: bool = False


@dataclass(frozen=True)
class AppStatus:
    """Aggregated health state of an app's resources."""

    state: str = ""


@dataclass(frozen=True)
class GitOpsInfo:
    """GitOps configuration of a downstream."""

    is_connected: bool = False
    provider: str = ""
