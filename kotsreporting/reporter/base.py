"""Reporter contract shared by the online and airgap strategies."""

from __future__ import annotations

from abc import ABC, abstractmethod

from kotsreporting.models.apps import License


class Reporter(ABC):
    """Delivers telemetry for an app.

    Implementations raise a ReportingError subclass on failure and return
    silently when the app no longer exists.  Callers treat every failure as
    best effort: log it and carry on.
    """

    @property
    @abstractmethod
    def reporter_name(self) -> str:
        """Short identifier used in metrics and logs."""

    @abstractmethod
    async def submit_app_info(self, app_id: str) -> None:
        """Report a fresh instance snapshot of *app_id*."""

    @abstractmethod
    async def submit_preflight_data(
        self,
        license: License,
        app_id: str,
        cluster_id: str,
        sequence: int,
        skip_preflights: bool,
        install_status: str,
        is_cli: bool,
        preflight_status: str,
        app_status: str,
    ) -> None:
        """Report the outcome of a preflight run."""

    async def close(self) -> None:
        """Wait for or cancel any background work.  No-op by default."""
