"""App/version store collaborator interface.

The admin console's persistence layer implements this; the reporting engine
only reads from it.  Implementations raise ``AppNotFoundError`` when the app
or its license no longer exists.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from kotsreporting.models.apps import (
    App,
    AppStatus,
    Downstream,
    DownstreamVersion,
    GitOpsInfo,
    License,
)


class AppStore(ABC):
    """Read-only view of apps, licenses, downstreams and version archives."""

    @abstractmethod
    async def get_app(self, app_id: str) -> App: ...

    @abstractmethod
    async def get_latest_license_for_app(self, app_id: str) -> License: ...

    @abstractmethod
    async def get_app_status(self, app_id: str) -> AppStatus: ...

    @abstractmethod
    async def list_downstreams_for_app(self, app_id: str) -> list[Downstream]: ...

    @abstractmethod
    async def get_current_downstream_version(self, app_id: str, cluster_id: str) -> DownstreamVersion | None:
        """Return the *deployed* (not latest) version, or None if nothing is deployed."""

    @abstractmethod
    async def get_app_version_archive(self, app_id: str, sequence: int, dest: Path) -> None:
        """Extract the rendered archive of version *sequence* into *dest*."""

    @abstractmethod
    async def get_downstream_gitops(self, app_id: str, cluster_id: str) -> GitOpsInfo | None: ...
