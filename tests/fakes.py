"""In-memory collaborators for tests.

InMemoryObjectStore mimics the API server closely enough for the report
store: objects are copied on the way in and out, resourceVersion increments
on every write, and an update carrying a stale resourceVersion gets a 409.
"""

from __future__ import annotations

import copy
import shutil
from pathlib import Path

from kotsreporting.appstore import AppStore
from kotsreporting.cluster.objects import ClusterObject, ClusterObjectStore, NodeInfo
from kotsreporting.errors import AppNotFoundError, ObjectConflictError, ObjectStoreError
from kotsreporting.models.apps import (
    App,
    AppStatus,
    Downstream,
    DownstreamVersion,
    GitOpsInfo,
    License,
)


class InMemoryObjectStore(ClusterObjectStore):
    def __init__(
        self,
        nodes: list[NodeInfo] | None = None,
        server_version: str = "v1.28.2",
        group_versions: list[str] | None = None,
    ) -> None:
        self.secrets: dict[tuple[str, str], ClusterObject] = {}
        self.config_maps: dict[tuple[str, str], ClusterObject] = {}
        self.nodes = nodes or []
        self.server_version = server_version
        self.group_versions = group_versions or ["v1", "apps/v1"]
        self.failing: dict[str, Exception | None] = {}
        self.calls: list[str] = []
        self._version = 0

    # -- helpers --------------------------------------------------------

    def fail(self, *methods: str, error: Exception | None = None) -> None:
        """Make *methods* raise *error*, or a 500 ObjectStoreError when omitted."""
        for method in methods:
            self.failing[method] = error

    def _check(self, method: str) -> None:
        self.calls.append(method)
        if method in self.failing:
            raise self.failing[method] or ObjectStoreError(f"{method} failed", status=500)

    def _next_version(self) -> str:
        self._version += 1
        return str(self._version)

    def put_secret(self, namespace: str, name: str, data: dict[str, bytes]) -> None:
        self.secrets[(namespace, name)] = ClusterObject(
            name=name, namespace=namespace, data=dict(data), resource_version=self._next_version()
        )

    def _create(self, bucket: dict[tuple[str, str], ClusterObject], obj: ClusterObject) -> None:
        key = (obj.namespace, obj.name)
        if key in bucket:
            raise ObjectStoreError(f"{obj.name} already exists", status=409)
        stored = copy.deepcopy(obj)
        stored.resource_version = self._next_version()
        bucket[key] = stored

    def _update(self, bucket: dict[tuple[str, str], ClusterObject], obj: ClusterObject) -> None:
        key = (obj.namespace, obj.name)
        current = bucket.get(key)
        if current is None:
            raise ObjectStoreError(f"{obj.name} not found", status=404)
        if obj.resource_version and obj.resource_version != current.resource_version:
            raise ObjectConflictError(f"{obj.name} was modified", status=409)
        stored = copy.deepcopy(obj)
        stored.resource_version = self._next_version()
        bucket[key] = stored

    # -- ClusterObjectStore ---------------------------------------------

    async def get_secret(self, namespace: str, name: str) -> ClusterObject | None:
        self._check("get_secret")
        obj = self.secrets.get((namespace, name))
        return copy.deepcopy(obj) if obj is not None else None

    async def create_secret(self, obj: ClusterObject) -> None:
        self._check("create_secret")
        self._create(self.secrets, obj)

    async def update_secret(self, obj: ClusterObject) -> None:
        self._check("update_secret")
        self._update(self.secrets, obj)

    async def get_config_map(self, namespace: str, name: str) -> ClusterObject | None:
        self._check("get_config_map")
        obj = self.config_maps.get((namespace, name))
        return copy.deepcopy(obj) if obj is not None else None

    async def create_config_map(self, obj: ClusterObject) -> None:
        self._check("create_config_map")
        self._create(self.config_maps, obj)

    async def update_config_map(self, obj: ClusterObject) -> None:
        self._check("update_config_map")
        self._update(self.config_maps, obj)

    async def list_nodes(self) -> list[NodeInfo]:
        self._check("list_nodes")
        return list(self.nodes)

    async def get_server_version(self) -> str:
        self._check("get_server_version")
        return self.server_version

    async def list_api_group_versions(self) -> list[str]:
        self._check("list_api_group_versions")
        return list(self.group_versions)


class FakeAppStore(AppStore):
    """AppStore serving one app; archive files are copied from *archive_dir*."""

    def __init__(
        self,
        app: App | None = None,
        license: License | None = None,
        status: str = "ready",
        downstreams: list[Downstream] | None = None,
        version: DownstreamVersion | None = None,
        archive_dir: Path | None = None,
        gitops: GitOpsInfo | None = None,
    ) -> None:
        self.app = app or App(id="app-1", slug="my-app", name="My App", is_airgap=True)
        self.license = license or License(license_id="lic-1", endpoint="https://replicated.test")
        self.status = status
        self.downstreams = downstreams if downstreams is not None else [Downstream(cluster_id="cluster-1")]
        self.version = version
        self.archive_dir = archive_dir
        self.gitops = gitops
        self.deleted = False

    def _require(self, app_id: str) -> None:
        if self.deleted or app_id != self.app.id:
            raise AppNotFoundError(f"app {app_id} not found")

    async def get_app(self, app_id: str) -> App:
        self._require(app_id)
        return self.app

    async def get_latest_license_for_app(self, app_id: str) -> License:
        self._require(app_id)
        return self.license

    async def get_app_status(self, app_id: str) -> AppStatus:
        self._require(app_id)
        return AppStatus(state=self.status)

    async def list_downstreams_for_app(self, app_id: str) -> list[Downstream]:
        self._require(app_id)
        return list(self.downstreams)

    async def get_current_downstream_version(self, app_id: str, cluster_id: str) -> DownstreamVersion | None:
        self._require(app_id)
        return self.version

    async def get_app_version_archive(self, app_id: str, sequence: int, dest: Path) -> None:
        self._require(app_id)
        if self.archive_dir is not None:
            shutil.copytree(self.archive_dir, dest, dirs_exist_ok=True)

    async def get_downstream_gitops(self, app_id: str, cluster_id: str) -> GitOpsInfo | None:
        self._require(app_id)
        return self.gitops
