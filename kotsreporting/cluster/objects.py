"""Cluster-local object store.

The reporting engine uses the Kubernetes API purely as a namespaced key/value
store (Secrets and ConfigMaps), a node lister and a source of discovery
facts.  ``ClusterObjectStore`` is the narrow interface the rest of the
package depends on; ``KubernetesObjectStore`` implements it with
kubernetes-asyncio.

Object data is always exchanged as raw bytes: the Secret base64 layer of the
Kubernetes wire format is handled here and never leaks to callers.
"""

from __future__ import annotations

import base64
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]
from kubernetes_asyncio.client.exceptions import ApiException  # type: ignore[import-untyped]

from kotsreporting.errors import ObjectConflictError, ObjectStoreError


@dataclass
class ClusterObject:
    """A Secret or ConfigMap reduced to what the engine reads and writes.

    ``resource_version`` is the optimistic-concurrency token.  An empty value
    makes the next update unconditional (last writer wins).
    """

    name: str
    namespace: str
    data: dict[str, bytes] = field(default_factory=dict)
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    resource_version: str = ""


@dataclass(frozen=True)
class NodeInfo:
    """The node facts used by distribution detection and node counts."""

    name: str
    provider_id: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    ready: bool = False


class ClusterObjectStore(ABC):
    """Async get/create/update/list interface over the cluster API.

    ``get_*`` return None when the object does not exist.  Every other
    failure raises ObjectStoreError; a lost update race raises
    ObjectConflictError.
    """

    @abstractmethod
    async def get_secret(self, namespace: str, name: str) -> ClusterObject | None: ...

    @abstractmethod
    async def create_secret(self, obj: ClusterObject) -> None: ...

    @abstractmethod
    async def update_secret(self, obj: ClusterObject) -> None: ...

    @abstractmethod
    async def get_config_map(self, namespace: str, name: str) -> ClusterObject | None: ...

    @abstractmethod
    async def create_config_map(self, obj: ClusterObject) -> None: ...

    @abstractmethod
    async def update_config_map(self, obj: ClusterObject) -> None: ...

    @abstractmethod
    async def list_nodes(self) -> list[NodeInfo]: ...

    @abstractmethod
    async def get_server_version(self) -> str:
        """Return the API server's git version, e.g. ``v1.28.2+k3s1``."""

    @abstractmethod
    async def list_api_group_versions(self) -> list[str]:
        """Return every advertised ``group/version`` string."""

    async def close(self) -> None:
        """Release connections.  The default implementation holds none."""


def _store_error(action: str, name: str, exc: ApiException) -> ObjectStoreError:
    message = f"failed to {action} {name}: {exc.status} {exc.reason}"
    if exc.status == 409:
        return ObjectConflictError(message, status=exc.status)
    return ObjectStoreError(message, status=exc.status)


def _node_ready(node: Any) -> bool:
    conditions = (node.status.conditions if node.status else None) or []
    return any(c.type == "Ready" and c.status == "True" for c in conditions)


class KubernetesObjectStore(ClusterObjectStore):
    """ClusterObjectStore backed by kubernetes-asyncio.

    Args:
        api_client: Shared ApiClient.  When omitted one is created from the
                    already-loaded kube configuration and closed by close().
    """

    def __init__(self, api_client: Any | None = None) -> None:
        self._owns_client = api_client is None
        self._api_client = api_client or k8s_client.ApiClient()
        self._core = k8s_client.CoreV1Api(self._api_client)

    # ------------------------------------------------------------------
    # Secrets
    # ------------------------------------------------------------------

    async def get_secret(self, namespace: str, name: str) -> ClusterObject | None:
        try:
            secret = await self._core.read_namespaced_secret(name=name, namespace=namespace)
        except ApiException as exc:
            if exc.status == 404:
                return None
            raise _store_error("get secret", name, exc) from exc
        data = {k: base64.b64decode(v) for k, v in (secret.data or {}).items()}
        return self._to_object(secret.metadata, namespace, data)

    async def create_secret(self, obj: ClusterObject) -> None:
        body = k8s_client.V1Secret(metadata=self._metadata(obj), data=self._secret_data(obj))
        try:
            await self._core.create_namespaced_secret(namespace=obj.namespace, body=body)
        except ApiException as exc:
            raise _store_error("create secret", obj.name, exc) from exc

    async def update_secret(self, obj: ClusterObject) -> None:
        body = k8s_client.V1Secret(metadata=self._metadata(obj), data=self._secret_data(obj))
        try:
            await self._core.replace_namespaced_secret(name=obj.name, namespace=obj.namespace, body=body)
        except ApiException as exc:
            raise _store_error("update secret", obj.name, exc) from exc

    # ------------------------------------------------------------------
    # ConfigMaps
    # ------------------------------------------------------------------

    async def get_config_map(self, namespace: str, name: str) -> ClusterObject | None:
        try:
            cm = await self._core.read_namespaced_config_map(name=name, namespace=namespace)
        except ApiException as exc:
            if exc.status == 404:
                return None
            raise _store_error("get configmap", name, exc) from exc
        data = {k: v.encode("utf-8") for k, v in (cm.data or {}).items()}
        return self._to_object(cm.metadata, namespace, data)

    async def create_config_map(self, obj: ClusterObject) -> None:
        body = k8s_client.V1ConfigMap(metadata=self._metadata(obj), data=self._config_map_data(obj))
        try:
            await self._core.create_namespaced_config_map(namespace=obj.namespace, body=body)
        except ApiException as exc:
            raise _store_error("create configmap", obj.name, exc) from exc

    async def update_config_map(self, obj: ClusterObject) -> None:
        body = k8s_client.V1ConfigMap(metadata=self._metadata(obj), data=self._config_map_data(obj))
        try:
            await self._core.replace_namespaced_config_map(name=obj.name, namespace=obj.namespace, body=body)
        except ApiException as exc:
            raise _store_error("update configmap", obj.name, exc) from exc

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    async def list_nodes(self) -> list[NodeInfo]:
        try:
            nodes = await self._core.list_node()
        except ApiException as exc:
            raise _store_error("list", "nodes", exc) from exc
        return [
            NodeInfo(
                name=node.metadata.name,
                provider_id=(node.spec.provider_id if node.spec else None) or "",
                labels=dict(node.metadata.labels or {}),
                ready=_node_ready(node),
            )
            for node in nodes.items
        ]

    async def get_server_version(self) -> str:
        try:
            info = await k8s_client.VersionApi(self._api_client).get_code()
        except ApiException as exc:
            raise _store_error("get", "server version", exc) from exc
        return str(info.git_version or "")

    async def list_api_group_versions(self) -> list[str]:
        try:
            group_list = await k8s_client.ApisApi(self._api_client).get_api_versions()
        except ApiException as exc:
            raise _store_error("list", "api groups", exc) from exc
        return [v.group_version for group in group_list.groups or [] for v in group.versions or []]

    async def close(self) -> None:
        if self._owns_client:
            await self._api_client.close()

    # ------------------------------------------------------------------
    # Conversion helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _to_object(metadata: Any, namespace: str, data: dict[str, bytes]) -> ClusterObject:
        return ClusterObject(
            name=metadata.name,
            namespace=metadata.namespace or namespace,
            data=data,
            labels=dict(metadata.labels or {}),
            annotations=dict(metadata.annotations or {}),
            resource_version=metadata.resource_version or "",
        )

    @staticmethod
    def _metadata(obj: ClusterObject) -> Any:
        return k8s_client.V1ObjectMeta(
            name=obj.name,
            namespace=obj.namespace,
            labels=obj.labels or None,
            annotations=obj.annotations or None,
            resource_version=obj.resource_version or None,
        )

    @staticmethod
    def _secret_data(obj: ClusterObject) -> dict[str, str]:
        return {k: base64.b64encode(v).decode("ascii") for k, v in obj.data.items()}

    @staticmethod
    def _config_map_data(obj: ClusterObject) -> dict[str, str]:
        return {k: v.decode("utf-8") for k, v in obj.data.items()}
