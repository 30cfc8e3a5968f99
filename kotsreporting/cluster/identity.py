"""Persistent cluster identity.

The cluster id is a random token stored in the ``kotsadm-id`` ConfigMap the
first time it is needed.  Every later snapshot reads it back so the vendor
sees one stable instance per cluster.
"""

from __future__ import annotations

from uuid import uuid4

import structlog

from kotsreporting.cluster.objects import ClusterObject, ClusterObjectStore

_log = structlog.get_logger(component="cluster.identity")

KOTSADM_ID_CONFIGMAP = "kotsadm-id"
KOTSADM_ID_FIELD = "id"

KOTSADM_ID_LABELS = {
    "kots.io/kotsadm": "true",
    "velero.io/exclude-from-backup": "true",
}


def new_cluster_id() -> str:
    return str(uuid4())


class ClusterIdentity:
    """Reads, and on first use creates, the persisted cluster id."""

    def __init__(self, objects: ClusterObjectStore, namespace: str) -> None:
        self._objects = objects
        self._namespace = namespace

    async def get_cluster_id(self) -> str:
        """Return the persisted cluster id.  Never raises.

        A missing ConfigMap (or one without an id) gets a fresh id written
        back.  When the ConfigMap cannot be read at all (API error or an
        unreachable API server), a fresh id is used for this snapshot only;
        the instance may then appear as new upstream.
        """
        try:
            existing = await self._objects.get_config_map(self._namespace, KOTSADM_ID_CONFIGMAP)
        except Exception as exc:
            _log.debug("cluster_id_read_failed", error=str(exc))
            return new_cluster_id()

        if existing is not None:
            stored = existing.data.get(KOTSADM_ID_FIELD, b"").decode("utf-8").strip()
            if stored:
                return stored

        cluster_id = new_cluster_id()
        try:
            if existing is None:
                await self._objects.create_config_map(
                    ClusterObject(
                        name=KOTSADM_ID_CONFIGMAP,
                        namespace=self._namespace,
                        data={KOTSADM_ID_FIELD: cluster_id.encode("utf-8")},
                        labels=dict(KOTSADM_ID_LABELS),
                    )
                )
            else:
                existing.data[KOTSADM_ID_FIELD] = cluster_id.encode("utf-8")
                await self._objects.update_config_map(existing)
            _log.info("cluster_id_created", cluster_id=cluster_id)
        except Exception as exc:
            _log.debug("cluster_id_persist_failed", error=str(exc))
        return cluster_id
