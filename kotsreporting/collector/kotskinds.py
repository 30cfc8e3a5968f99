"""Reads the deployed version's Installation and HelmChart kinds.

Only the facts reporting needs are extracted: the update cursor and channel
of the ``kots.io/v1beta1`` Installation, and whether each ``kots.io/v1beta1``
HelmChart is installed natively by Helm or rendered by the console.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
import yaml

_log = structlog.get_logger(component="collector.kotskinds")

_KOTS_V1BETA1 = "kots.io/v1beta1"


@dataclass
class KotsKinds:
    update_cursor: str = ""
    channel_id: str = ""
    channel_name: str = ""
    native_helm_installs: int = 0
    repl_helm_installs: int = 0


def load_kots_kinds(path: Path) -> KotsKinds:
    """Scan every YAML document under *path*.

    Files that are not valid YAML are skipped; an archive without an
    Installation yields empty cursor and channel fields.
    """
    kinds = KotsKinds()
    if not path.is_dir():
        return kinds

    for file in sorted(path.rglob("*")):
        if file.suffix not in (".yaml", ".yml") or not file.is_file():
            continue
        try:
            docs = list(yaml.safe_load_all(file.read_text(encoding="utf-8")))
        except (yaml.YAMLError, UnicodeDecodeError) as exc:
            _log.debug("kotskinds_file_skipped", file=str(file), error=str(exc))
            continue
        for doc in docs:
            if isinstance(doc, dict):
                _apply(kinds, doc)
    return kinds


def _apply(kinds: KotsKinds, doc: dict[str, Any]) -> None:
    if doc.get("apiVersion") != _KOTS_V1BETA1:
        return
    spec = doc.get("spec") or {}
    if not isinstance(spec, dict):
        return

    kind = doc.get("kind")
    if kind == "Installation":
        kinds.update_cursor = str(spec.get("updateCursor") or "")
        kinds.channel_id = str(spec.get("channelID") or "")
        kinds.channel_name = str(spec.get("channelName") or "")
    elif kind == "HelmChart":
        if spec.get("useHelmInstall"):
            kinds.native_helm_installs += 1
        else:
            kinds.repl_helm_installs += 1
