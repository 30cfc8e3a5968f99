"""Preflight state derivation from the preflight engine's stored results."""

from __future__ import annotations

import json

import structlog

_log = structlog.get_logger(component="collector.preflight")


def preflight_state(raw_results: str) -> str:
    """Collapse stored preflight results JSON into ``pass``/``warn``/``fail``.

    Returns an empty string when no results were recorded or they cannot be
    parsed.
    """
    if not raw_results:
        return ""
    try:
        results = json.loads(raw_results)
    except ValueError as exc:
        _log.debug("preflight_results_unparseable", error=str(exc))
        return ""
    if not isinstance(results, dict):
        return ""

    if results.get("errors"):
        return "fail"

    state = "pass"
    for result in results.get("results") or []:
        if not isinstance(result, dict):
            continue
        if result.get("isFail"):
            return "fail"
        if result.get("isWarn"):
            state = "warn"
    return state
