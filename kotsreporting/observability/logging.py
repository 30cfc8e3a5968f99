"""Structured logging configuration using structlog.

Inside the admin console the engine logs JSON lines; the operator CLI can
ask for human-readable console output instead.  Submissions bind the app id
into the structlog context so every line emitted while reporting on an app
carries it.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import structlog


def setup_logging(level: str = "info", *, console: bool = False) -> None:
    """Configure structlog output to stderr.

    Args:
        level:   Minimum level name (debug, info, warning, error).
        console: Render for terminals instead of JSON.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    renderer: structlog.types.Processor = (
        structlog.dev.ConsoleRenderer() if console else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound with a component name."""
    return structlog.get_logger(component=component)  # type: ignore[return-value]


@contextmanager
def app_log_context(app_id: str, **extra: str) -> Iterator[None]:
    """Bind *app_id* (and *extra*) to every log line emitted in this context."""
    with structlog.contextvars.bound_contextvars(app_id=app_id, **extra):
        yield
