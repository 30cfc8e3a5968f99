"""Exception hierarchy for the reporting engine.

Every public operation raises a subclass of ``ReportingError``.  Callers are
expected to log and continue: telemetry failures must never affect the
application being reported on.
"""

from __future__ import annotations


class ReportingError(Exception):
    """Base class for all reporting failures."""


class ReportTypeMismatchError(ReportingError):
    """Raised when events of one report variant are merged into another."""

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(f"cannot append {actual} report to {expected} report")
        self.expected = expected
        self.actual = actual


class ReportEncodeError(ReportingError):
    """Raised when a report cannot be serialized."""


class ReportDecodeError(ReportingError):
    """Raised when a stored report cannot be decoded.

    The append that hit this error is aborted and stored data is left intact.
    """


class ReportTransportError(ReportingError):
    """Raised when an online submission fails or gets an unexpected status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ObjectStoreError(ReportingError):
    """Raised when the cluster-local object store rejects a call."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ObjectConflictError(ObjectStoreError):
    """Raised when an update lost an optimistic-concurrency race (HTTP 409)."""


class AppNotFoundError(ReportingError):
    """Raised by app store implementations when an app or license is gone.

    Reporters treat this as a silent no-op: the app was deleted mid-flight.
    """
