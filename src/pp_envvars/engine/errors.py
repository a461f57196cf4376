"""Engine error types."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pp_envvars.engine.types import ReconciliationReport


class EngineError(Exception):
    """Base exception for engine errors."""


class RemoteError(EngineError):
    """Raised when a remote store call fails.

    ``status_code`` is the HTTP status of a non-2xx response, or ``None`` when
    the request never produced a response (connection error, timeout).
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        self.message = message
        prefix = f"HTTP {status_code}: " if status_code is not None else ""
        super().__init__(f"{prefix}{message}")


class AuthenticationError(EngineError):
    """Raised when an access token cannot be acquired."""


class ReconciliationFailedError(EngineError):
    """Raised when a reconciliation run finished with per-variable failures.

    Carries the full report so callers can show what succeeded alongside
    every failing variable.
    """

    def __init__(self, report: ReconciliationReport) -> None:
        self.report = report
        failed = report.failed
        super().__init__(f"{failed} variable{'s' if failed != 1 else ''} failed to reconcile")
