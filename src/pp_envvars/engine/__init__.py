"""Reconciliation engine for environment variable values."""

from pp_envvars.engine.errors import (
    AuthenticationError,
    EngineError,
    ReconciliationFailedError,
    RemoteError,
)
from pp_envvars.engine.handlers import RemoteStoreClient
from pp_envvars.engine.reconciler import ProgressCallback, VariableReconciler, reconcile
from pp_envvars.engine.types import KeyOutcome, Outcome, ReconciliationReport

__all__ = [
    "AuthenticationError",
    "EngineError",
    "KeyOutcome",
    "Outcome",
    "ProgressCallback",
    "ReconciliationFailedError",
    "ReconciliationReport",
    "RemoteError",
    "RemoteStoreClient",
    "VariableReconciler",
    "reconcile",
]
