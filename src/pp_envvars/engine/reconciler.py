"""Reconcile desired environment variable values against a remote store."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Literal

from pp_envvars.engine.errors import RemoteError
from pp_envvars.engine.types import KeyOutcome, Outcome, ReconciliationReport

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, Literal["start", "done"]], None]

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pp_envvars.engine.handlers import RemoteStoreClient
    from pp_envvars.resources.variables import DesiredState, VariableDefinition, VariableValue


def _index_definitions(definitions: Sequence[VariableDefinition]) -> dict[str, str]:
    """Map schema name to definition id; the first definition wins."""
    index: dict[str, str] = {}
    for d in definitions:
        index.setdefault(d.schema_name, d.definition_id)
    return index


class VariableReconciler:
    """Apply the minimal create/update set so remote values match a desired mapping.

    Variables are processed one at a time in caller order. A failure on one
    variable is recorded in the report and never stops the others; the
    caller decides what a failed report means (see
    :meth:`ReconciliationReport.raise_for_failures`).

    With ``dry_run=True`` every read still happens and each variable is
    classified, but no create or update call is issued.
    """

    def __init__(self, client: RemoteStoreClient, *, dry_run: bool = False) -> None:
        self._client = client
        self._dry_run = dry_run

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    def reconcile(
        self,
        desired: DesiredState,
        *,
        progress: ProgressCallback | None = None,
    ) -> ReconciliationReport:
        if not desired:
            logger.info("No desired variables; nothing to reconcile")
            return ReconciliationReport(dry_run=self._dry_run)

        # RemoteError here is a run-level failure and propagates.
        definitions = _index_definitions(self._client.list_definitions())
        logger.debug("Fetched %d definition(s)", len(definitions))

        outcomes: list[KeyOutcome] = []
        for schema_name, value in desired.items():
            if progress is not None:
                progress(schema_name, "start")
            outcome = self._reconcile_one(schema_name, value, definitions.get(schema_name))
            outcomes.append(outcome)
            if outcome.failed:
                logger.warning("%s: %s (%s)", schema_name, outcome.outcome.value, outcome.message)
            else:
                logger.debug("Classified %s as %s", schema_name, outcome.outcome.value)
            if progress is not None:
                progress(schema_name, "done")

        report = ReconciliationReport.from_outcomes(outcomes, dry_run=self._dry_run)
        logger.info(
            "Reconciled %d variable(s): %d created, %d updated, %d unchanged, %d failed",
            len(report.outcomes),
            report.created,
            report.updated,
            report.unchanged,
            report.failed,
        )
        return report

    def _reconcile_one(
        self, schema_name: str, desired: str, definition_id: str | None
    ) -> KeyOutcome:
        if definition_id is None:
            return KeyOutcome(
                schema_name=schema_name,
                outcome=Outcome.DEFINITION_NOT_FOUND,
                desired=desired,
                message=f"No environment variable definition named '{schema_name}'",
            )

        try:
            existing = self._current_value(schema_name, definition_id)

            if existing is None:
                value_id = None
                if not self._dry_run:
                    value_id = self._client.create_value(definition_id, desired).value_id
                return KeyOutcome(
                    schema_name=schema_name,
                    outcome=Outcome.CREATED,
                    desired=desired,
                    definition_id=definition_id,
                    value_id=value_id,
                )

            if existing.value == desired:
                outcome = Outcome.UNCHANGED
            else:
                if not self._dry_run:
                    self._client.update_value(existing.value_id, desired)
                outcome = Outcome.UPDATED
            return KeyOutcome(
                schema_name=schema_name,
                outcome=outcome,
                desired=desired,
                previous=existing.value,
                definition_id=definition_id,
                value_id=existing.value_id,
            )
        except RemoteError as exc:
            return KeyOutcome(
                schema_name=schema_name,
                outcome=Outcome.REMOTE_ERROR,
                desired=desired,
                definition_id=definition_id,
                message=str(exc),
            )

    def _current_value(self, schema_name: str, definition_id: str) -> VariableValue | None:
        values = self._client.list_values(definition_id)
        if not values:
            return None
        if len(values) > 1:
            logger.warning(
                "%s has %d value records; using %s",
                schema_name,
                len(values),
                values[0].value_id,
            )
        return values[0]


def reconcile(
    desired: DesiredState,
    client: RemoteStoreClient,
    *,
    dry_run: bool = False,
    progress: ProgressCallback | None = None,
) -> ReconciliationReport:
    """Reconcile *desired* against *client* and return the report."""
    return VariableReconciler(client, dry_run=dry_run).reconcile(desired, progress=progress)
