"""Engine types (outcomes and reconciliation report)."""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, computed_field

from pp_envvars.engine.errors import ReconciliationFailedError


class Outcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    DEFINITION_NOT_FOUND = "definition-not-found"
    REMOTE_ERROR = "remote-error"

    @property
    def is_failure(self) -> bool:
        return self in (Outcome.DEFINITION_NOT_FOUND, Outcome.REMOTE_ERROR)


class KeyOutcome(BaseModel):
    """Result of reconciling one desired variable."""

    model_config = ConfigDict(frozen=True)

    schema_name: str
    outcome: Outcome
    desired: str
    previous: str | None = None
    definition_id: str | None = None
    value_id: str | None = None
    message: str | None = None

    @property
    def failed(self) -> bool:
        return self.outcome.is_failure


class ReconciliationReport(BaseModel):
    """Immutable summary of a reconciliation run.

    Outcomes keep the order in which variables were processed. Counts are
    derived from the outcomes, so a report is always internally consistent.
    """

    model_config = ConfigDict(frozen=True)

    outcomes: tuple[KeyOutcome, ...] = ()
    dry_run: bool = False

    @classmethod
    def from_outcomes(
        cls, outcomes: list[KeyOutcome], *, dry_run: bool = False
    ) -> ReconciliationReport:
        return cls(outcomes=tuple(outcomes), dry_run=dry_run)

    def _count(self, outcome: Outcome) -> int:
        return sum(1 for o in self.outcomes if o.outcome == outcome)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def created(self) -> int:
        return self._count(Outcome.CREATED)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def updated(self) -> int:
        return self._count(Outcome.UPDATED)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def unchanged(self) -> int:
        return self._count(Outcome.UNCHANGED)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def succeeded(self) -> int:
        return self.created + self.updated + self.unchanged

    @computed_field  # type: ignore[prop-decorator]
    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def failures(self) -> list[KeyOutcome]:
        return [o for o in self.outcomes if o.failed]

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def has_changes(self) -> bool:
        return any(o.outcome in (Outcome.CREATED, Outcome.UPDATED) for o in self.outcomes)

    def summary(self) -> dict[str, int]:
        counts = {o.value: 0 for o in Outcome}
        for o in self.outcomes:
            counts[o.outcome.value] += 1
        return counts

    def raise_for_failures(self) -> None:
        """Raise ``ReconciliationFailedError`` if any variable failed."""
        if not self.ok:
            raise ReconciliationFailedError(self)

    def save(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = self.model_dump(mode="json")
        path.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")
