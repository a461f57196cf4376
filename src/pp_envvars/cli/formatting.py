"""Plan and apply output rendering (Terraform-style)."""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

import typer

from pp_envvars.engine.types import Outcome

if TYPE_CHECKING:
    from collections.abc import Callable

    from pp_envvars.engine.types import KeyOutcome, ReconciliationReport


class _OutcomeStyle(NamedTuple):
    color: str
    symbol: str


_OUTCOME_STYLES: dict[str, _OutcomeStyle] = {
    "created": _OutcomeStyle("green", "+"),
    "updated": _OutcomeStyle("yellow", "~"),
    "unchanged": _OutcomeStyle("bright_black", " "),
    "definition-not-found": _OutcomeStyle("red", "!"),
    "remote-error": _OutcomeStyle("red", "!"),
}

_OUTCOME_DESC: dict[str, str] = {
    "created": "will be created",
    "updated": "will be updated in-place",
    "unchanged": "is up-to-date",
    "definition-not-found": "has no definition",
    "remote-error": "could not be reconciled",
}


def styler(color: bool) -> Callable[..., str]:
    """Return ``typer.style`` when *color* is True, otherwise a passthrough."""
    if color:
        return typer.style
    return lambda text, **_kw: text


def _format_value(value: str | None) -> str:
    if value is None:
        return "null"
    return f'"{value}"'


# ---------------------------------------------------------------------------
# Per-variable rendering
# ---------------------------------------------------------------------------


def format_outcome(outcome: KeyOutcome, *, color: bool = True) -> str:
    """Render a single variable outcome as a two-line block."""
    style = styler(color)
    key = outcome.outcome.value
    s = _OUTCOME_STYLES[key]
    header = style(f"  # {outcome.schema_name} {_OUTCOME_DESC[key]}", bold=True, fg=s.color)

    if outcome.outcome == Outcome.UPDATED:
        detail = f"{_format_value(outcome.previous)} -> {_format_value(outcome.desired)}"
    elif outcome.failed:
        detail = outcome.message or ""
    else:
        detail = _format_value(outcome.desired)

    if outcome.failed:
        body = style(f"  {s.symbol} {detail}", fg=s.color)
    else:
        body = style(f"  {s.symbol} {outcome.schema_name} = {detail}", fg=s.color)
    return f"{header}\n{body}"


def format_report(report: ReconciliationReport, *, color: bool = True) -> str:
    """Render every actionable or failed variable; up-to-date ones are omitted."""
    blocks = [
        format_outcome(o, color=color) for o in report.outcomes if o.outcome != Outcome.UNCHANGED
    ]
    if not blocks:
        return "No changes. Variables are up-to-date."
    return "\n\n".join(blocks)


def format_failures(report: ReconciliationReport) -> list[str]:
    """One ``schema_name: kind: message`` line per failing variable."""
    return [f"{o.schema_name}: {o.outcome.value}: {o.message}" for o in report.failures]


# ---------------------------------------------------------------------------
# Summaries
# ---------------------------------------------------------------------------

_PLAN_VERBS = ("to add", "to change", "unchanged")
_APPLY_VERBS = ("added", "changed", "unchanged")
_SUMMARY_COLORS = ("green", "yellow", None)


def _format_summary(report: ReconciliationReport, verbs: tuple[str, ...], *, color: bool) -> str:
    """Build the ``N verb, N verb, N verb`` part of a summary line."""
    style = styler(color)
    counts = (report.created, report.updated, report.unchanged)
    parts = [
        style(f"{n} {verb}", fg=fg) if n and color and fg else f"{n} {verb}"
        for n, verb, fg in zip(counts, verbs, _SUMMARY_COLORS, strict=True)
    ]
    summary = ", ".join(parts)
    if report.failed:
        summary += ", " + style(f"{report.failed} failed", fg="red")
    return summary


def format_plan_summary(report: ReconciliationReport, *, color: bool = True) -> str:
    """Render ``Plan: 2 to add, 1 to change, 3 unchanged.``"""
    return f"Plan: {_format_summary(report, _PLAN_VERBS, color=color)}."


def format_apply_summary(report: ReconciliationReport, *, color: bool = True) -> str:
    """Render ``Apply complete! Variables: 2 added, 0 changed, 1 unchanged.``"""
    style = styler(color)
    if report.ok:
        header = style("Apply complete!", fg="green", bold=True)
    else:
        header = style("Apply finished with errors!", fg="red", bold=True)
    return f"{header} Variables: {_format_summary(report, _APPLY_VERBS, color=color)}."
