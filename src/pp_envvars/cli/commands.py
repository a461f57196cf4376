"""CLI command implementations."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Literal

import typer

from pp_envvars.cli import app
from pp_envvars.cli.errors import handle_error

if TYPE_CHECKING:
    from pp_envvars.config.schema import Config
    from pp_envvars.core.provider import DataverseProvider
    from pp_envvars.engine.types import ReconciliationReport

ConfigPath = Annotated[
    Path,
    typer.Option("--config", "-c", help="Path to the configuration file."),
]

ValuesPath = Annotated[
    Path | None,
    typer.Option("--values", help="Desired-state JSON file (overrides 'values' in config)."),
]

NoColor = Annotated[
    bool,
    typer.Option("--no-color", help="Disable colored output."),
]

AutoApprove = Annotated[
    bool,
    typer.Option("--auto-approve", help="Skip interactive approval."),
]


def _use_color(no_color: bool) -> bool:
    """Determine whether to use color output."""
    return not (no_color or os.environ.get("NO_COLOR"))


def _apply_with_progress(
    cfg: Config,
    values: Path | None,
    provider: DataverseProvider,
    total: int,
    *,
    color: bool,
) -> ReconciliationReport:
    """Apply with a Rich progress bar and per-variable status lines."""
    from rich.console import Console
    from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

    from pp_envvars.config import apply

    console = Console(no_color=not color)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Applying", total=total)

        def on_progress(schema_name: str, event: Literal["start", "done"]) -> None:
            if event == "start":
                progress.update(task, description=f"{schema_name}: Reconciling...")
            elif event == "done":
                progress.console.print(f"  {schema_name}: done")
                progress.advance(task)

        return apply(cfg, values, provider=provider, progress=on_progress)


def _fail_on_errors(report: ReconciliationReport, *, color: bool) -> None:
    """Exit 1 and list every failing variable when the report has failures."""
    from pp_envvars.engine.errors import ReconciliationFailedError

    if not report.ok:
        exc = ReconciliationFailedError(report)
        raise typer.Exit(handle_error(exc, color=color))


@app.command()
def plan(
    config: ConfigPath = Path("pp-envvars.yaml"),
    values: ValuesPath = None,
    out: Annotated[
        Path | None,
        typer.Option("--out", "-o", help="Save the plan report to a JSON file."),
    ] = None,
    no_color: NoColor = False,
) -> None:
    """Show the changes required to reach the desired values."""
    from pp_envvars.cli.formatting import format_plan_summary, format_report
    from pp_envvars.config import load
    from pp_envvars.config import plan as plan_fn

    color = _use_color(no_color)
    try:
        cfg = load(config)
        report = plan_fn(cfg, values)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    typer.echo(format_report(report, color=color))
    typer.echo()
    typer.echo(format_plan_summary(report, color=color))

    if out is not None:
        report.save(out)
        typer.echo(f"\nPlan saved to {out}")

    _fail_on_errors(report, color=color)
    if report.has_changes:
        raise typer.Exit(2)


@app.command(name="apply")
def apply_cmd(
    config: ConfigPath = Path("pp-envvars.yaml"),
    values: ValuesPath = None,
    auto_approve: AutoApprove = False,
    no_color: NoColor = False,
) -> None:
    """Create or update environment variable values to match the desired state."""
    from pp_envvars.config import connect, load

    color = _use_color(no_color)
    try:
        cfg = load(config)
        provider = connect(cfg)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    # One provider (one token, one session) for both passes.
    try:
        _plan_and_apply(cfg, values, provider, auto_approve=auto_approve, color=color)
    finally:
        provider.close()


def _plan_and_apply(
    cfg: Config,
    values: Path | None,
    provider: DataverseProvider,
    *,
    auto_approve: bool,
    color: bool,
) -> None:
    from pp_envvars.cli.formatting import format_apply_summary, format_plan_summary, format_report
    from pp_envvars.config import plan as plan_fn

    try:
        planned = plan_fn(cfg, values, provider=provider)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    if not planned.has_changes:
        _fail_on_errors(planned, color=color)
        typer.echo("No changes. Variables are up-to-date.")
        raise typer.Exit(0)

    typer.echo(format_report(planned, color=color))
    typer.echo()
    typer.echo(format_plan_summary(planned, color=color))
    typer.echo()

    if not auto_approve:
        try:
            typer.confirm("Do you want to apply these changes?", abort=True)
        except typer.Abort as e:
            typer.echo("Apply canceled.", err=True)
            raise typer.Exit(1) from e

    try:
        report = _apply_with_progress(cfg, values, provider, len(planned.outcomes), color=color)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    typer.echo()
    typer.echo(format_apply_summary(report, color=color))
    _fail_on_errors(report, color=color)


@app.command()
def validate(
    config: ConfigPath = Path("pp-envvars.yaml"),
    values: ValuesPath = None,
    no_color: NoColor = False,
) -> None:
    """Validate the configuration and desired-state files without connecting."""
    from pp_envvars.cli.formatting import styler
    from pp_envvars.config import desired_state, load

    color = _use_color(no_color)
    try:
        cfg = load(config)
        desired = desired_state(cfg, values)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    count = len(desired)
    typer.echo(
        styler(color)(
            f"Configuration is valid. {count} variable{'s' if count != 1 else ''} declared.",
            fg="green",
        )
    )
