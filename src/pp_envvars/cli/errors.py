"""Map exceptions to clean stderr messages and exit codes."""

from __future__ import annotations

import typer


def _err(msg: str, *, fg: str | None) -> None:
    """Print a styled message to stderr."""
    typer.echo(typer.style(msg, fg=fg), err=True)


def handle_error(exc: Exception, *, color: bool = True) -> int:
    """Print a clean error message to stderr and return an exit code.

    All errors map to exit code 1.  No tracebacks are printed.
    """
    from pp_envvars.cli.formatting import format_failures
    from pp_envvars.config.loader import ConfigError
    from pp_envvars.engine.errors import (
        AuthenticationError,
        ReconciliationFailedError,
        RemoteError,
    )

    fg = typer.colors.RED if color else None

    if isinstance(exc, ConfigError):
        _err(f"Configuration error: {exc}", fg=fg)
    elif isinstance(exc, AuthenticationError):
        _err(f"Authentication failed: {exc}", fg=fg)
    elif isinstance(exc, RemoteError):
        _err(f"Remote error: {exc}", fg=fg)
    elif isinstance(exc, ReconciliationFailedError):
        _err(f"Reconciliation failed: {exc}", fg=fg)
        report = exc.report
        parts = [
            f"{n} {verb}"
            for n, verb in (
                (report.created, "added"),
                (report.updated, "changed"),
                (report.unchanged, "unchanged"),
            )
            if n
        ]
        if parts:
            _err(f"  Partial result: {', '.join(parts)}.", fg=fg)
        for line in format_failures(report):
            _err(f"  - {line}", fg=fg)
    else:
        _err(f"Error: {exc}", fg=fg)

    return 1
