"""Command-line entry point: the `pp-envvars` Typer app and its global options."""

from __future__ import annotations

import logging
import os
import sys

import typer

from pp_envvars import __version__

app = typer.Typer(
    name="pp-envvars",
    no_args_is_help=True,
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"pp-envvars {__version__}")
        raise typer.Exit


_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"
_VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
# -v shows per-run summaries, -vv adds per-variable classification and paging.
_VERBOSITY = (logging.INFO, logging.DEBUG)


def _resolve_level(verbose: int) -> int | None:
    """Pick the ``pp_envvars`` log level; ``PP_LOG`` takes precedence over ``-v``."""
    name = os.environ.get("PP_LOG", "").upper()
    if not name:
        if verbose <= 0:
            return None
        return _VERBOSITY[min(verbose, len(_VERBOSITY)) - 1]
    if name not in _VALID_LEVELS:
        print(
            f"WARNING: invalid PP_LOG level '{name}', "
            f"expected one of {', '.join(sorted(_VALID_LEVELS))}; defaulting to INFO",
            file=sys.stderr,
        )
        return logging.INFO
    return getattr(logging, name)


def _configure_logging(verbose: int) -> None:
    """Send ``pp_envvars`` log records to stderr at the requested level.

    Only the package logger is raised. The root logger stays at WARNING, so
    the HTTP and token libraries stay quiet and a bearer token never ends up
    in debug output. Without ``-v`` or ``PP_LOG`` logging is left untouched.
    """
    level = _resolve_level(verbose)
    if level is None:
        return
    logging.basicConfig(
        level=logging.WARNING,
        format=_LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )
    logging.getLogger("pp_envvars").setLevel(level)


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase log verbosity (-v info, -vv debug).",
    ),
) -> None:
    """Reconcile Power Platform environment variable values."""
    _ = version
    _configure_logging(verbose)


# Register commands after app is created to avoid circular imports.
from pp_envvars.cli import commands as _commands  # noqa: E402, F401
