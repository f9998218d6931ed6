"""CLI error boundary and the ``argbind`` console script.

This module is the **sole error boundary** for command lines built with
argbind.  :func:`run_command_line` runs a composed
:class:`~argbind.composition.CommandLineApp`, catches
:class:`~argbind.exceptions.ArgbindError`, ``KeyboardInterrupt`` and any
unexpected ``Exception``, renders user-friendly messages via Rich and
returns well-defined exit codes.

Architecture notes
------------------
* No dispatch logic lives here: resolution and invocation belong to the
  composition root and the runners.
* This module is the only place that translates between the library's
  exceptions and the OS process exit code.
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Sequence

import structlog

from argbind.cli import exit_codes
from argbind.cli.commands import NewHandler, NewVerb, VersionHandler, VersionVerb
from argbind.cli.console import console
from argbind.composition import CommandLineApp, CommandLineBuilder
from argbind.config import Settings, get_settings
from argbind.exceptions import ArgbindError, ArgumentsInvalidError
from argbind.infra.argparse_parser import ArgparseShapeParser
from argbind.utils.log import configure_logging


# ---------------------------------------------------------------------------
# Error boundary
# ---------------------------------------------------------------------------

def run_command_line(app: CommandLineApp, *, settings: Settings | None = None) -> int:
    """Run *app* and return the OS process exit code.

    Parameters
    ----------
    app:
        A fully composed command line.
    settings:
        Explicit settings; ``None`` reads them from the environment.
        Logging is configured from them unless the caller already did;
        :attr:`Settings.show_usage` decides whether usage text is shown.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when the handler completed (or there
        was nothing to run), otherwise the code of the failure family.
    """
    settings = settings or get_settings()
    if not structlog.is_configured():
        configure_logging(settings)
    try:
        asyncio.run(app.run_async())
    except ArgumentsInvalidError as exc:
        console.error(str(exc))
        for reason in exc.reasons:
            console.plain(f"  {reason}")
        if settings.show_usage and exc.usage:
            console.print()
            console.plain(exc.usage)
        return exit_codes.USAGE_ERROR
    except ArgbindError as exc:
        console.error(str(exc))
        if exc.hint:
            console.hint(exc.hint)
        return exit_codes.GENERAL_ERROR
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        return exit_codes.KEYBOARD_INTERRUPT
    except Exception as exc:  # noqa: BLE001
        console.error("unexpected failure in the command handler.")
        console.plain(f"  {type(exc).__name__}: {exc}")
        return exit_codes.UNEXPECTED_ERROR
    return exit_codes.SUCCESS


def run_and_exit(app: CommandLineApp) -> None:
    """Run *app* through the error boundary and exit the process with its code."""
    sys.exit(run_command_line(app))


# ---------------------------------------------------------------------------
# The argbind console script
# ---------------------------------------------------------------------------

def build_app(argv: Sequence[str]) -> CommandLineApp:
    """Compose the ``argbind`` command line for *argv*."""
    return (
        CommandLineBuilder()
        .add_arguments(argv, ArgparseShapeParser(prog="argbind"))
        .add_verb(NewVerb, NewHandler)
        .add_verb(VersionVerb, VersionHandler)
        .build()
    )


def main(argv: list[str] | None = None) -> int:
    """Run the argbind CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    app = build_app(sys.argv[1:] if argv is None else argv)
    return run_command_line(app)


def cli() -> None:
    """Top-level entry point invoked by the console script."""
    sys.exit(main())
