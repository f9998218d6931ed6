"""Verbs and handlers of the ``argbind`` console script.

The console script is itself an argbind command line: each verb below is
registered with its handler in :func:`argbind.cli.app.build_app`.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from argbind.cli.console import console
from argbind.cli.template import TemplateMode, default_filename, render_program
from argbind.core.shapes import option, verb
from argbind.exceptions import TemplateOutputError
from argbind.utils.log import get_logger
from argbind.version import __version__

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# argbind new
# ---------------------------------------------------------------------------

@verb("new", help="Render a starter program that uses argbind")
@dataclass
class NewVerb:
    mode: TemplateMode = option(
        "-m", "--mode",
        default=TemplateMode.VERBS,
        help="Program flavour: 'single' (one options shape) or 'verbs'",
    )
    name: str = option("-n", "--name", default="todo", help="Program name")
    output: Path | None = option(
        "-o", "--output",
        help="File or directory to write to (default: stdout)",
    )
    with_logging: bool = option("--logging", help="Include a structured logging bootstrap")
    force: bool = option("-f", "--force", help="Overwrite an existing file")


class NewHandler:
    """Renders the starter program to a file or to stdout."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    async def execute(self, verb: NewVerb) -> None:
        source = render_program(verb.mode, name=verb.name, with_logging=verb.with_logging)

        if verb.output is None:
            (self._stream or sys.stdout).write(source)
            return

        target = verb.output
        if target.is_dir():
            target = target / default_filename(verb.name)
        if target.exists() and not verb.force:
            raise TemplateOutputError(
                f"{target} already exists.",
                hint="Pass --force to overwrite it.",
            )

        try:
            target.write_text(source, encoding="utf-8")
        except OSError as exc:
            raise TemplateOutputError(f"Cannot write {target}: {exc}") from exc

        logger.info("template_written", path=str(target), mode=verb.mode.value)
        console.labelled("[bold green]Created[/bold green]", str(target))


# ---------------------------------------------------------------------------
# argbind version
# ---------------------------------------------------------------------------

@verb("version", help="Show the argbind version")
@dataclass
class VersionVerb:
    pass


class VersionHandler:
    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    async def execute(self, verb: VersionVerb) -> None:
        (self._stream or sys.stdout).write(f"argbind {__version__}\n")
