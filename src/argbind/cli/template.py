"""Starter programs rendered by ``argbind new``.

Two flavours are available: a single options shape with one handler, and
a set of verbs (a small TODO tool) dispatched by type.  Both send their
logs to stderr; with logging enabled the handlers also log their work.
"""

from __future__ import annotations

import enum
import keyword

from argbind.exceptions import TemplateOutputError


class TemplateMode(enum.Enum):
    """Which starter program to render."""

    SINGLE = "single"
    VERBS = "verbs"


_HEADER = '''\
"""Command line entry point for {name}."""

from __future__ import annotations

import sys
from dataclasses import dataclass
{third_party}
from argbind import CommandLineBuilder, option{verb_import}
from argbind.cli.app import run_and_exit
from argbind.utils.log import configure_logging
{logging_setup}'''

_SINGLE_BODY = '''\


@dataclass
class SimpleOptions:
    file_path: str = option("-p", "--path", required=True, help="A simple file path string property")


class SimpleHandler:
    async def execute(self, verb: SimpleOptions) -> None:
{log_line}        # Replace with the code that processes SimpleOptions.
        raise NotImplementedError


def main() -> None:
    configure_logging()
    app = CommandLineBuilder().add_options(SimpleOptions, SimpleHandler, args=sys.argv[1:]).build()
    run_and_exit(app)
'''

_VERBS_BODY = '''\


@verb("add", help="Add a new TODO item")
@dataclass
class AddVerb:
    todo_id: str = option("-t", "--todo", required=True, help="The ID of the TODO")


@verb("complete", help="Mark an existing TODO item as completed")
@dataclass
class CompleteVerb:
    todo_id: str = option("-t", "--todo", required=True, help="The ID of the TODO")


class AddHandler:
    async def execute(self, verb: AddVerb) -> None:
{log_add}        # Replace with the code that adds a TODO item.
        raise NotImplementedError


class CompleteHandler:
    async def execute(self, verb: CompleteVerb) -> None:
{log_complete}        # Replace with the code that marks a TODO item as complete.
        raise NotImplementedError


def main() -> None:
    configure_logging()
    app = (
        CommandLineBuilder()
        .add_arguments(sys.argv[1:])
        .add_verb(AddVerb, AddHandler)
        .add_verb(CompleteVerb, CompleteHandler)
        .build()
    )
    run_and_exit(app)
'''

_FOOTER = '''\


if __name__ == "__main__":
    main()
'''


def _validate_name(name: str) -> str:
    stripped = name.strip()
    if not stripped or any(ch.isspace() for ch in stripped) or '"' in stripped:
        raise TemplateOutputError(
            f"Invalid program name: {name!r}",
            hint="Use a single word such as 'todo'.",
        )
    return stripped


def render_program(
    mode: TemplateMode = TemplateMode.VERBS,
    *,
    name: str = "todo",
    with_logging: bool = False,
) -> str:
    """Return the source of a starter program.

    Raises
    ------
    TemplateOutputError
        If *name* is not a single word.
    """
    name = _validate_name(name)
    header = _HEADER.format(
        name=name,
        verb_import=", verb" if mode is TemplateMode.VERBS else "",
        third_party="\nimport structlog\n" if with_logging else "",
        logging_setup="\nlogger = structlog.get_logger(__name__)\n" if with_logging else "",
    )

    def log_line(event: str, field: str) -> str:
        if not with_logging:
            return ""
        return f'        logger.info("{event}", {field}=verb.{field})\n'

    if mode is TemplateMode.SINGLE:
        body = _SINGLE_BODY.format(log_line=log_line("processing", "file_path"))
    else:
        body = _VERBS_BODY.format(
            log_add=log_line("adding", "todo_id"),
            log_complete=log_line("completing", "todo_id"),
        )

    return header + body + _FOOTER


def default_filename(name: str) -> str:
    """File name for a program called *name* (``todo`` -> ``todo.py``)."""
    stem = _validate_name(name).replace("-", "_")
    if keyword.iskeyword(stem):
        stem = f"{stem}_cli"
    return f"{stem}.py"
