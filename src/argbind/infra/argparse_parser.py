"""argparse backed implementation of :class:`~argbind.core.protocols.ShapeParser`.

This module is the **only** place in the codebase that builds
``argparse`` parsers.  argparse likes to print and exit on bad input;
here every such path is turned into an absent :class:`ParseResult`, so
nothing is written to a stream and the process is never terminated.
"""

from __future__ import annotations

import argparse
import difflib
import enum
import os.path
import sys
import typing
from collections.abc import Callable, Sequence
from typing import Any

from argbind.core.models import ParseResult
from argbind.core.shapes import (
    OptionField,
    is_verb,
    option_fields,
    require_verb_spec,
    unwrap_optional,
    verb_spec,
)
from argbind.utils.typenames import type_name


class _ParseFailure(Exception):
    """Internal signal raised instead of printing and exiting."""


class _QuietArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> typing.NoReturn:
        raise _ParseFailure(message)

    def exit(self, status: int = 0, message: str | None = None) -> typing.NoReturn:
        raise _ParseFailure(message.strip() if message else f"parser exited with status {status}")


# ---------------------------------------------------------------------------
# Field type -> argparse keyword arguments
# ---------------------------------------------------------------------------

def _converter(annotation: Any) -> Callable[[str], Any] | None:
    if annotation is str or annotation is Any:
        return None
    if isinstance(annotation, type) and issubclass(annotation, enum.Enum):
        enum_cls = annotation

        def convert(raw: str) -> Any:
            try:
                return enum_cls[raw]
            except KeyError:
                return enum_cls(raw)

        convert.__name__ = enum_cls.__name__
        return convert
    if callable(annotation) and typing.get_origin(annotation) is None:
        return annotation
    return None


def _argument_kwargs(field: OptionField) -> dict[str, Any]:
    annotation = unwrap_optional(field.annotation)
    kwargs: dict[str, Any] = {
        "dest": field.name,
        "help": field.spec.help,
    }

    if field.is_flag:
        # Presence flags: a field defaulting to True is switched off by its flag.
        default = bool(field.default) if field.default is not None else False
        kwargs["action"] = "store_false" if default else "store_true"
        kwargs["default"] = default
        return kwargs

    kwargs["default"] = field.default
    kwargs["required"] = field.spec.required
    if field.spec.metavar:
        kwargs["metavar"] = field.spec.metavar

    if typing.get_origin(annotation) is list:
        item_args = typing.get_args(annotation)
        kwargs["nargs"] = "+"
        converter = _converter(item_args[0] if item_args else str)
    else:
        converter = _converter(annotation)

    if converter is not None:
        kwargs["type"] = converter
    return kwargs


# ---------------------------------------------------------------------------
# Adapter
# ---------------------------------------------------------------------------

class ArgparseShapeParser:
    """Concrete :class:`ShapeParser` backed by :mod:`argparse`.

    Usage::

        parser = ArgparseShapeParser(prog="todo")
        result = parser.parse_multi((AddVerb, CompleteVerb), ["add", "-t", "42"])
        if result.ok:
            ...

    Parameters
    ----------
    prog:
        Program name used in usage text.  ``None`` lets argparse derive it
        from ``sys.argv[0]``.
    allow_abbrev:
        Whether unambiguous prefixes of long flags are accepted.
    """

    def __init__(self, prog: str | None = None, *, allow_abbrev: bool = False) -> None:
        self._prog = prog
        self._allow_abbrev = allow_abbrev

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    def parse_single(self, shape: type, args: Sequence[str]) -> ParseResult:
        """Populate *shape* from *args*; absent when *args* is empty or invalid."""
        tokens = list(args)
        if not tokens:
            return ParseResult.failure(shape, "No command line arguments were supplied.")
        return self._populate(shape, tokens, prog=self._prog)

    def parse_multi(self, shapes: Sequence[type], args: Sequence[str]) -> ParseResult:
        """Select a verb by the first token of *args*, then populate it."""
        candidates = tuple(shapes)
        by_name: dict[str, type] = {}
        for shape in candidates:
            for name in require_verb_spec(shape).names:
                by_name.setdefault(name, shape)

        if not candidates:
            return ParseResult.failure(None, "No verbs are registered.")

        tokens = list(args)
        if not tokens:
            return ParseResult.failure(None, "No verb was selected.")

        token, rest = tokens[0], tokens[1:]
        shape = by_name.get(token)
        if shape is None:
            errors = [f"Unknown verb '{token}'."]
            suggestions = difflib.get_close_matches(token, list(by_name), n=1)
            if suggestions:
                errors.append(f"Did you mean '{suggestions[0]}'?")
            return ParseResult.failure(None, *errors)

        return self._populate(shape, rest, prog=self._verb_prog(shape))

    def format_usage(self, shapes: Sequence[type]) -> str:
        """Render usage text for one options shape or a set of verbs."""
        candidates = tuple(shapes)
        if len(candidates) == 1:
            shape = candidates[0]
            prog = self._verb_prog(shape) if is_verb(shape) else self._prog
            return self._build(shape, prog=prog).format_help().rstrip()

        lines = [f"usage: {self._prog_name()} <verb> [options]", "", "verbs:"]
        for shape in candidates:
            spec = require_verb_spec(shape)
            label = spec.name
            if spec.aliases:
                label = f"{label} ({', '.join(spec.aliases)})"
            lines.append(f"  {label:<20} {spec.help or ''}".rstrip())
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _prog_name(self) -> str:
        return self._prog or os.path.basename(sys.argv[0])

    def _verb_prog(self, shape: type) -> str:
        spec = verb_spec(shape)
        name = spec.name if spec is not None else type_name(shape)
        return f"{self._prog_name()} {name}"

    def _build(self, shape: type, *, prog: str | None) -> _QuietArgumentParser:
        spec = verb_spec(shape)
        parser = _QuietArgumentParser(
            prog=prog,
            description=spec.help if spec is not None else None,
            add_help=False,
            allow_abbrev=self._allow_abbrev,
        )
        for field in option_fields(shape):
            parser.add_argument(*field.spec.flags, **_argument_kwargs(field))
        return parser

    def _populate(self, shape: type, tokens: list[str], *, prog: str | None) -> ParseResult:
        parser = self._build(shape, prog=prog)
        try:
            namespace = parser.parse_args(tokens)
        except _ParseFailure as exc:
            return ParseResult.failure(shape, str(exc))

        try:
            instance = shape(**vars(namespace))
        except (TypeError, ValueError) as exc:
            return ParseResult.failure(shape, f"{type_name(shape)}: {exc}")
        return ParseResult(value=instance, shape=shape)
