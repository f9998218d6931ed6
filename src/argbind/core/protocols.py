"""Protocols (interfaces) consumed by the core layer.

These define the contracts that handlers, runners and the parser adapter
must satisfy.  Core code depends ONLY on these protocols, never on
concrete implementations; the composition root plugs the concrete
parser in.
"""

from __future__ import annotations

from collections.abc import Awaitable, Sequence
from typing import Protocol, TypeVar, runtime_checkable

from argbind.core.models import ParseResult

T_contra = TypeVar("T_contra", contravariant=True)


@runtime_checkable
class CommandLineHandler(Protocol[T_contra]):
    """Handles one parsed options or verb shape.

    Any object with a matching ``execute`` method satisfies this protocol
    structurally (no explicit inheritance required).  ``execute`` is
    normally a coroutine function; a plain return value is accepted too.
    """

    def execute(self, verb: T_contra) -> Awaitable[None] | None:
        """Run the command for the parsed *verb* instance."""
        ...  # pragma: no cover


@runtime_checkable
class CommandLineRunner(Protocol):
    """The single runnable entry point of a composed command line."""

    async def run(self) -> None:
        """Resolve the selected shape and drive it through its handler.

        Raises
        ------
        InvocationError
            When the run cannot dispatch to exactly one handler.
        """
        ...  # pragma: no cover


class ShapeParser(Protocol):
    """Contract for argument parsing backends.

    Implementations must be pure functions of their inputs and the shape
    metadata: no output, no process exit, no exception for malformed
    input.  Failure is reported as a :class:`ParseResult` whose ``value``
    is ``None``.
    """

    def parse_single(self, shape: type, args: Sequence[str]) -> ParseResult:
        """Populate *shape* from *args*.

        Absent when *args* is empty, a required option is missing, an
        unknown flag is given or a value does not convert.
        """
        ...  # pragma: no cover

    def parse_multi(self, shapes: Sequence[type], args: Sequence[str]) -> ParseResult:
        """Select the verb named by the first token and populate it.

        Absent when there is no first token, it names no verb in *shapes*,
        or the selected verb cannot be populated from the remaining tokens.
        """
        ...  # pragma: no cover

    def format_usage(self, shapes: Sequence[type]) -> str:
        """Return human-readable usage text for *shapes*."""
        ...  # pragma: no cover
