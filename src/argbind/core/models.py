"""Domain models for argbind.

All models are **frozen** dataclasses, immutable value objects.  They are
created during composition (arguments, descriptors) or once per run
(parse results, the boxed verb) and never mutated afterwards.
"""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from argbind.core.binding import HandlerBinding

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Argument vector
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class CommandLineArguments:
    """The raw argument tokens for this process run (without the program name)."""

    value: Sequence[str]
    """Normalised to a ``tuple`` on construction."""

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", tuple(self.value))

    def __len__(self) -> int:
        return len(self.value)

    def __bool__(self) -> bool:
        return len(self.value) > 0


# ---------------------------------------------------------------------------
# Parse outcome
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ParseResult:
    """Outcome of one parse attempt.

    ``value is None`` is the normal "not parsed" signal.  When a verb was
    selected but could not be populated, *shape* still names it so that
    diagnostics can point at the right usage text.
    """

    value: Any
    """The populated shape instance, or ``None``."""

    shape: type | None
    """The shape that was (or would have been) populated."""

    errors: tuple[str, ...] = ()
    """Human-readable reasons the parse failed.  Empty on success."""

    @property
    def ok(self) -> bool:
        return self.value is not None

    @classmethod
    def failure(cls, shape: type | None, *errors: str) -> ParseResult:
        return cls(value=None, shape=shape, errors=tuple(errors))


# ---------------------------------------------------------------------------
# Type-erased verb box
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class AnyVerb:
    """Whichever verb was selected on the command line, or ``None``.

    Callers that need a concrete type narrow with :meth:`as_type` instead
    of casting the untyped :attr:`value`.
    """

    value: object | None

    def is_type(self, shape: type) -> bool:
        return isinstance(self.value, shape)

    def as_type(self, shape: type[T]) -> T | None:
        """Return :attr:`value` when it is an instance of *shape*, else ``None``."""
        if isinstance(self.value, shape):
            return self.value
        return None

    def __bool__(self) -> bool:
        return self.value is not None


# ---------------------------------------------------------------------------
# Registry entries
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class VerbDescriptor:
    """A registered verb shape and the binding to its handler, if any."""

    verb_shape: type
    binding: HandlerBinding | None = field(default=None, compare=False)

    @property
    def handler_shape(self) -> type | None:
        """Class of the handler registered for :attr:`verb_shape`."""
        if self.binding is None:
            return None
        return self.binding.handler_shape


# ---------------------------------------------------------------------------
# Runner lifecycle
# ---------------------------------------------------------------------------

class RunnerState(enum.Enum):
    """Lifecycle of a single-shot runner."""

    UNINVOKED = "uninvoked"
    RESOLVING = "resolving"
    DISPATCHED = "dispatched"
    FAILED = "failed"
