"""Custom exception hierarchy for argbind.

Parse failures are **not** exceptions: the parser adapter reports them as
an absent value and the runners decide what to do with that absence.
Everything else that can go wrong while wiring or running a command line
maps to a subclass of :class:`ArgbindError` so that the CLI error boundary
can render a clean message and pick an exit code.

Hierarchy
---------
ArgbindError
├── ConsoleUnavailableError
├── TemplateOutputError
├── ShapeDefinitionError
├── RegistrationError
│   ├── DuplicateVerbError
│   ├── RunnerConflictError
│   └── MissingRegistrationError
└── InvocationError
    ├── ArgumentsInvalidError
    ├── VerbTypeMismatchError
    ├── UnregisteredVerbError
    ├── MissingHandlerError
    ├── HandlerContractError
    └── RunnerStateError
"""

from __future__ import annotations


class ArgbindError(Exception):
    """Base exception for all argbind errors.

    Every error condition raised by the library maps to a subclass of
    this exception.  The optional *hint* carries the corrective action
    shown to the user below the message.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Shape declarations ----------------------------------------------------

class ShapeDefinitionError(ArgbindError, ValueError):
    """Raised when an options or verb shape is declared incorrectly."""


# --- Registration (composition root) ----------------------------------------

class RegistrationError(ArgbindError):
    """Raised when the composition root is wired inconsistently."""


class DuplicateVerbError(RegistrationError):
    """Raised when the same shape is registered more than once."""


class RunnerConflictError(RegistrationError):
    """Raised when more than one runnable entry point would be registered."""


class MissingRegistrationError(RegistrationError):
    """Raised by a required lookup whose registration does not exist."""


# --- Invocation (runner layer) ----------------------------------------------

class InvocationError(ArgbindError):
    """Raised when a run cannot dispatch to exactly one handler."""


class ArgumentsInvalidError(InvocationError):
    """Raised when the command line arguments did not produce a value.

    *reasons* are the parser's complaints; *usage* is the usage text of
    the shape(s) involved.  Both are folded into :attr:`hint` and kept
    separately so the CLI boundary can choose what to render.
    """

    def __init__(
        self,
        message: str,
        *,
        reasons: tuple[str, ...] | list[str] = (),
        usage: str | None = None,
    ) -> None:
        self.reasons: tuple[str, ...] = tuple(reasons)
        self.usage: str | None = usage
        lines = [*self.reasons, usage] if usage else list(self.reasons)
        super().__init__(message, hint="\n".join(lines) if lines else None)


class VerbTypeMismatchError(InvocationError):
    """Raised when the selected verb is not of the declared base type."""


class UnregisteredVerbError(InvocationError):
    """Raised when the selected verb type has no registered descriptor."""


class MissingHandlerError(InvocationError):
    """Raised when a verb was registered without a handler."""


class HandlerContractError(InvocationError):
    """Raised when a handler does not expose a callable ``execute``."""


class RunnerStateError(InvocationError):
    """Raised when a runner is invoked more than once."""


# --- Console script ---------------------------------------------------------

class ConsoleUnavailableError(ArgbindError):
    """Raised when Rich is required but not installed."""


class TemplateOutputError(ArgbindError):
    """Raised when a rendered starter program cannot be written."""
