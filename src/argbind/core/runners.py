"""Runners: the uniform execution entry point of a composed command line.

Two variants exist:

* :class:`CommandRunner` serves a single options shape with one handler.
* :class:`VerbBaseRunner` serves several verb shapes and dispatches the
  selected one to the handler registered for its exact type.

Both are single-shot.  Every failure is logged and raised; a runner never
calls a handler with a missing value and never silently does nothing.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Generic, TypeVar

from argbind.core.binding import HandlerBinding
from argbind.core.models import AnyVerb, ParseResult, RunnerState
from argbind.core.registry import VerbRegistry
from argbind.exceptions import (
    ArgumentsInvalidError,
    InvocationError,
    MissingHandlerError,
    RunnerStateError,
    UnregisteredVerbError,
    VerbTypeMismatchError,
)
from argbind.utils.log import get_logger
from argbind.utils.typenames import type_name, type_name_of

logger = get_logger(__name__)

T = TypeVar("T")
TBase = TypeVar("TBase")


class _SingleShotRunner:
    """Shared lifecycle bookkeeping for both runner variants."""

    def __init__(self) -> None:
        self._state: RunnerState = RunnerState.UNINVOKED

    @property
    def state(self) -> RunnerState:
        return self._state

    def _begin(self) -> None:
        if self._state is not RunnerState.UNINVOKED:
            raise RunnerStateError(
                f"{type(self).__name__} was already invoked (state: {self._state.value}).",
                hint="Build a new command line for every run.",
            )
        self._state = RunnerState.RESOLVING

    def _resolving(self, resolve: Callable[[], T]) -> T:
        """Call *resolve*; the runner is FAILED if it raises."""
        try:
            return resolve()
        except BaseException:
            self._state = RunnerState.FAILED
            raise

    def _fail(self, exc: InvocationError, event: str, **fields: Any) -> InvocationError:
        self._state = RunnerState.FAILED
        logger.error(event, error=str(exc), **fields)
        return exc


# ---------------------------------------------------------------------------
# Single command
# ---------------------------------------------------------------------------

class CommandRunner(_SingleShotRunner):
    """Runs the one handler registered for a single options shape.

    Parameters
    ----------
    shape:
        The options class.
    resolve:
        Returns the memoised :class:`ParseResult` for *shape*.
    binding:
        The handler binding for *shape*.
    usage:
        Optional callable returning usage text for diagnostics.
    """

    def __init__(
        self,
        shape: type,
        resolve: Callable[[], ParseResult],
        binding: HandlerBinding,
        *,
        usage: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._shape = shape
        self._resolve = resolve
        self._binding = binding
        self._usage = usage

    @property
    def shape(self) -> type:
        return self._shape

    async def run(self) -> None:
        """Resolve the options instance and hand it to the handler.

        Raises
        ------
        ArgumentsInvalidError
            If the command line did not produce an options instance.
        """
        self._begin()
        result = self._resolving(self._resolve)
        if result.value is None:
            raise self._fail(
                ArgumentsInvalidError(
                    f"Command line arguments are not valid for {type_name(self._shape)}.",
                    reasons=result.errors,
                    usage=self._usage() if self._usage else None,
                ),
                "command_line_arguments_invalid",
                options_type=type_name(self._shape),
                reasons=list(result.errors),
            )

        self._state = RunnerState.DISPATCHED
        await self._binding.dispatch(result.value)


# ---------------------------------------------------------------------------
# Multiple verbs behind a common base
# ---------------------------------------------------------------------------

class VerbBaseRunner(_SingleShotRunner, Generic[TBase]):
    """Dispatches the selected verb to the handler for its exact type.

    The runner also acts as the handler for ``TBase`` itself: calling
    :meth:`execute` with any registered verb instance routes it the same
    way :meth:`run` does.

    Parameters
    ----------
    base:
        The common base every selectable verb must be an instance of.
        ``object`` accepts any registered verb.
    any_verb:
        Returns the memoised :class:`AnyVerb` box.
    registry:
        The registered verb descriptors.
    parse_result:
        Returns the memoised :class:`ParseResult` behind *any_verb*, used
        for diagnostics only.
    usage:
        Optional callable returning usage text for diagnostics.
    """

    def __init__(
        self,
        base: type[TBase],
        any_verb: Callable[[], AnyVerb],
        registry: VerbRegistry,
        *,
        parse_result: Callable[[], ParseResult] | None = None,
        usage: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._base = base
        self._any_verb = any_verb
        self._registry = registry
        self._parse_result = parse_result
        self._usage = usage

    @property
    def base(self) -> type[TBase]:
        return self._base

    async def run(self) -> None:
        """Resolve the selected verb, check its base type and dispatch it.

        Raises
        ------
        ArgumentsInvalidError
            If no verb could be parsed from the command line.
        VerbTypeMismatchError
            If the parsed verb is not an instance of the declared base.
        UnregisteredVerbError, MissingHandlerError
            See :meth:`execute`.
        """
        self._begin()
        verb = self._resolving(self._any_verb).value

        if verb is None:
            result = self._parse_result() if self._parse_result else ParseResult.failure(None)
            raise self._fail(
                ArgumentsInvalidError(
                    "Command line arguments are not valid.",
                    reasons=result.errors,
                    usage=self._usage() if self._usage else None,
                ),
                "command_line_arguments_invalid",
                base_type=type_name(self._base),
                reasons=list(result.errors),
            )

        if not isinstance(verb, self._base):
            raise self._fail(
                VerbTypeMismatchError(
                    f"Verb {type_name_of(verb)} is not of the expected base type "
                    f"{type_name(self._base)}.",
                    hint=f"Make {type_name_of(verb)} derive from {type_name(self._base)}, "
                    "or declare a base type that every registered verb shares.",
                ),
                "verb_type_mismatch",
                verb_type=type_name_of(verb),
                base_type=type_name(self._base),
            )

        await self.execute(verb)

    async def execute(self, verb: TBase) -> None:
        """Dispatch *verb* to the handler registered for its exact type.

        Raises
        ------
        UnregisteredVerbError
            If no descriptor matches the runtime type of *verb*.
        MissingHandlerError
            If the verb was registered without a handler.
        """
        verb_type = type(verb)
        descriptor = self._registry.lookup(verb_type)

        if descriptor is None:
            raise self._fail(
                UnregisteredVerbError(
                    f"Unregistered verb type {type_name(verb_type)}.",
                    hint=f"Register it with add_verb({type_name(verb_type)}, MyVerbHandler).",
                ),
                "unregistered_verb",
                verb_type=type_name(verb_type),
            )

        if descriptor.binding is None:
            raise self._fail(
                MissingHandlerError(
                    f"No handler registered for verb {type_name(verb_type)}.",
                    hint=f"Use add_verb({type_name(verb_type)}, MyVerbHandler) instead of "
                    f"add_verb({type_name(verb_type)}).",
                ),
                "verb_handler_missing",
                verb_type=type_name(verb_type),
            )

        self._state = RunnerState.DISPATCHED
        await descriptor.binding.dispatch(verb)
