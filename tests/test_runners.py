"""Tests for the runners (core/runners.py).

The runners are driven with hand-built parse results and registries so
that no parser is involved.

Coverage:
* ``CommandRunner``: dispatch, fail-fast on absence, single-shot state,
  FAILED state when resolution itself raises.
* ``VerbBaseRunner``: base check, unregistered vs handler-less verbs,
  logging of every fatal condition.
"""

from __future__ import annotations

import asyncio

import pytest
from structlog.testing import capture_logs

from argbind.core.binding import HandlerBinding
from argbind.core.models import AnyVerb, ParseResult, RunnerState
from argbind.core.protocols import CommandLineRunner
from argbind.core.registry import VerbRegistry
from argbind.core.runners import CommandRunner, VerbBaseRunner
from argbind.exceptions import (
    ArgumentsInvalidError,
    MissingHandlerError,
    MissingRegistrationError,
    RunnerStateError,
    UnregisteredVerbError,
    VerbTypeMismatchError,
)
from conftest import CustomVerbBase, RecordingHandler, SimpleOptions, UnrelatedBase, Verb1, Verb2


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _command_runner(result: ParseResult, handler: RecordingHandler) -> CommandRunner:
    return CommandRunner(
        SimpleOptions,
        lambda: result,
        HandlerBinding(SimpleOptions, handler),
        usage=lambda: "usage: prog -p PATH",
    )


def _verb_runner(
    verb: object | None,
    registry: VerbRegistry,
    base: type = CustomVerbBase,
    errors: tuple[str, ...] = (),
) -> VerbBaseRunner:
    return VerbBaseRunner(
        base,
        lambda: AnyVerb(verb),
        registry,
        parse_result=lambda: ParseResult(value=verb, shape=None, errors=errors),
        usage=lambda: "usage: prog <verb> [options]",
    )


# ---------------------------------------------------------------------------
# CommandRunner
# ---------------------------------------------------------------------------

class TestCommandRunner:
    def test_satisfies_protocol(self) -> None:
        runner = _command_runner(ParseResult.failure(SimpleOptions), RecordingHandler())
        assert isinstance(runner, CommandLineRunner)

    def test_dispatches_instance_once(self) -> None:
        handler = RecordingHandler()
        options = SimpleOptions(file_path="test.txt")
        runner = _command_runner(ParseResult(value=options, shape=SimpleOptions), handler)

        assert runner.state is RunnerState.UNINVOKED
        asyncio.run(runner.run())

        assert handler.calls == [options]
        assert runner.state is RunnerState.DISPATCHED

    def test_absent_options_fail_fast(self) -> None:
        handler = RecordingHandler()
        runner = _command_runner(ParseResult.failure(SimpleOptions, "missing -p"), handler)

        with capture_logs() as logs, pytest.raises(ArgumentsInvalidError) as exc_info:
            asyncio.run(runner.run())

        assert handler.calls == []
        assert runner.state is RunnerState.FAILED
        assert exc_info.value.reasons == ("missing -p",)
        assert exc_info.value.usage == "usage: prog -p PATH"
        assert logs[0]["event"] == "command_line_arguments_invalid"
        assert logs[0]["options_type"] == "SimpleOptions"

    def test_second_run_rejected(self) -> None:
        handler = RecordingHandler()
        runner = _command_runner(ParseResult(value=SimpleOptions("x"), shape=SimpleOptions), handler)
        asyncio.run(runner.run())

        with pytest.raises(RunnerStateError):
            asyncio.run(runner.run())
        assert len(handler.calls) == 1

    def test_run_after_failure_rejected(self) -> None:
        runner = _command_runner(ParseResult.failure(SimpleOptions), RecordingHandler())
        with pytest.raises(ArgumentsInvalidError):
            asyncio.run(runner.run())
        with pytest.raises(RunnerStateError):
            asyncio.run(runner.run())

    def test_resolution_error_leaves_runner_failed(self) -> None:
        def resolve() -> ParseResult:
            raise MissingRegistrationError("Command line arguments were never published.")

        handler = RecordingHandler()
        runner = CommandRunner(SimpleOptions, resolve, HandlerBinding(SimpleOptions, handler))

        with pytest.raises(MissingRegistrationError):
            asyncio.run(runner.run())
        assert runner.state is RunnerState.FAILED
        assert handler.calls == []


# ---------------------------------------------------------------------------
# VerbBaseRunner
# ---------------------------------------------------------------------------

class TestVerbBaseRunner:
    def test_dispatches_to_exact_type(self) -> None:
        verb1_handler, verb2_handler = RecordingHandler(), RecordingHandler()
        registry = VerbRegistry()
        registry.register(Verb1, HandlerBinding(Verb1, verb1_handler))
        registry.register(Verb2, HandlerBinding(Verb2, verb2_handler))
        verb = Verb1(input_path="test.txt")

        runner = _verb_runner(verb, registry)
        asyncio.run(runner.run())

        assert verb1_handler.calls == [verb]
        assert verb2_handler.calls == []
        assert runner.state is RunnerState.DISPATCHED

    def test_object_base_accepts_any_verb(self) -> None:
        handler = RecordingHandler()
        registry = VerbRegistry()
        registry.register(Verb2, HandlerBinding(Verb2, handler))

        asyncio.run(_verb_runner(Verb2(output_path="o"), registry, base=object).run())
        assert len(handler.calls) == 1

    def test_absent_verb_fails_fast(self) -> None:
        registry = VerbRegistry()
        registry.register(Verb1, HandlerBinding(Verb1, RecordingHandler()))
        runner = _verb_runner(None, registry, errors=("No verb was selected.",))

        with capture_logs() as logs, pytest.raises(ArgumentsInvalidError) as exc_info:
            asyncio.run(runner.run())

        assert exc_info.value.reasons == ("No verb was selected.",)
        assert exc_info.value.usage == "usage: prog <verb> [options]"
        assert logs[0]["event"] == "command_line_arguments_invalid"
        assert runner.state is RunnerState.FAILED

    def test_base_mismatch(self) -> None:
        handler = RecordingHandler()
        registry = VerbRegistry()
        registry.register(Verb1, HandlerBinding(Verb1, handler))
        runner = _verb_runner(Verb1(input_path="x"), registry, base=UnrelatedBase)

        with capture_logs() as logs, pytest.raises(VerbTypeMismatchError):
            asyncio.run(runner.run())

        assert handler.calls == []
        assert logs[0]["event"] == "verb_type_mismatch"
        assert logs[0]["verb_type"] == "Verb1"
        assert logs[0]["base_type"] == "UnrelatedBase"

    def test_unregistered_verb(self) -> None:
        registry = VerbRegistry()
        registry.register(Verb1, HandlerBinding(Verb1, RecordingHandler()))

        with capture_logs() as logs, pytest.raises(UnregisteredVerbError):
            asyncio.run(_verb_runner(Verb2(output_path="o"), registry).run())
        assert logs[0]["event"] == "unregistered_verb"
        assert logs[0]["verb_type"] == "Verb2"

    def test_registered_without_handler(self) -> None:
        registry = VerbRegistry()
        registry.register(Verb1)

        with capture_logs() as logs, pytest.raises(MissingHandlerError) as exc_info:
            asyncio.run(_verb_runner(Verb1(input_path="x"), registry).run())

        assert not isinstance(exc_info.value, UnregisteredVerbError)
        assert "add_verb(Verb1, MyVerbHandler)" in (exc_info.value.hint or "")
        assert logs[0]["event"] == "verb_handler_missing"

    def test_execute_routes_like_run(self) -> None:
        handler = RecordingHandler()
        registry = VerbRegistry()
        registry.register(Verb2, HandlerBinding(Verb2, handler))
        runner = _verb_runner(None, registry)
        verb = Verb2(output_path="o")

        asyncio.run(runner.execute(verb))
        assert handler.calls == [verb]

    def test_second_run_rejected(self) -> None:
        registry = VerbRegistry()
        registry.register(Verb1, HandlerBinding(Verb1, RecordingHandler()))
        runner = _verb_runner(Verb1(input_path="x"), registry)
        asyncio.run(runner.run())

        with pytest.raises(RunnerStateError):
            asyncio.run(runner.run())

    def test_handler_exception_propagates(self) -> None:
        class Failing:
            async def execute(self, verb: Verb1) -> None:
                raise OSError("disk full")

        registry = VerbRegistry()
        registry.register(Verb1, HandlerBinding(Verb1, Failing))

        with pytest.raises(OSError, match="disk full"):
            asyncio.run(_verb_runner(Verb1(input_path="x"), registry).run())

    def test_resolution_error_leaves_runner_failed(self) -> None:
        def any_verb() -> AnyVerb:
            raise MissingRegistrationError("Command line arguments were never published.")

        runner = VerbBaseRunner(CustomVerbBase, any_verb, VerbRegistry())

        with pytest.raises(MissingRegistrationError):
            asyncio.run(runner.run())
        assert runner.state is RunnerState.FAILED
        with pytest.raises(RunnerStateError):
            asyncio.run(runner.run())
