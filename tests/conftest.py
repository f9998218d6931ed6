"""Shared pytest fixtures and configuration for the argbind test suite.

Guidelines
----------
* No real process exit: the CLI is driven through ``main(argv)``.
* Coroutines are driven with ``asyncio.run``.
* Log assertions use ``structlog.testing.capture_logs``.
* Tests must not depend on ``sys.argv`` or the environment; child
  interpreters get the scrubbed ``subprocess_env``.
"""

from __future__ import annotations

import abc
import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest
import structlog

from argbind.config import reset_settings
from argbind.core.shapes import option, verb


# ---------------------------------------------------------------------------
# Shapes
# ---------------------------------------------------------------------------

@dataclass
class SimpleOptions:
    file_path: str = option("-p", "--path", required=True, help="A simple file path string property")


class CustomVerbBase(abc.ABC):
    """Common base of the test verbs; every verb exposes a file path."""

    @property
    @abc.abstractmethod
    def file_path(self) -> str: ...


@verb("verb1", help="Reads an input file")
@dataclass
class Verb1(CustomVerbBase):
    input_path: str = option("-i", "--input", required=True, help="The input file")

    @property
    def file_path(self) -> str:
        return self.input_path


@verb("verb2", help="Writes an output file", aliases=("v2",))
@dataclass
class Verb2(CustomVerbBase):
    output_path: str = option("-o", "--output", required=True, help="The output file")

    @property
    def file_path(self) -> str:
        return self.output_path


class UnrelatedBase:
    """A base no test verb derives from."""


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

class RecordingHandler:
    """Async handler that remembers every instance it was called with."""

    def __init__(self) -> None:
        self.calls: list[Any] = []

    async def execute(self, verb: Any) -> None:
        self.calls.append(verb)


class SyncRecordingHandler:
    def __init__(self) -> None:
        self.calls: list[Any] = []

    def execute(self, verb: Any) -> None:
        self.calls.append(verb)


class NoExecuteHandler:
    def run(self, verb: Any) -> None:
        raise AssertionError("never called")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _reset_global_state() -> Iterator[None]:
    """Undo structlog configuration and cached settings after each test."""
    yield
    structlog.reset_defaults()
    reset_settings()


@pytest.fixture()
def options_handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture()
def verb1_handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture()
def verb2_handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture()
def subprocess_env() -> dict[str, str]:
    """Environment for child interpreters: no ``ARGBIND_*`` overrides, ``src`` importable."""
    env = {key: value for key, value in os.environ.items() if not key.startswith("ARGBIND_")}
    src = str(Path(__file__).resolve().parents[1] / "src")
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [src, env.get("PYTHONPATH")]))
    return env
