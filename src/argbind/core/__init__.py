"""Core layer: shapes, registry, handler bindings and runners.

Rules
-----
* No ``print()`` calls.
* No I/O; nothing here reads ``sys.argv`` or writes to a stream.
* No imports from ``cli`` or ``infra``.
* Parse failures are values, invocation failures are exceptions.
"""

from argbind.core.binding import HandlerBinding
from argbind.core.models import (
    AnyVerb,
    CommandLineArguments,
    ParseResult,
    RunnerState,
    VerbDescriptor,
)
from argbind.core.protocols import CommandLineHandler, CommandLineRunner, ShapeParser
from argbind.core.registry import VerbRegistry
from argbind.core.runners import CommandRunner, VerbBaseRunner
from argbind.core.shapes import (
    OptionSpec,
    VerbSpec,
    is_verb,
    option,
    option_fields,
    verb,
    verb_names,
    verb_spec,
)

__all__: list[str] = [
    "AnyVerb",
    "CommandLineArguments",
    "CommandLineHandler",
    "CommandLineRunner",
    "CommandRunner",
    "HandlerBinding",
    "OptionSpec",
    "ParseResult",
    "RunnerState",
    "ShapeParser",
    "VerbBaseRunner",
    "VerbDescriptor",
    "VerbRegistry",
    "VerbSpec",
    "is_verb",
    "option",
    "option_fields",
    "verb",
    "verb_names",
    "verb_spec",
]
