"""Composition root: register shapes and handlers, then resolve and run them.

:class:`CommandLineBuilder` is the registration surface.  It produces a
:class:`CommandLineApp`, the resolution and invocation surface, in which
every lookup is explicit (no global container, no ambient state)::

    app = (
        CommandLineBuilder()
        .add_arguments(sys.argv[1:])
        .add_verb(AddVerb, AddHandler)
        .add_verb(CompleteVerb, CompleteHandler)
        .build()
    )
    await app.run_async()

Parsing is lazy and memoised: the first lookup parses, every later lookup
of the same shape returns the very same result.
"""

from __future__ import annotations

import sys
from collections.abc import Iterable, Mapping, Sequence
from functools import cached_property
from typing import Any, TypeVar

from argbind.core.binding import HandlerBinding
from argbind.core.models import AnyVerb, CommandLineArguments, ParseResult, VerbDescriptor
from argbind.core.protocols import CommandLineRunner, ShapeParser
from argbind.core.registry import VerbRegistry
from argbind.core.runners import CommandRunner, VerbBaseRunner
from argbind.core.shapes import option_fields, require_verb_spec, verb_names, verb_spec
from argbind.exceptions import (
    DuplicateVerbError,
    MissingRegistrationError,
    RegistrationError,
    RunnerConflictError,
    ShapeDefinitionError,
)
from argbind.infra.argparse_parser import ArgparseShapeParser
from argbind.utils.log import get_logger
from argbind.utils.typenames import type_name, type_name_of

logger = get_logger(__name__)

T = TypeVar("T")

_VERB_DISPATCH = "verb dispatch"


# ---------------------------------------------------------------------------
# Registration surface
# ---------------------------------------------------------------------------

class CommandLineBuilder:
    """Collects arguments, shapes and handlers for one process run.

    Every ``add_*`` method returns the builder so calls can be chained.
    Registration is closed once :meth:`build` has been called.
    """

    def __init__(self) -> None:
        self._arguments: CommandLineArguments | None = None
        self._parser: ShapeParser | None = None
        self._options: dict[type, HandlerBinding | None] = {}
        self._registry = VerbRegistry()
        self._verb_names: dict[str, type] = {}
        self._verb_base: type | None = None
        self._runner_source: str | None = None
        self._built = False

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def add_arguments(
        self,
        args: Sequence[str] | None = None,
        parser: ShapeParser | None = None,
    ) -> CommandLineBuilder:
        """Publish the argument vector (``sys.argv[1:]`` when *args* is ``None``)."""
        self._ensure_open()
        self._arguments = CommandLineArguments(sys.argv[1:] if args is None else args)
        if parser is not None:
            self._parser = parser
        return self

    def add_options(
        self,
        shape: type,
        handler: Any = None,
        *,
        args: Sequence[str] | None = None,
        parser: ShapeParser | None = None,
    ) -> CommandLineBuilder:
        """Declare a single options shape, optionally with its handler.

        Passing *args* also publishes the argument vector, so a single
        command needs just one call.  With a *handler*, the command line
        gets a :class:`CommandRunner`.
        """
        self._ensure_open()
        option_fields(shape)
        self._ensure_unregistered(shape)

        binding = HandlerBinding(shape, handler) if handler is not None else None
        if binding is not None:
            self._claim_runner(f"options handler for {type_name(shape)}")
        self._options[shape] = binding

        if args is not None:
            self.add_arguments(args, parser)
        elif parser is not None:
            self._parser = parser
        return self

    def add_verb(self, shape: type, handler: Any = None) -> CommandLineBuilder:
        """Declare a verb shape, optionally with the handler for it.

        Raises
        ------
        ShapeDefinitionError
            If *shape* is not a ``@verb`` dataclass or reuses a verb name.
        DuplicateVerbError
            If *shape* is already registered.
        """
        self._ensure_open()
        require_verb_spec(shape)
        names = verb_names(shape)
        option_fields(shape)
        self._ensure_unregistered(shape)

        for name in names:
            owner = self._verb_names.get(name)
            if owner is not None:
                raise ShapeDefinitionError(
                    f"Verb name '{name}' of {type_name(shape)} is already used by {type_name(owner)}.",
                    hint="Give every verb a distinct name and distinct aliases.",
                )

        binding = HandlerBinding(shape, handler) if handler is not None else None
        self._claim_runner(_VERB_DISPATCH)
        self._registry.register(shape, binding)
        for name in names:
            self._verb_names[name] = shape
        return self

    def add_verb_base(self, base: type = object) -> CommandLineBuilder:
        """Declare the common base through which the selected verb is looked up."""
        self._ensure_open()
        if self._verb_base is not None and self._verb_base is not base:
            raise RegistrationError(
                f"Verb base already declared as {type_name(self._verb_base)}; "
                f"cannot redeclare it as {type_name(base)}.",
            )
        self._claim_runner(_VERB_DISPATCH)
        self._verb_base = base
        return self

    def build(self, parser: ShapeParser | None = None) -> CommandLineApp:
        """Close registration and return the composed :class:`CommandLineApp`."""
        self._ensure_open()
        self._built = True

        verb_base = self._verb_base
        if verb_base is None and len(self._registry):
            verb_base = object

        return CommandLineApp(
            arguments=self._arguments,
            parser=parser or self._parser or ArgparseShapeParser(),
            options=self._options,
            registry=self._registry,
            verb_base=verb_base,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_open(self) -> None:
        if self._built:
            raise RegistrationError(
                "The command line has already been built.",
                hint="Register everything before calling build().",
            )

    def _ensure_unregistered(self, shape: type) -> None:
        if shape in self._options or shape in self._registry:
            raise DuplicateVerbError(
                f"{type_name(shape)} is already registered.",
                hint="Register each shape exactly once, either as options or as a verb.",
            )

    def _claim_runner(self, source: str) -> None:
        if self._runner_source is not None and self._runner_source != source:
            raise RunnerConflictError(
                f"Cannot register {source}: the command line already runs {self._runner_source}.",
                hint="Use either one options shape with a handler, or verbs.",
            )
        self._runner_source = source


# ---------------------------------------------------------------------------
# Resolution and invocation surface
# ---------------------------------------------------------------------------

class CommandLineApp:
    """A fully composed command line.

    Built by :class:`CommandLineBuilder`; not meant to be constructed by
    hand.  Lookups are memoised for the lifetime of the instance.
    """

    def __init__(
        self,
        *,
        arguments: CommandLineArguments | None,
        parser: ShapeParser,
        options: Mapping[type, HandlerBinding | None],
        registry: VerbRegistry,
        verb_base: type | None,
    ) -> None:
        self._arguments = arguments
        self._parser = parser
        self._options: dict[type, HandlerBinding | None] = dict(options)
        self._registry = registry
        self._verb_base = verb_base
        self._results: dict[type, ParseResult] = {}
        self._runner: CommandLineRunner | None = self._create_runner()

    # ------------------------------------------------------------------
    # Registrations
    # ------------------------------------------------------------------

    @property
    def arguments(self) -> CommandLineArguments:
        """The published argument vector.

        Raises
        ------
        MissingRegistrationError
            If no arguments were ever published.
        """
        if self._arguments is None:
            raise MissingRegistrationError(
                "Command line arguments were never published.",
                hint="Call add_arguments(args) or add_options(Shape, args=args).",
            )
        return self._arguments

    @property
    def parser(self) -> ShapeParser:
        return self._parser

    @property
    def verb_base(self) -> type | None:
        return self._verb_base

    @property
    def verb_descriptors(self) -> tuple[VerbDescriptor, ...]:
        return self._registry.descriptors

    @property
    def runner(self) -> CommandLineRunner | None:
        """The runnable entry point, or ``None`` when there is nothing to run."""
        return self._runner

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def parse_result(self, shape: type) -> ParseResult:
        """Return the memoised :class:`ParseResult` for a registered *shape*.

        Raises
        ------
        MissingRegistrationError
            If *shape* is neither an options shape, a verb, nor the verb base.
        """
        cached = self._results.get(shape)
        if cached is not None:
            return cached

        if shape in self._options:
            result = self._parser.parse_single(shape, self.arguments.value)
        elif shape in self._registry:
            result = self._narrow(self._verb_result, shape, exact=True)
        elif self._verb_base is not None and shape is self._verb_base:
            result = self._narrow(self._verb_result, shape, exact=False)
        else:
            raise MissingRegistrationError(
                f"{type_name(shape)} is not registered.",
                hint=f"Register it with add_options({type_name(shape)}) or add_verb({type_name(shape)}).",
            )

        self._results[shape] = result
        return result

    def resolve(self, shape: type[T]) -> T | None:
        """Return the parsed instance of *shape*, or ``None`` when absent."""
        return self.parse_result(shape).value

    @cached_property
    def any_verb(self) -> AnyVerb:
        """Whichever verb the command line selected (memoised)."""
        return AnyVerb(self._verb_result.value)

    @property
    def base_verb(self) -> Any | None:
        """The selected verb viewed through the declared base, or ``None``."""
        return self.any_verb.as_type(self._require_verb_base())

    def handler(self, shape: type) -> Any | None:
        """Return the handler registered for *shape*, or ``None``."""
        if shape in self._options:
            binding = self._options[shape]
            return binding.resolve() if binding is not None else None

        descriptor = self._registry.lookup(shape)
        if descriptor is not None:
            return descriptor.binding.resolve() if descriptor.binding is not None else None

        if self._verb_base is not None and shape is self._verb_base:
            return self._runner
        return None

    def require_handler(self, shape: type) -> Any:
        """Like :meth:`handler`, but a missing handler is an error."""
        found = self.handler(shape)
        if found is None:
            raise MissingRegistrationError(
                f"No handler is registered for {type_name(shape)}.",
                hint="Pass the handler as the second argument when registering the shape.",
            )
        return found

    def usage(self, shape: type | None = None) -> str:
        """Usage text for *shape*, or for everything this command line accepts."""
        if shape is not None:
            return self._parser.format_usage((shape,))
        if self._verb_base is not None:
            return self._parser.format_usage(self._registry.all_shapes())
        if self._options:
            runner = self._runner
            target = runner.shape if isinstance(runner, CommandRunner) else next(iter(self._options))
            return self._parser.format_usage((target,))
        return ""

    # ------------------------------------------------------------------
    # Invocation
    # ------------------------------------------------------------------

    async def run_async(self) -> None:
        """Run the selected handler, if there is anything to run."""
        if self._runner is None:
            logger.info("nothing_to_run")
            return
        await self._runner.run()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @cached_property
    def _verb_result(self) -> ParseResult:
        self._require_verb_base()
        result = self._parser.parse_multi(self._registry.all_shapes(), self.arguments.value)
        if result.ok:
            logger.debug("verb_selected", verb_type=type_name_of(result.value))
        else:
            logger.debug("verb_not_selected", reasons=list(result.errors))
        return result

    def _require_verb_base(self) -> type:
        if self._verb_base is None:
            raise MissingRegistrationError(
                "No verbs are registered.",
                hint="Register verbs with add_verb(...) or declare add_verb_base(...).",
            )
        return self._verb_base

    @staticmethod
    def _narrow(result: ParseResult, shape: type, *, exact: bool) -> ParseResult:
        value = result.value
        if value is None:
            return ParseResult.failure(result.shape, *result.errors)
        matches = type(value) is shape if exact else isinstance(value, shape)
        if matches:
            return result
        return ParseResult.failure(
            result.shape,
            f"The selected verb {type_name_of(value)} is not a {type_name(shape)}.",
        )

    def _verb_usage(self) -> str:
        selected = self._verb_result.shape
        if selected is not None and verb_spec(selected) is not None:
            return self._parser.format_usage((selected,))
        return self._parser.format_usage(self._registry.all_shapes())

    def _create_runner(self) -> CommandLineRunner | None:
        for shape, binding in self._options.items():
            if binding is not None:
                return CommandRunner(
                    shape,
                    lambda shape=shape: self.parse_result(shape),
                    binding,
                    usage=lambda shape=shape: self.usage(shape),
                )

        if self._verb_base is not None:
            return VerbBaseRunner(
                self._verb_base,
                lambda: self.any_verb,
                self._registry,
                parse_result=lambda: self._verb_result,
                usage=self._verb_usage,
            )
        return None


# ---------------------------------------------------------------------------
# Functional form
# ---------------------------------------------------------------------------

def build_command_line(
    args: Sequence[str] | None = None,
    *,
    options: type | None = None,
    options_handler: Any = None,
    verbs: Iterable[type | tuple[type, Any]] = (),
    verb_base: type | None = None,
    parser: ShapeParser | None = None,
) -> CommandLineApp:
    """Compose a :class:`CommandLineApp` in one call.

    *verbs* holds verb shapes, or ``(shape, handler)`` pairs for verbs
    that have a handler.
    """
    if options is None and options_handler is not None:
        raise RegistrationError(
            "options_handler was given without an options shape.",
            hint="Pass options=MyOptions together with options_handler.",
        )

    builder = CommandLineBuilder().add_arguments(args, parser)
    if options is not None:
        builder.add_options(options, options_handler)
    for entry in verbs:
        if isinstance(entry, tuple):
            shape, handler = entry
            builder.add_verb(shape, handler)
        else:
            builder.add_verb(entry)
    if verb_base is not None:
        builder.add_verb_base(verb_base)
    return builder.build()
