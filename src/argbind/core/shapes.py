"""Declarations that turn dataclasses into options and verb shapes.

An *options shape* is a dataclass whose fields are declared with
:func:`option`.  A *verb shape* is an options shape decorated with
:func:`verb`, which gives it the name that selects it on the command line::

    @verb("add", help="Add a new TODO item")
    @dataclass
    class AddVerb:
        todo_id: str = option("-t", "--todo", required=True, help="The ID of the TODO")

The metadata lives on the classes themselves so that the parser adapter
can build a parser from nothing but the shape.
"""

from __future__ import annotations

import dataclasses
import types
import typing
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from argbind.exceptions import ShapeDefinitionError
from argbind.utils.typenames import type_name

T = TypeVar("T")

OPTION_METADATA_KEY = "argbind.option"
_VERB_ATTRIBUTE = "__argbind_verb__"


# ---------------------------------------------------------------------------
# Metadata records
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class OptionSpec:
    """Parser metadata attached to one dataclass field."""

    short: str | None
    """Short flag such as ``-p``, or ``None``."""

    long: str | None
    """Long flag such as ``--path``, or ``None``."""

    required: bool = False
    help: str | None = None
    metavar: str | None = None

    @property
    def flags(self) -> tuple[str, ...]:
        return tuple(flag for flag in (self.short, self.long) if flag)


@dataclass(frozen=True, slots=True)
class VerbSpec:
    """Parser metadata attached to a verb shape."""

    name: str
    help: str | None = None
    aliases: tuple[str, ...] = ()

    @property
    def names(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)


@dataclass(frozen=True, slots=True)
class OptionField:
    """A declared option together with its field name and resolved type."""

    name: str
    annotation: Any
    spec: OptionSpec
    default: Any

    @property
    def is_flag(self) -> bool:
        """True for presence flags, which take no value on the command line."""
        return unwrap_optional(self.annotation) is bool


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------

def _split_flags(flags: tuple[str, ...]) -> tuple[str | None, str | None]:
    if not flags or len(flags) > 2:
        raise ShapeDefinitionError(
            f"An option takes one or two flags, got {len(flags)}.",
            hint='Declare options as option("-p", "--path").',
        )

    short: str | None = None
    long: str | None = None
    for flag in flags:
        if flag.startswith("--") and len(flag) > 2:
            if long is not None:
                raise ShapeDefinitionError(f"Option declares two long flags: {flags!r}.")
            long = flag
        elif flag.startswith("-") and len(flag) == 2 and flag[1] != "-":
            if short is not None:
                raise ShapeDefinitionError(f"Option declares two short flags: {flags!r}.")
            short = flag
        else:
            raise ShapeDefinitionError(
                f"Invalid option flag: {flag!r}",
                hint="Short flags look like -p, long flags look like --path.",
            )
    return short, long


def option(
    *flags: str,
    required: bool = False,
    default: Any = dataclasses.MISSING,
    default_factory: Callable[[], Any] | Any = dataclasses.MISSING,
    help: str | None = None,
    metavar: str | None = None,
) -> Any:
    """Declare a dataclass field as a command line option.

    Fields without an explicit default get ``None`` so that declaration
    order never matters; the parser overwrites every option field anyway.
    """
    short, long = _split_flags(flags)
    metadata = {
        OPTION_METADATA_KEY: OptionSpec(
            short=short,
            long=long,
            required=required,
            help=help,
            metavar=metavar,
        ),
    }
    if default_factory is not dataclasses.MISSING:
        return dataclasses.field(default_factory=default_factory, metadata=metadata)
    if default is dataclasses.MISSING:
        default = None
    return dataclasses.field(default=default, metadata=metadata)


def verb(
    name: str,
    *,
    help: str | None = None,
    aliases: tuple[str, ...] | list[str] = (),
) -> Callable[[type[T]], type[T]]:
    """Class decorator marking a shape as the verb selected by *name*."""
    names = (name, *aliases)
    for candidate in names:
        if not candidate or candidate.startswith("-") or any(ch.isspace() for ch in candidate):
            raise ShapeDefinitionError(
                f"Invalid verb name: {candidate!r}",
                hint="Verb names are single words that do not start with '-'.",
            )

    spec = VerbSpec(name=name, help=help, aliases=tuple(aliases))

    def decorate(cls: type[T]) -> type[T]:
        setattr(cls, _VERB_ATTRIBUTE, spec)
        return cls

    return decorate


# ---------------------------------------------------------------------------
# Introspection
# ---------------------------------------------------------------------------

def verb_spec(shape: type) -> VerbSpec | None:
    """Return the verb metadata declared on *shape* itself (never inherited)."""
    spec = vars(shape).get(_VERB_ATTRIBUTE)
    return spec if isinstance(spec, VerbSpec) else None


def is_verb(shape: type) -> bool:
    return verb_spec(shape) is not None


def verb_names(shape: type) -> tuple[str, ...]:
    """Name and aliases that select *shape*; empty for a non-verb."""
    spec = verb_spec(shape)
    return spec.names if spec is not None else ()


def require_verb_spec(shape: type) -> VerbSpec:
    spec = verb_spec(shape)
    if spec is None:
        raise ShapeDefinitionError(
            f"{type_name(shape)} is not a verb.",
            hint=f'Decorate it with @verb("name") before registering {type_name(shape)} as a verb.',
        )
    return spec


def unwrap_optional(annotation: Any) -> Any:
    """Turn ``X | None`` into ``X``; leave everything else alone."""
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        members = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return members[0]
    return annotation


def option_fields(shape: type) -> list[OptionField]:
    """Return the declared options of *shape* in field order."""
    if not isinstance(shape, type) or not dataclasses.is_dataclass(shape):
        raise ShapeDefinitionError(
            f"{type_name(shape)} is not a dataclass.",
            hint="Options and verb shapes must be @dataclass classes.",
        )

    try:
        hints = typing.get_type_hints(shape)
    except NameError as exc:
        raise ShapeDefinitionError(
            f"Cannot resolve the annotations of {type_name(shape)}: {exc}",
        ) from exc

    declared: list[OptionField] = []
    for fld in dataclasses.fields(shape):
        spec = fld.metadata.get(OPTION_METADATA_KEY)
        if spec is None:
            if (
                fld.init
                and fld.default is dataclasses.MISSING
                and fld.default_factory is dataclasses.MISSING
            ):
                raise ShapeDefinitionError(
                    f"Field {type_name(shape)}.{fld.name} is neither an option nor defaulted.",
                    hint="Declare it with option(...) or give it a default.",
                )
            continue
        if fld.default_factory is not dataclasses.MISSING:
            default = fld.default_factory()
        elif fld.default is not dataclasses.MISSING:
            default = fld.default
        else:
            default = None
        declared_field = OptionField(
            name=fld.name,
            annotation=hints.get(fld.name, str),
            spec=spec,
            default=default,
        )
        if declared_field.is_flag and spec.required:
            raise ShapeDefinitionError(
                f"Flag {type_name(shape)}.{fld.name} cannot be required.",
                hint="A bool option is set by its presence; drop required=True or give it a value type.",
            )
        declared.append(declared_field)
    return declared
