"""Readable names for classes and generic aliases used in diagnostics."""

from __future__ import annotations

import types
import typing
from typing import Any


def type_name(tp: Any, *, include_module: bool = False) -> str:
    """Return a human-friendly name for *tp*.

    Plain classes render as their qualified name (``Outer.Inner``);
    parameterised generics render with their arguments
    (``list[int]``, ``dict[str, Verb1]``); ``None`` renders as ``None``.

    >>> type_name(list[int])
    'list[int]'
    """
    if tp is None or tp is type(None):
        return "None"

    origin = typing.get_origin(tp)
    if origin is not None:
        args = typing.get_args(tp)
        if origin is typing.Union or origin is types.UnionType:
            return " | ".join(type_name(arg, include_module=include_module) for arg in args)
        base = type_name(origin, include_module=include_module)
        if not args:
            return base
        rendered = ", ".join(type_name(arg, include_module=include_module) for arg in args)
        return f"{base}[{rendered}]"

    if isinstance(tp, type):
        name = tp.__qualname__
        if include_module and tp.__module__ not in ("builtins", "__main__"):
            return f"{tp.__module__}.{name}"
        return name

    if isinstance(tp, typing.TypeVar):
        return tp.__name__

    return repr(tp)


def type_name_of(obj: object, *, include_module: bool = False) -> str:
    """Return :func:`type_name` for the runtime type of *obj*."""
    return type_name(type(obj), include_module=include_module)
