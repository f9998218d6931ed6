"""Verb descriptor registry: the verb shapes known to a command line."""

from __future__ import annotations

from collections.abc import Iterator

from argbind.core.binding import HandlerBinding
from argbind.core.models import VerbDescriptor
from argbind.exceptions import DuplicateVerbError
from argbind.utils.typenames import type_name


class VerbRegistry:
    """Ordered collection of :class:`VerbDescriptor` entries.

    Populated during composition and read-only afterwards.  Each verb
    shape may be registered once; a second registration is rejected
    rather than shadowing the first.
    """

    def __init__(self) -> None:
        self._descriptors: list[VerbDescriptor] = []

    def register(
        self,
        verb_shape: type,
        binding: HandlerBinding | None = None,
    ) -> VerbDescriptor:
        """Append a descriptor for *verb_shape*.

        Raises
        ------
        DuplicateVerbError
            If *verb_shape* is already registered.
        """
        if self.lookup(verb_shape) is not None:
            raise DuplicateVerbError(
                f"Verb {type_name(verb_shape)} is already registered.",
                hint="Register each verb exactly once, with its handler if it has one.",
            )
        descriptor = VerbDescriptor(verb_shape=verb_shape, binding=binding)
        self._descriptors.append(descriptor)
        return descriptor

    def all_shapes(self) -> tuple[type, ...]:
        """Registered verb shapes in registration order."""
        return tuple(descriptor.verb_shape for descriptor in self._descriptors)

    def lookup(self, verb_shape: type) -> VerbDescriptor | None:
        """Return the descriptor whose shape *is* ``verb_shape``.

        Exact identity only: subclasses and look-alike classes do not match.
        """
        for descriptor in self._descriptors:
            if descriptor.verb_shape is verb_shape:
                return descriptor
        return None

    @property
    def descriptors(self) -> tuple[VerbDescriptor, ...]:
        return tuple(self._descriptors)

    def __contains__(self, verb_shape: object) -> bool:
        return isinstance(verb_shape, type) and self.lookup(verb_shape) is not None

    def __iter__(self) -> Iterator[VerbDescriptor]:
        return iter(tuple(self._descriptors))

    def __len__(self) -> int:
        return len(self._descriptors)
