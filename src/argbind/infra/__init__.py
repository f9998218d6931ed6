"""Infrastructure layer — the argument tokenizing engine.

This layer wraps :mod:`argparse` behind the
:class:`~argbind.core.protocols.ShapeParser` protocol.

Rules
-----
* No imports from ``cli``.
* No user-facing output and no process exit.
* Parse problems come back as absent results, never as exceptions.
"""

from argbind.infra.argparse_parser import ArgparseShapeParser

__all__: list[str] = [
    "ArgparseShapeParser",
]
