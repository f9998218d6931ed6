"""argbind — bind parsed command line shapes to their handlers.

Declare options and verbs as dataclasses, register them with a
:class:`CommandLineBuilder`, and let the composed :class:`CommandLineApp`
resolve the selected shape and run its handler.
"""

from argbind.composition import CommandLineApp, CommandLineBuilder, build_command_line
from argbind.core.models import AnyVerb, CommandLineArguments, ParseResult, VerbDescriptor
from argbind.core.protocols import CommandLineHandler, CommandLineRunner, ShapeParser
from argbind.core.shapes import option, verb
from argbind.infra.argparse_parser import ArgparseShapeParser
from argbind.version import __version__

__all__: list[str] = [
    "AnyVerb",
    "ArgparseShapeParser",
    "CommandLineApp",
    "CommandLineArguments",
    "CommandLineBuilder",
    "CommandLineHandler",
    "CommandLineRunner",
    "ParseResult",
    "ShapeParser",
    "VerbDescriptor",
    "__version__",
    "build_command_line",
    "option",
    "verb",
]
