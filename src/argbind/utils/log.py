"""Structured logging with structlog.

Library modules only ever call :func:`get_logger`; they never configure
anything.  :func:`configure_logging` is invoked by an application's own
bootstrap, or by :func:`argbind.cli.app.run_command_line` when nothing
configured structlog before it.  It routes every record to stderr so that
command output on stdout stays clean.
"""

from __future__ import annotations

import logging
import sys

import structlog

from argbind.config import Settings, get_settings


def configure_logging(settings: Settings | None = None) -> None:
    """Configure stdlib logging and structlog from *settings*."""
    settings = settings or get_settings()

    handler = logging.StreamHandler(sys.stderr)
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(getattr(logging, settings.log_level))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    if settings.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    handler.setFormatter(structlog.stdlib.ProcessorFormatter(processor=renderer))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance."""
    return structlog.get_logger(name)