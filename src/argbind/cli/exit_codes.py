"""Process exit codes returned by :func:`argbind.cli.app.run_command_line`.

One constant per failure family of the error boundary, so programs built
on argbind and their callers agree on what a non-zero status means.
"""

from __future__ import annotations

SUCCESS: int = 0
"""The handler ran to completion, or the command line had nothing to run."""

GENERAL_ERROR: int = 1
"""An ArgbindError other than invalid arguments; message and hint were shown."""

UNEXPECTED_ERROR: int = 2
"""The handler raised something that is not an ArgbindError."""

USAGE_ERROR: int = 64
"""No shape could be populated from the arguments (sysexits ``EX_USAGE``)."""

KEYBOARD_INTERRUPT: int = 130
"""Interrupted with Ctrl+C (128 + SIGINT)."""
