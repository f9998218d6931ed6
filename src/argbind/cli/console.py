"""Diagnostic output for the CLI layer.

Everything here writes to stderr so that a command's own output on
stdout stays clean.  Rich is imported on first use only; without it the
same messages are printed as plain text with the markup stripped.
"""

from __future__ import annotations

import re
import sys
from typing import Any

from argbind.exceptions import ConsoleUnavailableError

_MARKUP_TAG = re.compile(r"\[/?[a-z][a-z ]*\]")


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` or raise ``ConsoleUnavailableError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise ConsoleUnavailableError(
			"rich is not installed.",
			hint="Install it with: pip install rich",
		) from exc
	return Console


def strip_markup(text: str) -> str:
	"""Drop Rich style tags such as ``[bold red]`` from *text*."""
	return _MARKUP_TAG.sub("", text)


class DiagnosticConsole:
	"""stderr console used by the error boundary and the console script.

	The Rich console is created once and reused.  It resolves
	``sys.stderr`` at print time, so captured streams in tests work.
	"""

	def __init__(self) -> None:
		self._rich: Any = None
		self._rich_missing = False

	def _rich_console(self) -> Any | None:
		if self._rich is None and not self._rich_missing:
			try:
				self._rich = _load_rich_console_class()(stderr=True)
			except ConsoleUnavailableError:
				self._rich_missing = True
		return self._rich

	def print(self, text: str = "", *, markup: bool = True) -> None:
		"""Write one message.  ``markup=False`` prints *text* verbatim."""
		rich_console = self._rich_console()
		if rich_console is None:
			print(strip_markup(text) if markup else text, file=sys.stderr)
			return
		rich_console.print(text, markup=markup, highlight=False)

	def labelled(self, label: str, message: str) -> None:
		"""Write *message* after a styled *label*; *message* is never markup."""
		rich_console = self._rich_console()
		if rich_console is None:
			print(f"{strip_markup(label)} {message}", file=sys.stderr)
			return
		from rich.markup import escape

		rich_console.print(f"{label} {escape(message)}", highlight=False)

	def error(self, message: str) -> None:
		self.labelled("[bold red]Error:[/bold red]", message)

	def hint(self, message: str) -> None:
		self.labelled("[yellow]Hint:[/yellow]", message)

	def plain(self, text: str) -> None:
		"""Usage text and parser reasons: brackets are content, not markup."""
		self.print(text, markup=False)

	def reset(self) -> None:
		"""Forget the cached Rich console (tests swap Rich in and out)."""
		self._rich = None
		self._rich_missing = False


console = DiagnosticConsole()
