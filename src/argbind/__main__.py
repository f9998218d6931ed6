"""Entry point for ``python -m argbind``; same behaviour as the ``argbind`` script."""

from __future__ import annotations

from argbind.cli.app import cli

if __name__ == "__main__":
    cli()
