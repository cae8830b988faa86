"""CLI package for arcsync.

This package contains the Typer application and all subcommands.
"""

from arcsync.cli.main import app

__all__ = ["app"]
