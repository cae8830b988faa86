"""CLI commands for arcsync.

This package contains all subcommand implementations.
"""

from arcsync.cli.commands import add, extract, manifest, sfx, view

__all__ = ["add", "extract", "manifest", "sfx", "view"]
