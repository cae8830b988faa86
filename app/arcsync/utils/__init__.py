"""Utility modules for arcsync.

This module exports commonly used utility functions.
"""

from arcsync.utils.formatting import (
    console,
    create_checksum_table,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from arcsync.utils.shell import CommandResult, run_command, which

__all__ = [
    "CommandResult",
    "console",
    "create_checksum_table",
    "err_console",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_command",
    "which",
]
