"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

import sys

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

ARCSYNC_THEME = Theme(
    {
        "text": "#ffffff",
        "muted": "#b2bec3",
        "header": "bold #69B9A1",
        "border": "#29526d",
        "success": "#03b971",
        "warning": "#f5b332",
        "error": "bold #f53263",
        "info": "#0ec1c8",
        "added": "#c1ff62",
        "directory": "#0e8ac8",
    }
)


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances
console = Console(theme=ARCSYNC_THEME, color_system=_detect_color_system())
err_console = Console(theme=ARCSYNC_THEME, stderr=True, color_system=_detect_color_system())


def create_checksum_table(title: str) -> Table:
    """Create a pre-configured table for displaying manifest entries.

    Args:
        title: Table title.

    Returns:
        Rich Table with Path and Fingerprint columns.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("Path", no_wrap=True)
    table.add_column("Fingerprint", style="muted")
    return table


def format_fingerprint(fingerprint: str) -> str:
    """Format a fingerprint with color markup, shortening content hashes."""
    if fingerprint == "directory":
        return "[directory]directory[/]"
    return f"[muted]{fingerprint[:16]}…[/]"


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
