"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from arcsync import __version__
from arcsync.cli.commands import add, extract, manifest, sfx, view
from arcsync.core.config import get_config
from arcsync.core.errors import ConfigError
from arcsync.utils.formatting import err_console, print_error

# Create main Typer app
app = typer.Typer(
    name="arcsync",
    help="Idempotent synchronization between a directory tree and an archive.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"arcsync version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool, quiet: bool) -> None:
    """Route log records through Rich on stderr."""
    level = logging.WARNING
    if verbose:
        level = logging.INFO
    elif quiet:
        level = logging.ERROR
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False, show_time=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config.toml (default: ~/.config/arcsync/config.toml).",
        ),
    ] = None,
) -> None:
    """arcsync - Keep a directory tree and an archive in sync.

    Only entries whose content changed since the last run are added or
    extracted again.
    """
    configure_logging(verbose, quiet)

    try:
        config = get_config(config_path)
    except ConfigError as e:
        print_error(f"Failed to load config: {e}")
        raise typer.Exit(code=1) from e

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config"] = config


# Register commands
app.command("add")(add.add)
app.command("extract")(extract.extract)
app.command("view")(view.view)
app.command("sfx")(sfx.sfx)
app.command("manifest")(manifest.manifest)


if __name__ == "__main__":
    app()
