"""Extract command implementation.

Extracts new and changed archive entries into a destination directory.
"""

from pathlib import Path
from typing import Annotated

import typer

from arcsync.cli.types import TypeChoice, build_policy, get_context_config
from arcsync.core.errors import ArcsyncError
from arcsync.core.planner import ALL
from arcsync.core.session import ArchiveSession
from arcsync.models.policy import SyncMode
from arcsync.utils.formatting import console, print_error, print_info, print_success


def extract(
    ctx: typer.Context,
    archive: Annotated[Path, typer.Argument(help="Archive to extract from.")],
    destination: Annotated[Path, typer.Argument(help="Directory to extract into.")],
    entries: Annotated[
        list[str] | None,
        typer.Argument(help="Entries or wildcards to extract (default: all)."),
    ] = None,
    mode: Annotated[
        SyncMode,
        typer.Option("--mode", "-m", help="Skip strategy for existing files."),
    ] = SyncMode.IDEMPOTENT,
    archive_type: Annotated[
        TypeChoice,
        typer.Option("--type", "-t", help="Archive type (auto = detect)."),
    ] = TypeChoice.AUTO,
    exclude: Annotated[
        list[str] | None,
        typer.Option("--exclude", "-x", help="Pattern to always exclude."),
    ] = None,
    exclude_unless_missing: Annotated[
        list[str] | None,
        typer.Option("--exclude-unless-missing", help="Pattern extracted only if missing."),
    ] = None,
    exclude_unless_changed: Annotated[
        list[str] | None,
        typer.Option(
            "--exclude-unless-changed",
            help="Pattern skipped when present and the archive is unchanged.",
        ),
    ] = None,
    password: Annotated[
        str | None,
        typer.Option("--password", "-p", help="Archive password."),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be extracted."),
    ] = False,
) -> None:
    """Extract new and changed entries from an archive."""
    policy = build_policy(
        mode=mode,
        archive_type=archive_type,
        exclude=exclude,
        exclude_unless_missing=exclude_unless_missing,
        exclude_unless_changed=exclude_unless_changed,
        password=password,
    )
    candidates = entries if entries else ALL

    try:
        session = ArchiveSession(archive, policy, config=get_context_config(ctx))
        if dry_run:
            planned = session.plan_extract(destination, candidates)
            if not planned:
                print_info("Nothing to extract.")
                return
            for path in planned:
                console.print(f"[added]+ {path}[/]")
            print_info(f"{len(planned)} entries would be extracted to {destination}.")
            return
        result = session.extract(destination, candidates)
    except ArcsyncError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if not result.changed:
        print_success(f"Up to date: {destination}")
        return
    for path in result.processed:
        console.print(f"[added]+ {path}[/]")
    print_success(f"Extracted {len(result.processed)} entries to {destination}.")
