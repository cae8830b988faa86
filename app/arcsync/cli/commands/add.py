"""Add command implementation.

Adds new and changed files from a source directory to an archive.
"""

from pathlib import Path
from typing import Annotated

import typer

from arcsync.cli.types import TypeChoice, build_policy, get_context_config
from arcsync.core.errors import ArcsyncError
from arcsync.core.planner import relative_to_root
from arcsync.core.session import ArchiveSession
from arcsync.models.policy import SyncMode
from arcsync.utils.formatting import console, print_error, print_info, print_success


def add(
    ctx: typer.Context,
    archive: Annotated[Path, typer.Argument(help="Archive to create or update.")],
    source: Annotated[
        Path,
        typer.Argument(help="Source directory archive paths are relative to."),
    ],
    specs: Annotated[
        list[str] | None,
        typer.Argument(help="Files or wildcards to add (default: everything)."),
    ] = None,
    mode: Annotated[
        SyncMode,
        typer.Option("--mode", "-m", help="Skip strategy for existing entries."),
    ] = SyncMode.IDEMPOTENT,
    archive_type: Annotated[
        TypeChoice,
        typer.Option("--type", "-t", help="Archive type (auto = detect, zip if new)."),
    ] = TypeChoice.AUTO,
    exclude: Annotated[
        list[str] | None,
        typer.Option("--exclude", "-x", help="Pattern to always exclude."),
    ] = None,
    exclude_unless_missing: Annotated[
        list[str] | None,
        typer.Option("--exclude-unless-missing", help="Pattern excluded once archived."),
    ] = None,
    password: Annotated[
        str | None,
        typer.Option("--password", "-p", help="Archive password."),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be added."),
    ] = False,
) -> None:
    """Add new and changed files to an archive."""
    policy = build_policy(
        mode=mode,
        archive_type=archive_type,
        exclude=exclude,
        exclude_unless_missing=exclude_unless_missing,
        password=password,
    )
    # No specs means everything under the source directory
    candidates = specs or None

    try:
        session = ArchiveSession(archive, policy, config=get_context_config(ctx))
        if dry_run:
            planned = session.plan_add(source, candidates)
            if not planned:
                print_info("Nothing to add.")
                return
            for path in planned:
                console.print(f"[added]+ {relative_to_root(source.absolute(), path)}[/]")
            print_info(f"{len(planned)} entries would be added to {archive}.")
            return
        result = session.add(source, candidates)
    except ArcsyncError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if not result.changed:
        print_success(f"Up to date: {archive}")
        return
    for path in result.processed:
        console.print(f"[added]+ {path}[/]")
    print_success(f"Added {len(result.processed)} entries to {archive}.")
