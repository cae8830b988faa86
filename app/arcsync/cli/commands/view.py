"""View command implementation.

Prints a single archive entry without extracting the archive.
"""

from pathlib import Path
from typing import Annotated

import typer

from arcsync.cli.types import build_policy, get_context_config
from arcsync.core.errors import ArcsyncError
from arcsync.core.session import ArchiveSession
from arcsync.models.policy import SyncMode
from arcsync.utils.formatting import print_error


def view(
    ctx: typer.Context,
    archive: Annotated[Path, typer.Argument(help="Archive to read.")],
    entry: Annotated[str, typer.Argument(help="Entry path inside the archive.")],
    password: Annotated[
        str | None,
        typer.Option("--password", "-p", help="Archive password."),
    ] = None,
) -> None:
    """Print one archive entry (zip archives only)."""
    policy = build_policy(mode=SyncMode.IDEMPOTENT, password=password)
    try:
        session = ArchiveSession(archive, policy, config=get_context_config(ctx))
        data = session.view_file(entry)
    except ArcsyncError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    typer.echo(data, nl=False)
