"""Manifest command implementation.

Shows the checksums recorded for the current content of an archive.
"""

from pathlib import Path
from typing import Annotated

import typer

from arcsync.cli.types import get_context_config
from arcsync.core.errors import ManifestError
from arcsync.core.manifest import ChecksumManifest
from arcsync.utils.formatting import (
    console,
    create_checksum_table,
    format_fingerprint,
    print_error,
    print_info,
)


def manifest(
    ctx: typer.Context,
    archive: Annotated[Path, typer.Argument(help="Archive or SFX package.")],
) -> None:
    """Show the checksum manifest recorded for an archive."""
    config = get_context_config(ctx)
    try:
        checksums = ChecksumManifest.for_archive(archive.absolute(), config.cache_root)
    except ManifestError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if not len(checksums):
        print_info(f"No manifest recorded for the current content of {archive}.")
        return

    table = create_checksum_table(f"Manifest: {archive.name}")
    for path in sorted(checksums):
        table.add_row(path, format_fingerprint(checksums.get(path) or ""))
    console.print(table)
    console.print(f"\n[dim]Archive checksum: {checksums.archive_checksum}[/dim]")
    console.print(f"[dim]Stored at: {checksums.identity_path}[/dim]")
