"""SFX command implementation.

Builds a self-extracting package from a source directory.
"""

from pathlib import Path
from typing import Annotated

import typer

from arcsync.cli.types import build_policy, get_context_config
from arcsync.core.errors import ArcsyncError
from arcsync.core.sfx import SfxBuilder
from arcsync.models.policy import SyncMode
from arcsync.utils.formatting import print_error, print_success


def parse_info_options(values: list[str] | None) -> dict[str, str]:
    """Parse repeated KEY=VALUE options into a dict.

    Raises:
        typer.BadParameter: If a value has no '='.
    """
    options: dict[str, str] = {}
    for value in values or []:
        key, sep, setting = value.partition("=")
        if not sep or not key:
            msg = f"Expected KEY=VALUE, got '{value}'"
            raise typer.BadParameter(msg, param_hint="--info")
        options[key] = setting
    return options


def sfx(
    ctx: typer.Context,
    output: Annotated[Path, typer.Argument(help="SFX package to create.")],
    source: Annotated[
        Path,
        typer.Argument(help="Source directory archive paths are relative to."),
    ],
    specs: Annotated[
        list[str] | None,
        typer.Argument(help="Files or wildcards to package (default: everything)."),
    ] = None,
    info: Annotated[
        list[str] | None,
        typer.Option(
            "--info", "-i", help="Installer option KEY=VALUE (e.g. RunProgram=setup.exe)."
        ),
    ] = None,
    mode: Annotated[
        SyncMode,
        typer.Option("--mode", "-m", help="Skip strategy used to detect changes."),
    ] = SyncMode.IDEMPOTENT,
    exclude: Annotated[
        list[str] | None,
        typer.Option("--exclude", "-x", help="Pattern to always exclude."),
    ] = None,
    subfolder: Annotated[
        str | None,
        typer.Option("--subfolder", help="Workspace folder name under the cache."),
    ] = None,
    stub_dir: Annotated[
        Path | None,
        typer.Option("--stub-dir", help="Directory containing 7zS2.sfx / 7zsd_All.sfx."),
    ] = None,
    password: Annotated[
        str | None,
        typer.Option("--password", "-p", help="Archive password."),
    ] = None,
) -> None:
    """Build a self-extracting package."""
    info_options = parse_info_options(info)
    policy = build_policy(mode=mode, exclude=exclude, password=password)

    try:
        builder = SfxBuilder(
            output,
            temp_subfolder=subfolder,
            policy=policy,
            config=get_context_config(ctx),
            stub_dir=stub_dir,
        )
        result = builder.create(source, specs or None, info_options)
    except ArcsyncError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if not result.changed:
        print_success(f"Up to date: {output}")
        return
    print_success(f"Created {output} with {len(result.processed)} new or changed entries.")
