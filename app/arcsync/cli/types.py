"""Shared types and helpers for CLI commands.

This module provides the options and helpers used across multiple
command modules to avoid code duplication.
"""

from enum import Enum

import typer

from arcsync.core.config import ArcsyncConfig
from arcsync.models.policy import ArchiveType, SyncMode, SyncPolicy


class TypeChoice(str, Enum):
    """Archive types selectable on the command line."""

    AUTO = "auto"
    ZIP = "zip"
    SEVEN_ZIP = "7z"


def to_archive_type(choice: TypeChoice) -> ArchiveType | None:
    """Map a CLI type choice to an ArchiveType (None = detect)."""
    if choice == TypeChoice.ZIP:
        return ArchiveType.ZIP
    if choice == TypeChoice.SEVEN_ZIP:
        return ArchiveType.SEVEN_ZIP
    return None


def build_policy(
    *,
    mode: SyncMode,
    archive_type: TypeChoice = TypeChoice.AUTO,
    exclude: list[str] | None = None,
    exclude_unless_missing: list[str] | None = None,
    exclude_unless_changed: list[str] | None = None,
    password: str | None = None,
) -> SyncPolicy:
    """Build a SyncPolicy from command line options."""
    return SyncPolicy(
        mode=mode,
        archive_type=to_archive_type(archive_type),
        exclude_files=list(exclude or []),
        exclude_unless_missing=list(exclude_unless_missing or []),
        exclude_unless_archive_changed=list(exclude_unless_changed or []),
        password=password,
    )


def get_context_config(ctx: typer.Context) -> ArcsyncConfig:
    """Get the configuration loaded by the main callback."""
    if isinstance(ctx.obj, dict) and isinstance(ctx.obj.get("config"), ArcsyncConfig):
        return ctx.obj["config"]
    return ArcsyncConfig()
