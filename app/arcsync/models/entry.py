"""Archive entry and operation result models."""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ArchiveEntry:
    """An entry listed by a codec backend.

    Attributes:
        path: Archive-relative path, forward-slash normalized, no trailing slash.
        is_directory: Whether the entry is a directory marker.
        index: Opaque handle the backend uses to extract the entry.
    """

    path: str
    is_directory: bool
    index: object = field(default=None, compare=False)

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.path:
            msg = "Archive entry path cannot be empty"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class SyncResult:
    """Outcome of an add, extract or SFX create operation.

    Attributes:
        archive_path: Archive (or SFX package) the manifest belongs to.
        manifest_path: Where the manifest was persisted, None if it was not.
        checksums: Final snapshot of the manifest mapping.
        processed: Archive-relative paths that were added or extracted.
    """

    archive_path: Path
    manifest_path: Path | None
    checksums: dict[str, str]
    processed: tuple[str, ...] = ()

    @property
    def changed(self) -> bool:
        """Whether any entry was written."""
        return bool(self.processed)
