"""Per-operation sync policy.

This module defines the Pydantic model describing how a single add or
extract operation decides which entries to process.
"""

import re
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

# A path pattern is either a wildcard string or a compiled regular expression
PathPattern = str | re.Pattern[str]


class SyncMode(str, Enum):
    """How entries that already exist on the other side are treated.

    Attributes:
        IDEMPOTENT: Skip entries whose fingerprint already matches.
        OVERWRITE: Always process every entry.
        IF_MISSING: Process only entries absent on the other side.
    """

    IDEMPOTENT = "idempotent"
    OVERWRITE = "overwrite"
    IF_MISSING = "if_missing"


class ArchiveType(str, Enum):
    """Supported archive container formats."""

    ZIP = "zip"
    SEVEN_ZIP = "seven_zip"


class SyncPolicy(BaseModel):
    """Configuration of one add or extract operation.

    Attributes:
        mode: Skip strategy for entries already present.
        exclude_files: Patterns that are always excluded.
        exclude_unless_missing: Patterns excluded once the entry exists on
            disk or in the manifest.
        exclude_unless_archive_changed: Patterns excluded on extract when the
            destination exists and the archive has not changed.
        archive_type: Container format. None means auto-detect an existing
            archive, or zip for a new one.
        password: Passed through opaquely to the codec backend.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    mode: Annotated[SyncMode, Field(description="Skip strategy")] = SyncMode.IDEMPOTENT
    exclude_files: Annotated[
        list[PathPattern],
        Field(default_factory=list, description="Always excluded patterns"),
    ]
    exclude_unless_missing: Annotated[
        list[PathPattern],
        Field(default_factory=list, description="Excluded unless missing"),
    ]
    exclude_unless_archive_changed: Annotated[
        list[PathPattern],
        Field(default_factory=list, description="Excluded unless the archive changed"),
    ]
    archive_type: Annotated[
        ArchiveType | None,
        Field(description="Container format (None = detect)"),
    ] = None
    password: Annotated[str | None, Field(description="Archive password", repr=False)] = None

    @property
    def allows_overwrite(self) -> bool:
        """Whether existing destination files may be replaced."""
        return self.mode != SyncMode.IF_MISSING
