"""Checksum manifest persistence.

A manifest maps archive-relative paths to content fingerprints (SHA-256
hex digests, or ``"directory"``) and records the whole-archive hash under
the reserved ``archive_checksum`` key. Each manifest file is named after
the archive's basename and content hash, so it is bound to one exact
version of the archive: if the archive changes behind our back, the next
sync finds no manifest and reconciles everything again.

The on-disk format is a flat UTF-8 JSON object of string to string.
"""

import json
import logging
import os
from collections.abc import Iterator
from pathlib import Path
from tempfile import NamedTemporaryFile

from pydantic import RootModel, ValidationError, model_validator

from arcsync.core.errors import ManifestCorruptError, ManifestError
from arcsync.core.hashing import archive_identity, file_checksum
from arcsync.core.matcher import normalize_relative
from arcsync.core.paths import get_checksums_dir

logger = logging.getLogger(__name__)

# Reserved key holding the whole-archive content hash
ARCHIVE_CHECKSUM_KEY = "archive_checksum"


class ManifestDocument(RootModel[dict[str, str]]):
    """Schema of a persisted manifest file."""

    @model_validator(mode="after")
    def validate_archive_checksum(self) -> "ManifestDocument":
        """A persisted manifest always carries the archive checksum."""
        if ARCHIVE_CHECKSUM_KEY not in self.root:
            msg = f"Missing required key '{ARCHIVE_CHECKSUM_KEY}'"
            raise ValueError(msg)
        return self


def compute_identity_path(
    archive_path: Path, cache_root: Path, archive_checksum: str | None = None
) -> Path:
    """Build the manifest file path for the current content of an archive.

    Args:
        archive_path: Archive the manifest belongs to.
        cache_root: Cache root directory.
        archive_checksum: Already computed hash of the archive, if known.

    Returns:
        <cache_root>/checksums/<basename>-<sha256 or does_not_exist>.json
    """
    identity = archive_checksum or archive_identity(archive_path)
    return get_checksums_dir(cache_root) / f"{archive_path.name}-{identity}.json"


class ChecksumManifest:
    """Mutable mapping of archive-relative path to fingerprint.

    A manifest is owned by one session for the duration of one operation.
    It is mutated in place and persisted once, atomically, at the end.

    Attributes:
        archive_path: Absolute path of the archive (or SFX package) owning it.
        cache_root: Cache root the identity path is computed under.
    """

    def __init__(
        self,
        archive_path: Path,
        cache_root: Path,
        checksums: dict[str, str] | None = None,
        source_path: Path | None = None,
    ) -> None:
        """Initialize a manifest.

        Args:
            archive_path: Archive the manifest belongs to.
            cache_root: Cache root directory.
            checksums: Initial mapping (including archive_checksum, if any).
            source_path: File the mapping was loaded from, if any.
        """
        self.archive_path = archive_path.absolute()
        self.cache_root = cache_root
        self._checksums: dict[str, str] = dict(checksums or {})
        self._source_path = source_path

    @classmethod
    def load(cls, path: Path, archive_path: Path, cache_root: Path) -> "ChecksumManifest":
        """Load a manifest from a JSON file.

        A missing file is not an error: an empty manifest is returned.

        Args:
            path: Manifest file to read.
            archive_path: Archive the manifest belongs to.
            cache_root: Cache root directory.

        Returns:
            Loaded (or empty) manifest.

        Raises:
            ManifestCorruptError: If the file exists but is not a valid manifest.
            ManifestError: If the file cannot be read.
        """
        if not path.exists():
            logger.debug("No manifest at %s, starting empty", path)
            return cls(archive_path, cache_root)

        try:
            raw = path.read_bytes()
        except OSError as e:
            raise ManifestError(f"Failed to read manifest {path}: {e}") from e

        try:
            document = ManifestDocument.model_validate_json(raw)
        except ValidationError as e:
            raise ManifestCorruptError(f"Corrupt manifest {path}: {e}") from e

        logger.debug("Loaded %d manifest entries from %s", len(document.root), path)
        return cls(archive_path, cache_root, document.root, source_path=path)

    @classmethod
    def for_archive(cls, archive_path: Path, cache_root: Path) -> "ChecksumManifest":
        """Load the manifest bound to the archive's current content.

        Args:
            archive_path: Archive the manifest belongs to.
            cache_root: Cache root directory.

        Returns:
            Loaded (or empty) manifest.

        Raises:
            ManifestCorruptError: If the persisted manifest is corrupt.
        """
        identity_path = compute_identity_path(archive_path, cache_root)
        return cls.load(identity_path, archive_path, cache_root)

    @property
    def identity_path(self) -> Path:
        """Manifest file path for the archive's current content."""
        return compute_identity_path(self.archive_path, self.cache_root)

    @property
    def archive_checksum(self) -> str | None:
        """Whole-archive hash recorded when the manifest was last synced."""
        return self._checksums.get(ARCHIVE_CHECKSUM_KEY)

    @archive_checksum.setter
    def archive_checksum(self, value: str) -> None:
        self._checksums[ARCHIVE_CHECKSUM_KEY] = value

    def get(self, relative_path: str) -> str | None:
        """Get the fingerprint recorded for an entry, or None."""
        return self._checksums.get(normalize_relative(relative_path))

    def set(self, relative_path: str, fingerprint: str) -> None:
        """Record the fingerprint of an entry."""
        key = normalize_relative(relative_path)
        if key == ARCHIVE_CHECKSUM_KEY:
            msg = f"'{ARCHIVE_CHECKSUM_KEY}' is reserved"
            raise ValueError(msg)
        self._checksums[key] = fingerprint

    def delete(self, relative_path: str) -> None:
        """Forget an entry. Unknown entries are ignored."""
        self._checksums.pop(normalize_relative(relative_path), None)

    def clear(self) -> None:
        """Drop every entry, including the archive checksum."""
        self._checksums.clear()

    def entry_paths(self) -> list[str]:
        """Recorded entry paths, without the reserved key."""
        return [key for key in self._checksums if key != ARCHIVE_CHECKSUM_KEY]

    def __contains__(self, relative_path: object) -> bool:
        if not isinstance(relative_path, str):
            return False
        return normalize_relative(relative_path) in self._checksums

    def __iter__(self) -> Iterator[str]:
        return iter(self.entry_paths())

    def __len__(self) -> int:
        return len(self.entry_paths())

    def snapshot(self) -> dict[str, str]:
        """Copy of the full mapping, including the reserved key."""
        return dict(self._checksums)

    def refresh_archive_checksum(self) -> str:
        """Recompute and store the hash of the archive's current content.

        Raises:
            ManifestError: If the archive cannot be read.
        """
        try:
            checksum = file_checksum(self.archive_path)
        except OSError as e:
            raise ManifestError(f"Cannot hash archive {self.archive_path}: {e}") from e
        self.archive_checksum = checksum
        return checksum

    def persist(self) -> Path:
        """Write the manifest atomically under the archive's identity path.

        The archive checksum is refreshed first so the stored mapping always
        describes the archive content the file name is derived from. The
        manifest previously loaded for an older archive version is removed.

        Returns:
            Path where the manifest was saved.

        Raises:
            ManifestError: If the archive is missing or the file cannot be written.
        """
        if not self.archive_path.is_file():
            raise ManifestError(f"Cannot persist manifest, archive missing: {self.archive_path}")

        checksum = self.refresh_archive_checksum()
        target = compute_identity_path(self.archive_path, self.cache_root, checksum)
        target.parent.mkdir(parents=True, exist_ok=True)

        tmp_path: Path | None = None
        try:
            with NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=target.parent,
                delete=False,
                suffix=".tmp",
            ) as f:
                tmp_path = Path(f.name)
                json.dump(self._checksums, f, indent=2, sort_keys=True)
            os.replace(str(tmp_path), str(target))
        except OSError as e:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            raise ManifestError(f"Failed to write manifest: {e}") from e

        if self._source_path is not None and self._source_path != target:
            logger.debug("Removing superseded manifest %s", self._source_path)
            self._source_path.unlink(missing_ok=True)
        self._source_path = target

        logger.debug("Persisted %d manifest entries to %s", len(self), target)
        return target
