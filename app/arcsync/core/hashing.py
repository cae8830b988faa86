"""Content fingerprints for files and archives."""

import hashlib
from pathlib import Path

# Fingerprint recorded for directory entries instead of a content hash
DIRECTORY = "directory"

# Identity suffix used for an archive that does not exist yet
MISSING_ARCHIVE = "does_not_exist"

_CHUNK_SIZE = 1024 * 1024


def file_checksum(path: Path) -> str:
    """Compute the SHA-256 hex digest of a file's content.

    Args:
        path: File to hash.

    Returns:
        Lowercase hex digest.

    Raises:
        OSError: If the file cannot be read.
    """
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def archive_identity(path: Path) -> str:
    """Identity token of an archive: its content hash, or a fixed marker if absent."""
    if path.is_file():
        return file_checksum(path)
    return MISSING_ARCHIVE
