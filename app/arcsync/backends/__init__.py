"""Archive codec backends.

This module exports the backend classes and the helpers that select one
for an archive type or detect the type of an existing archive.
"""

import logging
from pathlib import Path

from arcsync.backends.base import ArchiveBackend, ArchiveWriter
from arcsync.backends.seven_zip import SevenZipBackend
from arcsync.backends.zip import ZipBackend
from arcsync.core.config import ArcsyncConfig
from arcsync.core.errors import UnsupportedArchiveError
from arcsync.models.policy import ArchiveType

logger = logging.getLogger(__name__)

# Order in which types are tried when detecting an existing archive
DETECTION_ORDER: tuple[ArchiveType, ...] = (ArchiveType.ZIP, ArchiveType.SEVEN_ZIP)


def get_backend(
    archive_type: ArchiveType,
    *,
    password: str | None = None,
    config: ArcsyncConfig | None = None,
) -> ArchiveBackend:
    """Create the backend for an archive type.

    Args:
        archive_type: Container format.
        password: Optional archive password.
        config: arcsync configuration (used to locate 7z).

    Returns:
        Backend instance.
    """
    if archive_type == ArchiveType.ZIP:
        return ZipBackend(password)
    return SevenZipBackend(password, config=config)


def detect_backend(
    path: Path,
    *,
    password: str | None = None,
    config: ArcsyncConfig | None = None,
) -> ArchiveBackend:
    """Detect the format of an existing archive.

    Each supported type is tried in DETECTION_ORDER; the first backend that
    can open the file wins.

    Args:
        path: Existing archive.
        password: Optional archive password.
        config: arcsync configuration.

    Returns:
        Backend able to read the archive.

    Raises:
        UnsupportedArchiveError: If no backend can open the file.
    """
    for archive_type in DETECTION_ORDER:
        backend = get_backend(archive_type, password=password, config=config)
        if backend.can_open(path):
            logger.debug("Detected %s archive: %s", archive_type.value, path)
            return backend
        logger.debug("%s is not a %s archive", path, archive_type.value)

    supported = ", ".join(t.value for t in DETECTION_ORDER)
    msg = f"{path} is not a supported archive (tried {supported})"
    raise UnsupportedArchiveError(msg)


__all__ = [
    "DETECTION_ORDER",
    "ArchiveBackend",
    "ArchiveWriter",
    "SevenZipBackend",
    "ZipBackend",
    "detect_backend",
    "get_backend",
]
