"""Abstract base classes for archive codec backends.

A backend wraps one container format. It can tell whether it is able to
open a file, list and extract entries, and write a complete new archive.
Backends never modify an archive in place: the session always writes a
fresh archive and swaps it in.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from types import TracebackType

from arcsync.core.errors import UnsupportedOperationError
from arcsync.models.entry import ArchiveEntry
from arcsync.models.policy import ArchiveType


class ArchiveWriter(ABC):
    """Writes a complete archive to a target path.

    Used as a context manager: the archive is finalized on a clean exit
    and discarded if the block raises.

    Example:
        >>> with backend.open_writer(Path("out.zip")) as writer:
        ...     writer.add_directory("docs")
        ...     writer.add_file("docs/readme.txt", Path("src/docs/readme.txt"))
    """

    def __init__(self, target: Path, password: str | None = None) -> None:
        """Initialize the writer.

        Args:
            target: Path of the archive file to create.
            password: Optional archive password, passed through opaquely.
        """
        self._target = target
        self._password = password

    @property
    def target(self) -> Path:
        """Archive file being written."""
        return self._target

    @abstractmethod
    def add_file(self, relative_path: str, source: Path) -> None:
        """Add a file's bytes under an archive-relative path.

        Args:
            relative_path: Forward-slash path inside the archive.
            source: File on disk to read.

        Raises:
            OSError: If the source cannot be read or the archive written.
        """

    @abstractmethod
    def add_directory(self, relative_path: str) -> None:
        """Add a directory marker.

        Args:
            relative_path: Forward-slash path inside the archive.
        """

    @abstractmethod
    def copy_entries(self, source_archive: Path, entries: list[ArchiveEntry]) -> None:
        """Carry entries of an existing archive forward into this one.

        Args:
            source_archive: Existing archive of the same format.
            entries: Entries (as listed from source_archive) to copy.
        """

    @abstractmethod
    def close(self) -> None:
        """Finalize the archive at the target path."""

    @abstractmethod
    def abort(self) -> None:
        """Discard everything written so far."""

    def __enter__(self) -> "ArchiveWriter":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.close()
        else:
            self.abort()


class ArchiveBackend(ABC):
    """Abstract base class for all archive codec backends.

    Example:
        >>> backend = ZipBackend()
        >>> if backend.can_open(path):
        ...     for entry in backend.list_entries(path):
        ...         print(entry.path, entry.is_directory)
    """

    def __init__(self, password: str | None = None) -> None:
        """Initialize the backend.

        Args:
            password: Optional archive password, passed through opaquely.
        """
        self._password = password

    @property
    @abstractmethod
    def archive_type(self) -> ArchiveType:
        """Return the archive type this backend handles."""

    @abstractmethod
    def can_open(self, path: Path) -> bool:
        """Check whether the file is an archive of this type.

        Must not modify anything and must not raise for "not this type".

        Args:
            path: File to probe.

        Returns:
            True if the backend can read the file.
        """

    @abstractmethod
    def list_entries(self, path: Path) -> list[ArchiveEntry]:
        """List the entries of an archive in enumeration order.

        Args:
            path: Archive to read.

        Returns:
            Entries with forward-slash relative paths.

        Raises:
            OSError: If the archive cannot be read.
        """

    @abstractmethod
    def extract_entry(self, path: Path, entry: ArchiveEntry, destination_root: Path) -> Path:
        """Extract one file entry below a destination directory.

        Args:
            path: Archive to read.
            entry: Entry to extract, as returned by list_entries().
            destination_root: Directory the entry's relative path is joined to.

        Returns:
            Path of the extracted file.

        Raises:
            OSError: If the entry cannot be extracted.
        """

    @abstractmethod
    def open_writer(self, target: Path) -> ArchiveWriter:
        """Create a writer producing a new archive at target.

        Args:
            target: Archive file to create (overwritten if present).

        Returns:
            ArchiveWriter context manager.
        """

    def read_entry_bytes(self, path: Path, relative_path: str) -> bytes:
        """Read one entry's bytes without extracting it.

        Args:
            path: Archive to read.
            relative_path: Entry path inside the archive.

        Returns:
            Entry content.

        Raises:
            UnsupportedOperationError: If the backend cannot read single entries.
        """
        msg = f"Reading single entries is not supported for {self.archive_type.value} archives"
        raise UnsupportedOperationError(msg)
