"""Zip backend built on the standard library zipfile module."""

import logging
import shutil
import zipfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from arcsync.backends.base import ArchiveBackend, ArchiveWriter
from arcsync.core.matcher import normalize_relative
from arcsync.models.entry import ArchiveEntry
from arcsync.models.policy import ArchiveType

logger = logging.getLogger(__name__)

# drwxrwxr-x plus the MS-DOS directory flag
_DIRECTORY_ATTRIBUTES = (0o40775 << 16) | 0x10


@contextmanager
def _open_zip(path: Path) -> Iterator[zipfile.ZipFile]:
    """Open a zip archive for reading, reporting format errors as OSError."""
    try:
        with zipfile.ZipFile(path) as archive:
            yield archive
    except (zipfile.BadZipFile, RuntimeError) as e:
        # RuntimeError: encrypted entry without (or with a wrong) password
        msg = f"Cannot read zip archive {path}: {e}"
        raise OSError(msg) from e


class ZipWriter(ArchiveWriter):
    """Writes a new zip archive with deflate compression."""

    def __init__(self, target: Path, password: str | None = None) -> None:
        super().__init__(target, password)
        self._zip = zipfile.ZipFile(target, mode="w", compression=zipfile.ZIP_DEFLATED)
        self._names: set[str] = set()

    def add_file(self, relative_path: str, source: Path) -> None:
        name = normalize_relative(relative_path)
        self._zip.write(source, arcname=name)
        self._names.add(name)

    def add_directory(self, relative_path: str) -> None:
        name = normalize_relative(relative_path) + "/"
        if name in self._names:
            return
        info = zipfile.ZipInfo(name)
        info.external_attr = _DIRECTORY_ATTRIBUTES
        self._zip.writestr(info, b"")
        self._names.add(name)

    def copy_entries(self, source_archive: Path, entries: list[ArchiveEntry]) -> None:
        pwd = self._password.encode() if self._password else None
        with _open_zip(source_archive) as source:
            for entry in entries:
                if entry.is_directory:
                    self.add_directory(entry.path)
                    continue
                info = source.getinfo(str(entry.index))
                copied = zipfile.ZipInfo(info.filename, date_time=info.date_time)
                copied.external_attr = info.external_attr
                copied.compress_type = info.compress_type
                with source.open(info, pwd=pwd) as src, self._zip.open(copied, mode="w") as dst:
                    shutil.copyfileobj(src, dst)
                self._names.add(info.filename)

    def close(self) -> None:
        self._zip.close()

    def abort(self) -> None:
        self._zip.close()
        self._target.unlink(missing_ok=True)


class ZipBackend(ArchiveBackend):
    """Codec backend for zip archives."""

    @property
    def archive_type(self) -> ArchiveType:
        """Return ZIP as the archive type."""
        return ArchiveType.ZIP

    def can_open(self, path: Path) -> bool:
        """Check whether the file is a readable zip archive."""
        try:
            with zipfile.ZipFile(path) as archive:
                archive.infolist()
        except (zipfile.BadZipFile, OSError, ValueError):
            return False
        return True

    def list_entries(self, path: Path) -> list[ArchiveEntry]:
        """List zip entries; directory names lose their trailing slash."""
        with _open_zip(path) as archive:
            return [
                ArchiveEntry(
                    path=normalize_relative(info.filename),
                    is_directory=info.is_dir(),
                    index=info.filename,
                )
                for info in archive.infolist()
                if normalize_relative(info.filename)
            ]

    def extract_entry(self, path: Path, entry: ArchiveEntry, destination_root: Path) -> Path:
        """Extract one zip entry, overwriting an existing file."""
        destination = destination_root / entry.path
        destination.parent.mkdir(parents=True, exist_ok=True)
        pwd = self._password.encode() if self._password else None
        with _open_zip(path) as archive:
            with archive.open(str(entry.index), pwd=pwd) as src, open(destination, "wb") as dst:
                shutil.copyfileobj(src, dst)
        return destination

    def read_entry_bytes(self, path: Path, relative_path: str) -> bytes:
        """Read one entry's bytes straight from the zip archive.

        Raises:
            KeyError: If the archive has no such entry.
        """
        logger.debug("Reading %s // %s...", path, relative_path)
        pwd = self._password.encode() if self._password else None
        with _open_zip(path) as archive:
            return archive.read(normalize_relative(relative_path), pwd=pwd)

    def open_writer(self, target: Path) -> ZipWriter:
        """Create a writer for a new zip archive."""
        return ZipWriter(target, self._password)
