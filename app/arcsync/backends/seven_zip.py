"""7z backend driving the 7-Zip command line executable.

7z archives are never modified in place: the writer stages every entry in
a scratch directory and asks 7z to build a brand-new archive from it.
"""

import logging
import shutil
from pathlib import Path
from tempfile import TemporaryDirectory

from arcsync.backends.base import ArchiveBackend, ArchiveWriter
from arcsync.backends.discovery import find_seven_zip_executable
from arcsync.core.config import ArcsyncConfig
from arcsync.core.matcher import normalize_relative
from arcsync.models.entry import ArchiveEntry
from arcsync.models.policy import ArchiveType
from arcsync.utils.shell import CommandResult, run_command

logger = logging.getLogger(__name__)

# 7z signature: '7z' BC AF 27 1C
SEVEN_ZIP_MAGIC = b"7z\xbc\xaf\x27\x1c"

# Separates the archive header block from the entry blocks in `7z l -slt`
_LISTING_SEPARATOR = "----------"


def parse_slt_listing(output: str) -> list[ArchiveEntry]:
    """Parse the technical listing printed by ``7z l -slt``.

    Args:
        output: Standard output of the listing command.

    Returns:
        Entries in archive order.
    """
    _, found, body = output.partition(_LISTING_SEPARATOR)
    if not found:
        return []

    entries: list[ArchiveEntry] = []
    fields: dict[str, str] = {}

    def _flush() -> None:
        path = normalize_relative(fields.get("Path", ""))
        if path:
            is_directory = fields.get("Folder") == "+" or fields.get(
                "Attributes", ""
            ).startswith("D")
            entries.append(ArchiveEntry(path=path, is_directory=is_directory, index=path))
        fields.clear()

    for line in body.splitlines():
        if not line.strip():
            _flush()
            continue
        key, sep, value = line.partition(" = ")
        if sep:
            fields[key.strip()] = value.strip()
    _flush()
    return entries


class SevenZipWriter(ArchiveWriter):
    """Builds a new 7z archive from a staging directory."""

    def __init__(self, target: Path, executable: Path, password: str | None = None) -> None:
        super().__init__(target, password)
        self._executable = executable
        self._scratch = TemporaryDirectory(prefix="arcsync-7z-")
        self._staging = Path(self._scratch.name) / "content"
        self._staging.mkdir()
        target.unlink(missing_ok=True)

    def add_file(self, relative_path: str, source: Path) -> None:
        staged = self._staging / normalize_relative(relative_path)
        staged.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, staged)

    def add_directory(self, relative_path: str) -> None:
        (self._staging / normalize_relative(relative_path)).mkdir(parents=True, exist_ok=True)

    def copy_entries(self, source_archive: Path, entries: list[ArchiveEntry]) -> None:
        files = [entry.path for entry in entries if not entry.is_directory]
        for entry in entries:
            if entry.is_directory:
                self.add_directory(entry.path)
        if not files:
            return

        list_file = Path(self._scratch.name) / "copy-forward.txt"
        list_file.write_text("\n".join(files) + "\n", encoding="utf-8")
        args = [
            str(self._executable),
            "x",
            "-y",
            "-aoa",
            "-spd",
            "-scsUTF-8",
            f"-p{self._password or ''}",
            f"-o{self._staging}",
            "--",
            str(source_archive),
            f"@{list_file}",
        ]
        _check(run_command(args), f"copy entries from {source_archive}")

    def close(self) -> None:
        try:
            names = sorted(child.name for child in self._staging.iterdir())
            if not names:
                msg = f"Nothing to write to {self._target}"
                raise OSError(msg)
            args = [str(self._executable), "a", "-t7z", "-y"]
            if self._password:
                args += [f"-p{self._password}", "-mhe=on"]
            args += ["--", str(self._target.absolute()), *names]
            _check(run_command(args, cwd=str(self._staging)), f"write {self._target}")
        finally:
            self._scratch.cleanup()

    def abort(self) -> None:
        self._scratch.cleanup()
        self._target.unlink(missing_ok=True)


def _check(result: CommandResult, action: str) -> None:
    if not result.success:
        detail = result.stderr.strip() or result.stdout.strip() or f"exit code {result.returncode}"
        msg = f"7z failed to {action}: {detail}"
        raise OSError(msg)


class SevenZipBackend(ArchiveBackend):
    """Codec backend for 7z archives.

    The executable is resolved lazily, so probing a file with can_open()
    works even where 7-Zip is not installed.
    """

    def __init__(
        self,
        password: str | None = None,
        config: ArcsyncConfig | None = None,
        executable: Path | None = None,
    ) -> None:
        super().__init__(password)
        self._config = config
        self._executable = executable

    @property
    def archive_type(self) -> ArchiveType:
        """Return SEVEN_ZIP as the archive type."""
        return ArchiveType.SEVEN_ZIP

    @property
    def executable(self) -> Path:
        """Absolute path of the 7z executable.

        Raises:
            CodecNotFoundError: If 7z cannot be located.
        """
        if self._executable is None:
            self._executable = find_seven_zip_executable(self._config)
        return self._executable

    def can_open(self, path: Path) -> bool:
        """Check the 7z signature at the start of the file."""
        try:
            with open(path, "rb") as f:
                return f.read(len(SEVEN_ZIP_MAGIC)) == SEVEN_ZIP_MAGIC
        except OSError:
            return False

    def list_entries(self, path: Path) -> list[ArchiveEntry]:
        """List entries using ``7z l -slt``."""
        args = [str(self.executable), "l", "-slt", f"-p{self._password or ''}", "--", str(path)]
        result = run_command(args)
        _check(result, f"list {path}")
        return parse_slt_listing(result.stdout)

    def extract_entry(self, path: Path, entry: ArchiveEntry, destination_root: Path) -> Path:
        """Extract one entry with full path, overwriting existing files."""
        args = [
            str(self.executable),
            "x",
            "-y",
            "-aoa",
            "-spd",
            f"-p{self._password or ''}",
            f"-o{destination_root}",
            "--",
            str(path),
            str(entry.index or entry.path),
        ]
        _check(run_command(args), f"extract {entry.path} from {path}")
        return destination_root / entry.path

    def open_writer(self, target: Path) -> SevenZipWriter:
        """Create a writer that builds a new 7z archive."""
        return SevenZipWriter(target, self.executable, self._password)
