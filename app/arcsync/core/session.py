"""Archive sessions: apply a sync plan to one archive.

An ArchiveSession owns the policy, manifest and codec backend of a single
add or extract operation against one archive path. It is not safe to run
two sessions against the same archive at the same time; callers must
serialize access themselves.

Lifecycle: open (manifest loaded, archive type resolved) -> add/extract
(planned entries written, manifest updated) -> manifest persisted.
"""

import logging
import os
from collections.abc import Iterable
from pathlib import Path
from tempfile import NamedTemporaryFile

from arcsync.backends import ArchiveBackend, detect_backend, get_backend
from arcsync.core.config import ArcsyncConfig
from arcsync.core.errors import (
    ArchiveCreationFailedError,
    ArchiveNotFoundError,
    ExtractionFailedError,
)
from arcsync.core.hashing import DIRECTORY, file_checksum
from arcsync.core.manifest import ChecksumManifest
from arcsync.core.matcher import normalize_relative
from arcsync.core.planner import ALL, CandidateSpecs, SyncPlanner, relative_to_root
from arcsync.models.entry import ArchiveEntry, SyncResult
from arcsync.models.policy import ArchiveType, SyncPolicy

logger = logging.getLogger(__name__)


class ArchiveSession:
    """Synchronizes a filesystem tree with one archive.

    Attributes:
        archive_path: Absolute path of the archive.
        policy: Sync policy of the operation.
        manifest: Checksum manifest, mutated during the operation.
        config: arcsync configuration.
    """

    def __init__(
        self,
        archive_path: Path,
        policy: SyncPolicy | None = None,
        manifest: ChecksumManifest | None = None,
        *,
        config: ArcsyncConfig | None = None,
        defer_persist: bool = False,
    ) -> None:
        """Open a session on an archive.

        Loads the manifest bound to the archive's current content unless one
        is given, and resolves the archive type: the policy's type if set,
        otherwise detected from an existing archive, otherwise zip.

        Args:
            archive_path: Archive to read or create.
            policy: Sync policy. Defaults to idempotent mode, no exclusions.
            manifest: Manifest to use instead of the persisted one.
            config: arcsync configuration. Defaults to built-in defaults.
            defer_persist: If True, add() leaves persisting the manifest to
                the caller (used when building SFX packages).

        Raises:
            ManifestCorruptError: If the persisted manifest is corrupt.
            UnsupportedArchiveError: If an existing archive has an unknown format.
        """
        self.archive_path = archive_path.absolute()
        self.policy = policy or SyncPolicy()
        self.config = config or ArcsyncConfig()
        if manifest is None:
            manifest = ChecksumManifest.for_archive(self.archive_path, self.config.cache_root)
        self.manifest = manifest
        self._defer_persist = defer_persist
        self._planner = SyncPlanner(self.policy)
        self._backend = self._resolve_backend()

    @classmethod
    def open(
        cls,
        archive_path: Path,
        policy: SyncPolicy | None = None,
        manifest: ChecksumManifest | None = None,
        *,
        config: ArcsyncConfig | None = None,
    ) -> "ArchiveSession":
        """Open a session on an archive. See __init__ for details."""
        return cls(archive_path, policy, manifest, config=config)

    @property
    def archive_type(self) -> ArchiveType:
        """Resolved archive type of this session."""
        return self._backend.archive_type

    @property
    def backend(self) -> ArchiveBackend:
        """Codec backend selected for this session."""
        return self._backend

    def _resolve_backend(self) -> ArchiveBackend:
        archive_type = self.policy.archive_type
        password = self.policy.password
        if archive_type is None and self.archive_path.is_file():
            return detect_backend(self.archive_path, password=password, config=self.config)
        return get_backend(archive_type or ArchiveType.ZIP, password=password, config=self.config)

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------

    def plan_add(
        self, source_root: Path, candidate_specs: Iterable[str] | None = None
    ) -> list[Path]:
        """Compute the source paths an add would write, without writing.

        Args:
            source_root: Root that archive-relative paths are derived from.
            candidate_specs: Literal paths or globs; None means everything.

        Returns:
            Source paths in discovery order.
        """
        if not self.archive_path.is_file() and len(self.manifest):
            logger.debug("Archive %s is missing, starting over", self.archive_path)
            self.manifest.clear()
        return self._planner.plan_add(source_root.absolute(), candidate_specs, self.manifest)

    def plan_extract(
        self, destination_root: Path, candidate_specs: CandidateSpecs = ALL
    ) -> list[str]:
        """Compute the entries an extract would write, without writing.

        If the archive exists but cannot be listed, the plan is derived
        from the entries recorded in the manifest instead.

        Args:
            destination_root: Directory to extract into.
            candidate_specs: Entry paths/wildcards to consider, or ALL.

        Returns:
            Archive-relative entry paths, in archive order when listed.

        Raises:
            ArchiveNotFoundError: If the archive does not exist.
        """
        destination_root = destination_root.absolute()
        try:
            planned, _listing = self._plan_extract(destination_root, candidate_specs)
        except ExtractionFailedError as e:
            logger.warning("%s; planning from recorded manifest entries", e)
            fallback = self._planner.plan_extract(
                destination_root, candidate_specs, self.manifest, None
            )
            # With a manifest the planner always returns concrete entry paths
            assert fallback is not ALL
            return list(fallback)
        return planned

    def _plan_extract(
        self, destination_root: Path, candidate_specs: CandidateSpecs
    ) -> tuple[list[str], dict[str, ArchiveEntry]]:
        if not self.archive_path.is_file():
            raise ArchiveNotFoundError(f"Archive not found: {self.archive_path}")

        try:
            listing = self._backend.list_entries(self.archive_path)
            archive_checksum = file_checksum(self.archive_path)
        except OSError as e:
            raise ExtractionFailedError(f"Cannot read archive {self.archive_path}: {e}") from e

        planned = self._planner.plan_extract(
            destination_root,
            candidate_specs,
            self.manifest,
            listing,
            archive_checksum=archive_checksum,
        )
        # With a listing the planner always returns concrete entry paths
        assert planned is not ALL
        return list(planned), {entry.path: entry for entry in listing}

    # ------------------------------------------------------------------
    # Extract
    # ------------------------------------------------------------------

    def extract(
        self, destination_root: Path, candidate_specs: CandidateSpecs = ALL
    ) -> SyncResult:
        """Extract the planned entries into a destination directory.

        Any failure aborts the whole operation before the manifest is
        persisted; entries already written stay on disk.

        Args:
            destination_root: Directory to extract into.
            candidate_specs: Entry paths/wildcards to consider, or ALL.

        Returns:
            SyncResult with the persisted manifest snapshot.

        Raises:
            ArchiveNotFoundError: If the archive does not exist.
            ExtractionFailedError: If reading or writing any entry fails.
        """
        destination_root = destination_root.absolute()
        planned, entries = self._plan_extract(destination_root, candidate_specs)

        logger.info("Extracting to %s...", destination_root)
        processed: list[str] = []
        try:
            for relative_path in planned:
                if self._extract_one(entries[relative_path], destination_root):
                    processed.append(relative_path)
            manifest_path = self.manifest.persist()
        except OSError as e:
            raise ExtractionFailedError(f"Extraction from {self.archive_path} failed: {e}") from e

        return SyncResult(
            archive_path=self.archive_path,
            manifest_path=manifest_path,
            checksums=self.manifest.snapshot(),
            processed=tuple(processed),
        )

    def _extract_one(self, entry: ArchiveEntry, destination_root: Path) -> bool:
        destination = destination_root / entry.path
        if not destination.resolve().is_relative_to(destination_root.resolve()):
            raise ExtractionFailedError(f"Entry escapes destination directory: {entry.path}")

        if entry.is_directory:
            destination.mkdir(parents=True, exist_ok=True)
            self.manifest.set(entry.path, DIRECTORY)
            return True

        if destination.exists() and not self.policy.allows_overwrite:
            logger.debug("Not overwriting existing %s", destination)
            return False

        logger.info("Extracting %s...", entry.path)
        extracted = self._backend.extract_entry(self.archive_path, entry, destination_root)
        self.manifest.set(entry.path, file_checksum(extracted))
        return True

    # ------------------------------------------------------------------
    # Add
    # ------------------------------------------------------------------

    def add(self, source_root: Path, candidate_specs: Iterable[str] | None = None) -> SyncResult:
        """Add the planned source paths to the archive.

        The archive is rewritten into a temporary sibling file: unchanged
        entries are carried forward from the existing archive, planned ones
        are written fresh, and the result replaces the archive atomically.

        Args:
            source_root: Root that archive-relative paths are derived from.
            candidate_specs: Literal paths or globs; None means everything.

        Returns:
            SyncResult with the manifest snapshot. manifest_path is None when
            persisting was deferred or there was nothing to persist.

        Raises:
            ArchiveCreationFailedError: If writing the archive fails.
        """
        source_root = source_root.absolute()
        planned = self.plan_add(source_root, candidate_specs)

        if not planned:
            logger.info("No changes to add to %s", self.archive_path)
            manifest_path = None
            if self.archive_path.is_file() and not self._defer_persist:
                manifest_path = self.manifest.persist()
            return SyncResult(
                archive_path=self.archive_path,
                manifest_path=manifest_path,
                checksums=self.manifest.snapshot(),
            )

        try:
            self.archive_path.parent.mkdir(parents=True, exist_ok=True)
            processed = self._rewrite_archive(source_root, planned)
        except OSError as e:
            raise ArchiveCreationFailedError(
                f"Failed to write archive {self.archive_path}: {e}"
            ) from e

        if not self.archive_path.is_file():
            raise ArchiveCreationFailedError(f"Failed to create archive at {self.archive_path}!")

        manifest_path = None
        if not self._defer_persist:
            manifest_path = self.manifest.persist()

        return SyncResult(
            archive_path=self.archive_path,
            manifest_path=manifest_path,
            checksums=self.manifest.snapshot(),
            processed=tuple(processed),
        )

    def _rewrite_archive(self, source_root: Path, planned: list[Path]) -> list[str]:
        relative_paths = [relative_to_root(source_root, source) for source in planned]
        rewritten = set(relative_paths)

        carried: list[ArchiveEntry] = []
        if self.archive_path.is_file():
            carried = [
                entry
                for entry in self._backend.list_entries(self.archive_path)
                if entry.path not in rewritten
            ]

        # Entries about to be rewritten lose their stale fingerprints, and
        # anything no longer in the archive is forgotten.
        kept = {entry.path for entry in carried}
        for path in self.manifest.entry_paths():
            if path in rewritten or path not in kept:
                self.manifest.delete(path)

        with NamedTemporaryFile(
            dir=self.archive_path.parent,
            prefix=f".{self.archive_path.name}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            tmp_path = Path(f.name)

        logger.info("Compressing to %s...", self.archive_path)
        try:
            with self._backend.open_writer(tmp_path) as writer:
                if carried:
                    logger.debug("Carrying forward %d unchanged entries", len(carried))
                    writer.copy_entries(self.archive_path, carried)
                for source, relative_path in zip(planned, relative_paths, strict=True):
                    logger.info("Compressing %s...", relative_path)
                    if source.is_dir():
                        writer.add_directory(relative_path)
                    elif source.is_file():
                        writer.add_file(relative_path, source)
                    else:
                        msg = f"Source path does not exist: {source}"
                        raise FileNotFoundError(msg)
            os.replace(tmp_path, self.archive_path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

        for source, relative_path in zip(planned, relative_paths, strict=True):
            fingerprint = DIRECTORY if source.is_dir() else file_checksum(source)
            self.manifest.set(relative_path, fingerprint)
        return relative_paths

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def view_file(self, relative_path: str) -> bytes:
        """Read one entry's bytes without extracting the archive.

        Args:
            relative_path: Entry path inside the archive.

        Returns:
            Entry content.

        Raises:
            ArchiveNotFoundError: If the archive does not exist.
            UnsupportedOperationError: If the backend cannot read single entries.
            ExtractionFailedError: If the entry cannot be read.
        """
        if not self.archive_path.is_file():
            raise ArchiveNotFoundError(f"Archive not found: {self.archive_path}")
        try:
            return self._backend.read_entry_bytes(
                self.archive_path, normalize_relative(relative_path)
            )
        except (OSError, KeyError) as e:
            raise ExtractionFailedError(
                f"Cannot read {relative_path} from {self.archive_path}: {e}"
            ) from e
