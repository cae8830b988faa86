"""Sync planning: decide which entries an add or extract must process.

The planner is pure decision logic. It reads the filesystem and the
manifest but never writes anything; the session applies its result.
"""

import glob
import logging
from collections.abc import Iterable, Sequence
from enum import Enum
from pathlib import Path

from arcsync.core.hashing import DIRECTORY, file_checksum
from arcsync.core.manifest import ChecksumManifest
from arcsync.core.matcher import is_excluded, matches, normalize_path, normalize_relative
from arcsync.models.entry import ArchiveEntry
from arcsync.models.policy import SyncMode, SyncPolicy

logger = logging.getLogger(__name__)

# Candidates used when an add is given none: everything under the root
DEFAULT_ADD_SPECS: tuple[str, ...] = ("**/*",)


class _All(Enum):
    ALL = "all"


# Sentinel meaning "every entry of the archive"
ALL = _All.ALL

CandidateSpecs = Sequence[str] | _All


def _is_wildcard(spec: str) -> bool:
    return "*" in spec


def _glob_pattern(spec: str) -> str:
    # Only "*" is a wildcard; every other glob character is taken literally
    return "*".join(glob.escape(part) for part in spec.split("*"))


def relative_to_root(root: Path, path: Path | str) -> str:
    """Strip a root prefix from a path and return it archive-relative.

    Paths outside the root are returned normalized but otherwise unchanged.
    """
    candidate = Path(path)
    try:
        return normalize_relative(candidate.relative_to(root).as_posix())
    except ValueError:
        return normalize_relative(candidate.as_posix())


class SyncPlanner:
    """Computes add-sets and extract-sets for one operation.

    Args:
        policy: Sync policy of the operation.
    """

    def __init__(self, policy: SyncPolicy) -> None:
        self._policy = policy

    @property
    def policy(self) -> SyncPolicy:
        """Sync policy this planner applies."""
        return self._policy

    # ------------------------------------------------------------------
    # Add
    # ------------------------------------------------------------------

    def expand_candidates(self, source_root: Path, candidate_specs: Iterable[str]) -> list[Path]:
        """Expand candidate specs against the filesystem.

        Literal paths and wildcard globs are resolved relative to the source
        root. Only ``*`` is a wildcard, so brackets and question marks in
        the root or in a spec match themselves. A literal spec is kept
        whether or not it exists; a wildcard that matches nothing is
        dropped. Order follows the specs, then filesystem enumeration
        order; duplicates are dropped.

        Args:
            source_root: Root the specs are relative to.
            candidate_specs: Literal paths or glob patterns.

        Returns:
            Ordered, de-duplicated source paths.
        """
        resolved: dict[Path, None] = {}
        for spec in candidate_specs:
            spec_path = Path(normalize_path(spec))
            target = spec_path if spec_path.is_absolute() else source_root / spec_path
            if not _is_wildcard(spec):
                if not target.exists():
                    logger.debug("Candidate %s matched nothing, keeping it as given", spec)
                resolved.setdefault(target, None)
                continue

            if spec_path.is_absolute():
                pattern = _glob_pattern(spec_path.as_posix())
            else:
                pattern = f"{glob.escape(str(source_root))}/{_glob_pattern(spec_path.as_posix())}"
            found = glob.glob(pattern, recursive=True, include_hidden=True)
            if not found:
                logger.debug("Wildcard %s matched nothing", spec)
                continue
            for match in found:
                resolved.setdefault(Path(match), None)
        return list(resolved)

    def plan_add(
        self,
        source_root: Path,
        candidate_specs: Iterable[str] | None,
        manifest: ChecksumManifest,
    ) -> list[Path]:
        """Compute the ordered set of source paths that must be added.

        Args:
            source_root: Root that archive-relative paths are derived from.
            candidate_specs: Literal paths or glob patterns; None means all.
            manifest: Manifest of the target archive.

        Returns:
            Source paths to add, in discovery order.
        """
        specs = list(candidate_specs) if candidate_specs is not None else list(DEFAULT_ADD_SPECS)
        logger.debug("Listing add candidates under %s: %s", source_root, specs)
        sources = self.expand_candidates(source_root, specs)

        logger.debug("Filtering %d add candidates", len(sources))
        planned = [source for source in sources if self._should_add(source_root, source, manifest)]

        logger.debug("Planned %d of %d entries for add", len(planned), len(sources))
        return planned

    def _should_add(self, source_root: Path, source: Path, manifest: ChecksumManifest) -> bool:
        relative_path = relative_to_root(source_root, source)
        recorded = manifest.get(relative_path)
        exists_in_manifest = recorded is not None

        for candidate in (relative_path, normalize_path(source)):
            if is_excluded(candidate, self._policy, exists_in_manifest=exists_in_manifest):
                logger.debug("Excluded from add: %s", relative_path)
                return False

        mode = self._policy.mode
        if mode == SyncMode.IF_MISSING and exists_in_manifest:
            logger.debug("Already archived, skipping: %s", relative_path)
            return False

        if mode == SyncMode.IDEMPOTENT and exists_in_manifest:
            if source.is_dir():
                if recorded == DIRECTORY:
                    logger.debug("Directory unchanged: %s", relative_path)
                    return False
            elif source.is_file() and file_checksum(source) == recorded:
                logger.debug("File unchanged: %s", relative_path)
                return False

        return True

    # ------------------------------------------------------------------
    # Extract
    # ------------------------------------------------------------------

    def plan_extract(
        self,
        destination_root: Path,
        candidate_specs: CandidateSpecs,
        manifest: ChecksumManifest | None,
        listing: Sequence[ArchiveEntry] | None,
        *,
        archive_checksum: str | None = None,
    ) -> list[str] | _All:
        """Compute the ordered set of archive entries that must be extracted.

        With a listing, entries follow archive enumeration order. Without one
        (archive unreadable), candidates are derived from the manifest; with
        neither, the raw candidate specs are returned.

        Args:
            destination_root: Directory entries are extracted into.
            candidate_specs: Entry paths/wildcards to consider, or ALL.
            manifest: Manifest of the archive, if known.
            listing: Entries enumerated from the archive, if readable.
            archive_checksum: Current hash of the archive, used to decide
                whether it changed since the manifest was recorded.

        Returns:
            Archive-relative paths to extract, or ALL.
        """
        if listing is None:
            if manifest is None:
                logger.debug("No archive listing and no manifest, using candidates as given")
                if candidate_specs is ALL:
                    return ALL
                return [normalize_relative(spec) for spec in candidate_specs]
            logger.debug("Archive unreadable, planning from manifest entries")
            listing = [
                ArchiveEntry(path=path, is_directory=manifest.get(path) == DIRECTORY)
                for path in manifest.entry_paths()
            ]

        archive_unchanged = (
            manifest is not None
            and archive_checksum is not None
            and manifest.archive_checksum == archive_checksum
        )

        logger.debug("Filtering %d archive entries for extract", len(listing))
        planned = [
            entry.path
            for entry in listing
            if self._should_extract(
                destination_root, entry, candidate_specs, manifest, archive_unchanged
            )
        ]
        logger.debug("Planned %d of %d entries for extract", len(planned), len(listing))
        return planned

    def _should_extract(
        self,
        destination_root: Path,
        entry: ArchiveEntry,
        candidate_specs: CandidateSpecs,
        manifest: ChecksumManifest | None,
        archive_unchanged: bool,
    ) -> bool:
        if candidate_specs is not ALL and not self._is_candidate(entry.path, candidate_specs):
            return False

        destination = destination_root / entry.path
        if entry.is_directory and destination.is_dir():
            return False

        destination_exists = destination.exists()
        if self._policy.mode == SyncMode.IF_MISSING and destination_exists:
            logger.debug("Destination exists, skipping: %s", entry.path)
            return False

        recorded = manifest.get(entry.path) if manifest is not None else None
        if is_excluded(
            entry.path,
            self._policy,
            destination_exists=destination_exists,
            archive_unchanged=archive_unchanged,
        ):
            logger.debug("Excluded from extract: %s", entry.path)
            return False

        if (
            self._policy.mode == SyncMode.IDEMPOTENT
            and recorded is not None
            and destination.is_file()
            and file_checksum(destination) == recorded
        ):
            logger.debug("Destination unchanged: %s", entry.path)
            return False

        return True

    @staticmethod
    def _is_candidate(relative_path: str, candidate_specs: Sequence[str]) -> bool:
        for spec in candidate_specs:
            normalized = normalize_relative(spec)
            if normalized == relative_path:
                return True
            if _is_wildcard(normalized) and matches(normalized, relative_path):
                return True
        return False
