"""Wildcard and regex path matching for inclusion/exclusion policy.

Patterns are either strings using ``*`` wildcards or pre-compiled regular
expressions. Paths are normalized to forward slashes before comparison
and matching is always case-insensitive.
"""

import logging
import re
from pathlib import Path

from arcsync.models.policy import PathPattern, SyncPolicy

logger = logging.getLogger(__name__)


def normalize_path(path: str | Path) -> str:
    """Normalize a path to forward slashes."""
    return str(path).replace("\\", "/")


def normalize_relative(path: str | Path) -> str:
    """Normalize an archive-relative path (forward slashes, no outer slashes)."""
    return normalize_path(path).strip("/")


def wildcard_to_regex(pattern: str) -> str:
    """Convert a wildcard pattern into a regular expression body.

    An asterisk not preceded by a literal period becomes ``.*``; a leading
    asterisk also becomes ``.*``. Nothing else is escaped, so ``.`` keeps
    its regex meaning.

    Args:
        pattern: Wildcard pattern (already slash-normalized).

    Returns:
        Regular expression source without anchors.
    """
    converted = re.sub(r"([^.])\*", r"\1.*", pattern)
    return re.sub(r"^\*", ".*", converted)


def matches(pattern: PathPattern, candidate: str | Path) -> bool:
    """Check whether a path matches a wildcard or regex pattern.

    String patterns are anchored to the whole path. Compiled patterns are
    searched as-is. Invalid patterns never raise; they simply don't match.

    Args:
        pattern: Wildcard string or compiled regular expression.
        candidate: Path to test.

    Returns:
        True if the path matches the pattern.
    """
    path = normalize_path(candidate)
    try:
        if isinstance(pattern, re.Pattern):
            regex = re.compile(pattern.pattern, pattern.flags | re.IGNORECASE)
            return regex.search(path) is not None
        body = wildcard_to_regex(normalize_path(pattern))
        return re.fullmatch(body, path, flags=re.IGNORECASE) is not None
    except re.error as e:
        logger.debug("Ignoring invalid pattern %r: %s", pattern, e)
        return False


def matches_any(patterns: list[PathPattern], candidate: str | Path) -> bool:
    """Check whether a path matches any of the given patterns."""
    return any(matches(pattern, candidate) for pattern in patterns)


def is_excluded(
    relative_path: str,
    policy: SyncPolicy,
    *,
    destination_exists: bool = False,
    exists_in_manifest: bool = False,
    archive_unchanged: bool = False,
) -> bool:
    """Evaluate the exclusion rules of a sync policy for one entry.

    Rules, in order:
    1. ``exclude_files`` always excludes.
    2. ``exclude_unless_missing`` excludes when the destination already
       exists or the manifest already records the entry.
    3. ``exclude_unless_archive_changed`` excludes when the destination
       already exists and the archive is unchanged since the manifest was
       recorded.

    Args:
        relative_path: Path to test (archive-relative or full source path).
        policy: Sync policy carrying the pattern lists.
        destination_exists: Whether the destination path already exists.
        exists_in_manifest: Whether the manifest has an entry for the path.
        archive_unchanged: Whether the archive fingerprint matches the manifest.

    Returns:
        True if the entry must be skipped.
    """
    if matches_any(policy.exclude_files, relative_path):
        return True
    if (destination_exists or exists_in_manifest) and matches_any(
        policy.exclude_unless_missing, relative_path
    ):
        return True
    if (
        destination_exists
        and archive_unchanged
        and matches_any(policy.exclude_unless_archive_changed, relative_path)
    ):
        return True
    return False
