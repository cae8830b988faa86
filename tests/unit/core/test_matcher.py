"""Unit tests for path matching.

Tests for wildcard conversion, pattern matching and exclusion rules.
"""

import re

import pytest
from arcsync.core.matcher import (
    is_excluded,
    matches,
    matches_any,
    normalize_path,
    normalize_relative,
    wildcard_to_regex,
)
from arcsync.models.policy import SyncPolicy


class TestNormalize:
    """Tests for path normalization helpers."""

    def test_backslashes_become_forward_slashes(self) -> None:
        """normalize_path converts Windows separators."""
        assert normalize_path("bin\\app.exe") == "bin/app.exe"

    def test_relative_strips_outer_slashes(self) -> None:
        """normalize_relative drops leading and trailing slashes."""
        assert normalize_relative("/docs/") == "docs"
        assert normalize_relative("docs\\readme.txt") == "docs/readme.txt"


class TestWildcardToRegex:
    """Tests for wildcard_to_regex function."""

    def test_leading_asterisk(self) -> None:
        """A leading asterisk becomes .*."""
        assert wildcard_to_regex("*.log") == ".*.log"

    def test_inner_asterisk(self) -> None:
        """An asterisk after a non-period becomes .*."""
        assert wildcard_to_regex("logs/*") == "logs/.*"

    def test_asterisk_after_period_kept(self) -> None:
        """An asterisk after a literal period keeps its regex meaning."""
        assert wildcard_to_regex("app.*") == "app.*"


class TestMatches:
    """Tests for matches function."""

    @pytest.mark.parametrize(
        ("pattern", "path", "expected"),
        [
            ("*.log", "logs/run.log", True),
            ("*.log", "run.txt", False),
            ("logs/*", "logs/run.log", True),
            ("logs/*", "bin/logs/run.log", False),
            ("settings.ini", "settings.ini", True),
            ("settings.ini", "conf/settings.ini", False),
        ],
    )
    def test_wildcard_is_anchored(self, pattern: str, path: str, expected: bool) -> None:
        """Wildcard strings must match the whole path."""
        assert matches(pattern, path) is expected

    def test_wildcard_is_case_insensitive(self) -> None:
        """String patterns ignore case."""
        assert matches("*.EXE", "bin/app.exe")

    def test_windows_separators_are_normalized(self) -> None:
        """Pattern and path are compared with forward slashes."""
        assert matches("bin\\*", "bin\\app.exe")

    def test_regex_is_searched(self) -> None:
        """Compiled patterns are searched, not anchored."""
        assert matches(re.compile(r"\.dll$"), "bin/app.dll")
        assert not matches(re.compile(r"^dll"), "bin/app.dll")

    def test_regex_is_case_insensitive(self) -> None:
        """Compiled patterns match regardless of case."""
        assert matches(re.compile(r"README"), "docs/readme.txt")

    def test_invalid_pattern_does_not_match(self) -> None:
        """A pattern that is not a valid regex never matches."""
        assert not matches("logs/[", "logs/[")

    def test_matches_any(self) -> None:
        """matches_any is true when one pattern matches."""
        assert matches_any(["*.txt", "*.log"], "run.log")
        assert not matches_any([], "run.log")


class TestIsExcluded:
    """Tests for is_excluded function."""

    def test_exclude_files_always_wins(self) -> None:
        """exclude_files excludes even when nothing exists."""
        policy = SyncPolicy(exclude_files=["*.log"])

        assert is_excluded("logs/run.log", policy)

    def test_exclude_unless_missing_needs_existing_entry(self) -> None:
        """exclude_unless_missing only excludes entries that exist somewhere."""
        policy = SyncPolicy(exclude_unless_missing=["settings.ini"])

        assert not is_excluded("settings.ini", policy)
        assert is_excluded("settings.ini", policy, destination_exists=True)
        assert is_excluded("settings.ini", policy, exists_in_manifest=True)

    def test_exclude_unless_archive_changed(self) -> None:
        """exclude_unless_archive_changed needs an existing destination and unchanged archive."""
        policy = SyncPolicy(exclude_unless_archive_changed=["*.ini"])

        assert not is_excluded("settings.ini", policy, destination_exists=True)
        assert not is_excluded("settings.ini", policy, archive_unchanged=True)
        assert is_excluded(
            "settings.ini", policy, destination_exists=True, archive_unchanged=True
        )

    def test_no_patterns_excludes_nothing(self) -> None:
        """An empty policy never excludes."""
        assert not is_excluded(
            "x.txt",
            SyncPolicy(),
            destination_exists=True,
            exists_in_manifest=True,
            archive_unchanged=True,
        )
