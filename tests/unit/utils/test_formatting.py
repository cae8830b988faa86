"""Unit tests for console formatting helpers."""

from arcsync.utils.formatting import create_checksum_table, format_fingerprint


class TestFormatFingerprint:
    """Tests for format_fingerprint function."""

    def test_directory(self) -> None:
        """Directory fingerprints are shown in full."""
        assert "directory" in format_fingerprint("directory")

    def test_hash_is_shortened(self) -> None:
        """Content hashes are cut to 16 characters."""
        digest = "a" * 64

        formatted = format_fingerprint(digest)

        assert "a" * 16 in formatted
        assert "a" * 17 not in formatted


class TestCreateChecksumTable:
    """Tests for create_checksum_table function."""

    def test_columns(self) -> None:
        """The table has path and fingerprint columns."""
        table = create_checksum_table("Manifest")

        assert [column.header for column in table.columns] == ["Path", "Fingerprint"]
        assert table.title == "Manifest"
