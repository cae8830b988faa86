"""Unit tests for the add, extract and view commands."""

import os
import zipfile
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from arcsync.cli.main import app
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path: Path) -> Iterator[None]:
    """Point config and cache lookups into the test's temporary directory."""
    env = {
        "XDG_CONFIG_HOME": str(tmp_path / "xdg-config"),
        "XDG_CACHE_HOME": str(tmp_path / "xdg-cache"),
    }
    with patch.dict(os.environ, env):
        yield


class TestMainCallback:
    """Tests for global options."""

    def test_version(self) -> None:
        """--version prints the version and exits."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "arcsync version" in result.stdout

    def test_help_lists_commands(self) -> None:
        """The root help lists every command."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("add", "extract", "view", "sfx", "manifest"):
            assert command in result.stdout

    def test_invalid_config_file(self, tmp_path: Path, source_tree: Path) -> None:
        """A broken config file aborts with exit code 1."""
        config = tmp_path / "config.toml"
        config.write_text("cache_dir = ")

        result = runner.invoke(
            app, ["--config", str(config), "add", str(tmp_path / "a.zip"), str(source_tree)]
        )

        assert result.exit_code == 1
        assert "Failed to load config" in result.output


class TestAddCommand:
    """Tests for arcsync add."""

    def test_add_creates_archive(self, tmp_path: Path, source_tree: Path) -> None:
        """add writes a zip archive with all entries."""
        archive = tmp_path / "a.zip"

        result = runner.invoke(app, ["add", str(archive), str(source_tree), "*"])

        assert result.exit_code == 0
        assert "Added 2 entries" in result.stdout
        with zipfile.ZipFile(archive) as zf:
            assert sorted(zf.namelist()) == ["x.txt", "y/"]

    def test_add_twice_is_up_to_date(self, tmp_path: Path, source_tree: Path) -> None:
        """A second identical add reports nothing to do."""
        archive = tmp_path / "a.zip"
        runner.invoke(app, ["add", str(archive), str(source_tree)])

        result = runner.invoke(app, ["add", str(archive), str(source_tree)])

        assert result.exit_code == 0
        assert "Up to date" in result.stdout

    def test_add_dry_run(self, tmp_path: Path, source_tree: Path) -> None:
        """--dry-run lists the add-set without writing."""
        archive = tmp_path / "a.zip"

        result = runner.invoke(app, ["add", str(archive), str(source_tree), "--dry-run"])

        assert result.exit_code == 0
        assert "x.txt" in result.stdout
        assert "would be added" in result.stdout
        assert not archive.exists()

    def test_add_with_exclusion(self, tmp_path: Path, nested_tree: Path) -> None:
        """--exclude drops matching files."""
        archive = tmp_path / "a.zip"

        result = runner.invoke(
            app, ["add", str(archive), str(nested_tree), "--exclude", "*.log"]
        )

        assert result.exit_code == 0
        with zipfile.ZipFile(archive) as zf:
            assert "logs/run.log" not in zf.namelist()
            assert "settings.ini" in zf.namelist()

    def test_add_missing_source_fails(self, tmp_path: Path, source_tree: Path) -> None:
        """A named source that does not exist is an error."""
        result = runner.invoke(
            app, ["add", str(tmp_path / "a.zip"), str(source_tree), "missing.txt"]
        )

        assert result.exit_code == 1
        assert "Error" in result.output


class TestExtractCommand:
    """Tests for arcsync extract."""

    def test_extract_all(self, tmp_path: Path, source_tree: Path) -> None:
        """extract recreates the source tree."""
        archive = tmp_path / "a.zip"
        dest = tmp_path / "dest"
        runner.invoke(app, ["add", str(archive), str(source_tree)])

        result = runner.invoke(
            app, ["extract", str(archive), str(dest), "--mode", "overwrite"]
        )

        assert result.exit_code == 0
        assert (dest / "x.txt").read_text() == "hello"
        assert (dest / "y").is_dir()

    def test_extract_if_missing(self, tmp_path: Path, source_tree: Path) -> None:
        """--mode if_missing keeps existing files."""
        archive = tmp_path / "a.zip"
        dest = tmp_path / "dest"
        dest.mkdir()
        (dest / "x.txt").write_text("local")
        runner.invoke(app, ["add", str(archive), str(source_tree)])

        result = runner.invoke(app, ["extract", str(archive), str(dest), "-m", "if_missing"])

        assert result.exit_code == 0
        assert (dest / "x.txt").read_text() == "local"

    def test_extract_dry_run(self, tmp_path: Path, source_tree: Path) -> None:
        """--dry-run lists entries without extracting them."""
        archive = tmp_path / "a.zip"
        dest = tmp_path / "dest"
        runner.invoke(app, ["add", str(archive), str(source_tree)])

        result = runner.invoke(app, ["extract", str(archive), str(dest), "x.txt", "--dry-run"])

        assert result.exit_code == 0
        assert "x.txt" in result.stdout
        assert not dest.exists()

    def test_extract_missing_archive(self, tmp_path: Path) -> None:
        """Extracting a missing archive exits with 1."""
        result = runner.invoke(app, ["extract", str(tmp_path / "a.zip"), str(tmp_path)])

        assert result.exit_code == 1
        assert "not found" in result.output


class TestViewCommand:
    """Tests for arcsync view."""

    def test_view_prints_entry(self, tmp_path: Path, source_tree: Path) -> None:
        """view writes the entry content to stdout."""
        archive = tmp_path / "a.zip"
        runner.invoke(app, ["add", str(archive), str(source_tree)])

        result = runner.invoke(app, ["view", str(archive), "x.txt"])

        assert result.exit_code == 0
        assert result.stdout == "hello"

    def test_view_unsupported_for_7z(self, tmp_path: Path) -> None:
        """view fails for 7z archives."""
        archive = tmp_path / "a.7z"
        archive.write_bytes(b"7z\xbc\xaf\x27\x1c rest")

        result = runner.invoke(app, ["view", str(archive), "x.txt"])

        assert result.exit_code == 1
        assert "not supported" in result.output
