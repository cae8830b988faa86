"""Unit tests for the sfx and manifest commands."""

import os
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
import typer
from arcsync.cli.commands.sfx import parse_info_options
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


@pytest.fixture
def config_file(tmp_path: Path, seven_zip_home: Path) -> Path:
    """Config file pointing at the fake 7-Zip install."""
    path = tmp_path / "config.toml"
    path.write_text(
        f'cache_dir = "{tmp_path / "cache"}"\nseven_zip_home = "{seven_zip_home}"\n'
    )
    return path


class TestParseInfoOptions:
    """Tests for parse_info_options function."""

    def test_parses_pairs(self) -> None:
        """KEY=VALUE pairs become a dict; values may contain '='."""
        result = parse_info_options(["Title=Demo", "ExecuteParameters=-a=1"])

        assert result == {"Title": "Demo", "ExecuteParameters": "-a=1"}

    def test_none(self) -> None:
        """No options gives an empty dict."""
        assert parse_info_options(None) == {}

    def test_missing_separator(self) -> None:
        """A value without '=' is rejected."""
        with pytest.raises(typer.BadParameter):
            parse_info_options(["Title"])


class TestSfxCommand:
    """Tests for arcsync sfx."""

    def test_creates_package(
        self, tmp_path: Path, source_tree: Path, config_file: Path, fake_seven_zip
    ) -> None:
        """sfx assembles the package from the configured stubs."""
        output = tmp_path / "setup.exe"

        with patch("arcsync.backends.seven_zip.run_command", side_effect=fake_seven_zip):
            result = runner.invoke(
                app,
                [
                    "--config",
                    str(config_file),
                    "sfx",
                    str(output),
                    str(source_tree),
                    "--info",
                    "Title=Demo",
                ],
            )

        assert result.exit_code == 0
        assert output.read_bytes().startswith(b"INSTALLER-STUB|")
        assert "Created" in result.stdout

    def test_second_run_up_to_date(
        self, tmp_path: Path, source_tree: Path, config_file: Path, fake_seven_zip
    ) -> None:
        """Running sfx again on an unchanged tree does nothing."""
        output = tmp_path / "setup.exe"
        args = ["--config", str(config_file), "sfx", str(output), str(source_tree)]

        with patch("arcsync.backends.seven_zip.run_command", side_effect=fake_seven_zip):
            runner.invoke(app, args)
            result = runner.invoke(app, args)

        assert result.exit_code == 0
        assert "Up to date" in result.stdout

    def test_bad_info_option(self, tmp_path: Path, source_tree: Path, config_file: Path) -> None:
        """A malformed --info value is a usage error."""
        result = runner.invoke(
            app,
            [
                "--config",
                str(config_file),
                "sfx",
                str(tmp_path / "setup.exe"),
                str(source_tree),
                "--info",
                "Title",
            ],
        )

        assert result.exit_code == 2

    def test_directory_output_rejected(
        self, tmp_path: Path, source_tree: Path, config_file: Path
    ) -> None:
        """An output path without a file name fails."""
        result = runner.invoke(
            app, ["--config", str(config_file), "sfx", str(tmp_path), str(source_tree)]
        )

        assert result.exit_code == 1
        assert "filename" in result.output


class TestManifestCommand:
    """Tests for arcsync manifest."""

    def test_shows_entries(self, tmp_path: Path, source_tree: Path) -> None:
        """manifest lists recorded entries after an add."""
        archive = tmp_path / "a.zip"
        runner.invoke(app, ["add", str(archive), str(source_tree)])

        result = runner.invoke(app, ["manifest", str(archive)])

        assert result.exit_code == 0
        assert "x.txt" in result.stdout
        assert "directory" in result.stdout

    def test_no_manifest(self, tmp_path: Path) -> None:
        """An archive without a manifest is reported."""
        result = runner.invoke(app, ["manifest", str(tmp_path / "a.zip")])

        assert result.exit_code == 0
        assert "No manifest" in result.stdout

    def test_corrupt_manifest(self, tmp_path: Path, source_tree: Path) -> None:
        """A corrupt manifest exits with 1."""
        archive = tmp_path / "a.zip"
        runner.invoke(app, ["add", str(archive), str(source_tree)])
        for path in (tmp_path / "xdg-cache" / "arcsync" / "checksums").glob("*.json"):
            path.write_text("{broken")

        result = runner.invoke(app, ["manifest", str(archive)])

        assert result.exit_code == 1
        assert "Corrupt manifest" in result.output
