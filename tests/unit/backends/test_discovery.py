"""Unit tests for locating the 7z executable."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from arcsync.backends.discovery import (
    executable_name,
    find_seven_zip_executable,
    seven_zip_home_from_registry,
)
from arcsync.core.config import ArcsyncConfig
from arcsync.core.errors import CodecNotFoundError


class TestFindSevenZipExecutable:
    """Tests for find_seven_zip_executable function."""

    def test_config_home_wins(self, config: ArcsyncConfig) -> None:
        """The configured home directory is used first."""
        with patch.dict(os.environ, {"SEVEN_ZIP_HOME": "/elsewhere"}):
            result = find_seven_zip_executable(config)

        assert result == config.seven_zip_home / executable_name()

    def test_environment_home(self, seven_zip_home: Path) -> None:
        """SEVEN_ZIP_HOME is used when the config has no home."""
        with patch.dict(os.environ, {"SEVEN_ZIP_HOME": str(seven_zip_home)}):
            result = find_seven_zip_executable(ArcsyncConfig())

        assert result == seven_zip_home / "7z"

    def test_falls_back_to_path(self, tmp_path: Path) -> None:
        """A home without the executable falls back to PATH lookup."""
        with (
            patch.dict(os.environ, {"SEVEN_ZIP_HOME": str(tmp_path)}),
            patch("arcsync.backends.discovery.which", return_value="/usr/bin/7z") as mock_which,
        ):
            result = find_seven_zip_executable()

        assert result == Path("/usr/bin/7z")
        mock_which.assert_called_once_with("7z")

    def test_alternative_names_on_path(self) -> None:
        """7zz and 7za are tried after 7z."""
        found = {"7za": "/usr/local/bin/7za"}
        with (
            patch.dict(os.environ, {}, clear=True),
            patch("arcsync.backends.discovery.which", side_effect=found.get),
        ):
            result = find_seven_zip_executable()

        assert result == Path("/usr/local/bin/7za")

    def test_not_found(self) -> None:
        """CodecNotFoundError is raised when nothing is found."""
        with (
            patch.dict(os.environ, {}, clear=True),
            patch("arcsync.backends.discovery.which", return_value=None),
            pytest.raises(CodecNotFoundError),
        ):
            find_seven_zip_executable()


class TestRegistry:
    """Tests for the Windows registry lookup."""

    def test_not_windows(self) -> None:
        """The registry is only consulted on Windows."""
        with patch("arcsync.backends.discovery.is_windows", return_value=False):
            assert seven_zip_home_from_registry() is None

    def test_executable_name(self) -> None:
        """The executable has an .exe suffix on Windows only."""
        with patch("arcsync.backends.discovery.is_windows", return_value=True):
            assert executable_name() == "7z.exe"
        with patch("arcsync.backends.discovery.is_windows", return_value=False):
            assert executable_name() == "7z"
