"""Unit tests for shell execution utilities."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest
from arcsync.utils.shell import CommandResult, run_command, which


class TestCommandResult:
    """Tests for CommandResult dataclass."""

    def test_success(self) -> None:
        """success is true only for exit code 0."""
        assert CommandResult(stdout="", stderr="", returncode=0).success
        assert not CommandResult(stdout="", stderr="", returncode=2).success


class TestRunCommand:
    """Tests for run_command function."""

    @patch("arcsync.utils.shell.subprocess.run")
    def test_captures_output(self, mock_run: MagicMock) -> None:
        """run_command returns captured stdout, stderr and exit code."""
        mock_run.return_value = MagicMock(stdout="out", stderr="err", returncode=1)

        result = run_command(["7z", "l", "a.7z"])

        assert result == CommandResult(stdout="out", stderr="err", returncode=1)

    @patch("arcsync.utils.shell.subprocess.run")
    def test_passes_cwd_and_no_timeout(self, mock_run: MagicMock) -> None:
        """run_command passes the working directory and waits indefinitely by default."""
        mock_run.return_value = MagicMock(stdout="", stderr="", returncode=0)

        run_command(["7z", "a"], cwd="/tmp/staging")

        kwargs = mock_run.call_args.kwargs
        assert kwargs["cwd"] == "/tmp/staging"
        assert kwargs["timeout"] is None
        assert kwargs["capture_output"] is True

    @patch("arcsync.utils.shell.subprocess.run")
    def test_check_raises(self, mock_run: MagicMock) -> None:
        """check=True propagates CalledProcessError."""
        mock_run.side_effect = subprocess.CalledProcessError(2, ["7z"])

        with pytest.raises(subprocess.CalledProcessError):
            run_command(["7z"], check=True)


class TestWhich:
    """Tests for PATH lookups."""

    @patch("arcsync.utils.shell.shutil.which", return_value="/usr/bin/7z")
    def test_found(self, mock_which: MagicMock) -> None:
        """Commands on PATH are reported with their path."""
        assert which("7z") == "/usr/bin/7z"

    @patch("arcsync.utils.shell.shutil.which", return_value=None)
    def test_missing(self, mock_which: MagicMock) -> None:
        """Missing commands yield None."""
        assert which("7z") is None
