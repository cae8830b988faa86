"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from pathlib import Path

import pytest
from arcsync.backends.seven_zip import SEVEN_ZIP_MAGIC
from arcsync.core.config import ArcsyncConfig
from arcsync.utils.shell import CommandResult


@pytest.fixture
def source_tree(tmp_path: Path) -> Path:
    """Source directory with x.txt ("hello") and an empty directory y."""
    root = tmp_path / "source"
    root.mkdir()
    (root / "x.txt").write_text("hello")
    (root / "y").mkdir()
    return root


@pytest.fixture
def nested_tree(tmp_path: Path) -> Path:
    """Source directory with nested files, logs and a config file."""
    root = tmp_path / "nested"
    (root / "bin").mkdir(parents=True)
    (root / "logs").mkdir()
    (root / "bin" / "app.exe").write_bytes(b"MZ binary")
    (root / "bin" / "app.dll").write_bytes(b"library")
    (root / "logs" / "run.log").write_text("log line\n")
    (root / "settings.ini").write_text("[main]\nkey=value\n")
    return root


@pytest.fixture
def seven_zip_home(tmp_path: Path) -> Path:
    """Fake 7-Zip install directory with an executable and SFX stubs."""
    home = tmp_path / "7zip"
    home.mkdir()
    (home / "7z").write_text("#!/bin/sh\n")
    (home / "7zS2.sfx").write_bytes(b"MINIMAL-STUB|")
    (home / "7zsd_All.sfx").write_bytes(b"INSTALLER-STUB|")
    return home


@pytest.fixture
def config(tmp_path: Path, seven_zip_home: Path) -> ArcsyncConfig:
    """Configuration isolated to the test's temporary directory."""
    return ArcsyncConfig(cache_dir=tmp_path / "cache", seven_zip_home=seven_zip_home)


@pytest.fixture
def fake_seven_zip():
    """Stand-in for the 7z executable.

    ``7z a`` writes a minimal 7z file to the target named after ``--``;
    every other invocation succeeds with empty output.
    """

    def _run(args: list[str], **kwargs) -> CommandResult:
        if args[1] == "a":
            target = Path(args[args.index("--") + 1])
            names = args[args.index("--") + 2 :]
            target.write_bytes(SEVEN_ZIP_MAGIC + "\n".join(names).encode())
        return CommandResult(stdout="", stderr="", returncode=0)

    return _run


@pytest.fixture
def slt_listing() -> str:
    """Sample ``7z l -slt`` output."""
    return """7-Zip 23.01 (x64) : Copyright (c) 1999-2023 Igor Pavlov : 2023-06-20

Scanning the drive for archives:
1 file, 312 bytes (1 KiB)

Listing archive: bundle.7z

--
Path = bundle.7z
Type = 7z
Physical Size = 312
Headers Size = 178
Method = LZMA2:12
Solid = -
Blocks = 1

----------
Path = docs
Size = 0
Packed Size = 0
Modified = 2024-05-01 10:00:00
Attributes = D_ drwxr-xr-x
CRC =
Encrypted = -
Method =
Block =

Path = docs/readme.txt
Size = 5
Packed Size = 9
Modified = 2024-05-01 10:00:00
Attributes = A_ -rw-r--r--
CRC = 3610A686
Encrypted = -
Method = LZMA2:12
Block = 0

Path = x.txt
Size = 5
Packed Size =
Modified = 2024-05-01 10:00:00
Attributes = A_ -rw-r--r--
CRC = 3610A686
Encrypted = -
Method = LZMA2:12
Block = 0
"""
