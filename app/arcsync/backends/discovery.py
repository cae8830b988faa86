"""Locate the 7z executable.

Resolution order:
1. ``seven_zip_home`` from the arcsync config
2. ``SEVEN_ZIP_HOME`` environment variable
3. Windows only: the 7-Zip "App Paths" registry key
4. ``7z`` / ``7zz`` / ``7za`` on PATH
"""

import logging
import os
import sys
from pathlib import Path

from arcsync.core.config import ArcsyncConfig
from arcsync.core.errors import CodecNotFoundError
from arcsync.utils.shell import which

logger = logging.getLogger(__name__)

# Registry key 7-Zip registers its file manager under
_REGISTRY_KEY = r"SOFTWARE\Microsoft\Windows\CurrentVersion\App Paths\7zFM.exe"

_PATH_CANDIDATES: tuple[str, ...] = ("7z", "7zz", "7za")


def is_windows() -> bool:
    """Check whether we are running on Windows."""
    return sys.platform == "win32"


def executable_name() -> str:
    """Name of the 7z executable on this platform."""
    return "7z.exe" if is_windows() else "7z"


def seven_zip_home_from_registry() -> Path | None:
    """Read the 7-Zip install directory from the Windows registry.

    Returns:
        Install directory, or None if the key is absent or not on Windows.
    """
    if not is_windows():
        return None

    import winreg

    try:
        with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, _REGISTRY_KEY) as key:
            value, _kind = winreg.QueryValueEx(key, "Path")
    except OSError:
        logger.debug("7-Zip registry key not found: %s", _REGISTRY_KEY)
        return None
    return Path(value)


def find_seven_zip_executable(config: ArcsyncConfig | None = None) -> Path:
    """Resolve the absolute path of the 7z executable.

    Args:
        config: arcsync configuration; its seven_zip_home wins if set.

    Returns:
        Absolute path to the executable.

    Raises:
        CodecNotFoundError: If no executable can be found.
    """
    home: Path | None = config.seven_zip_home if config is not None else None
    if home is None and os.environ.get("SEVEN_ZIP_HOME"):
        home = Path(os.environ["SEVEN_ZIP_HOME"])
    if home is None:
        home = seven_zip_home_from_registry()

    if home is not None:
        logger.debug("7-zip home: '%s'", home)
        executable = home / executable_name()
        if executable.is_file():
            logger.debug("7-zip path: '%s'", executable)
            return executable.absolute()
        logger.warning("No %s in configured 7-zip home %s", executable_name(), home)

    for candidate in _PATH_CANDIDATES:
        found = which(candidate)
        if found:
            logger.debug("7-zip path: '%s'", found)
            return Path(found).absolute()

    msg = "7z executable not found; install 7-Zip or set seven_zip_home in the config"
    raise CodecNotFoundError(msg)
