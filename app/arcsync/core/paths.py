"""XDG-compliant path management for arcsync.

This module provides standardized paths following the XDG Base Directory
Specification for configuration and cache storage.

XDG defaults:
- Config: ~/.config/arcsync/
- Cache: ~/.cache/arcsync/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "arcsync"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/arcsync/ (or XDG_CONFIG_HOME/arcsync/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_cache_dir() -> Path:
    """Get the cache directory path.

    The cache holds checksum manifests and SFX build workspaces. Losing
    it only forces the next sync to reconcile every entry again.

    Returns:
        Path to ~/.cache/arcsync/ (or XDG_CACHE_HOME/arcsync/).
    """
    return _get_xdg_dir("XDG_CACHE_HOME", ".cache")


def get_config_path() -> Path:
    """Get the default configuration file path.

    Returns:
        Path to ~/.config/arcsync/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_checksums_dir(cache_root: Path) -> Path:
    """Get the directory holding persisted checksum manifests.

    Args:
        cache_root: Cache root directory.

    Returns:
        Path to <cache_root>/checksums/.
    """
    return cache_root / "checksums"


def get_sfx_workspace_root(cache_root: Path) -> Path:
    """Get the parent directory of SFX build workspaces.

    Args:
        cache_root: Cache root directory.

    Returns:
        Path to <cache_root>/sfx/.
    """
    return cache_root / "sfx"


def ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path
