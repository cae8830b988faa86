"""Configuration model and I/O for arcsync.

Settings are stored in ~/.config/arcsync/config.toml and passed explicitly
into every manifest, session and SFX builder. Nothing here is cached in
module state.

Example config.toml::

    cache_dir = "/var/cache/arcsync"
    seven_zip_home = "/usr/lib/p7zip"
    sfx_stub_dir = "/opt/lzma-sdk/bin"
"""

import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from arcsync.core.errors import ConfigError, ConfigNotFoundError, ConfigParseError
from arcsync.core.paths import get_cache_dir, get_config_path


class ArcsyncConfig(BaseModel):
    """Process configuration for arcsync.

    Attributes:
        cache_dir: Cache root for manifests and SFX workspaces. None means
            the XDG cache directory.
        seven_zip_home: Directory containing the 7z executable. None means
            discover it (SEVEN_ZIP_HOME, Windows registry, PATH).
        sfx_stub_dir: Directory holding the SFX stub modules. None means
            the directory of the resolved 7z executable.
    """

    model_config = ConfigDict(extra="forbid")

    cache_dir: Annotated[
        Path | None,
        Field(description="Cache root for manifests and SFX workspaces"),
    ] = None
    seven_zip_home: Annotated[
        Path | None,
        Field(description="Directory containing the 7z executable"),
    ] = None
    sfx_stub_dir: Annotated[
        Path | None,
        Field(description="Directory containing 7zS2.sfx and 7zsd_All.sfx"),
    ] = None

    @property
    def cache_root(self) -> Path:
        """Effective cache root directory."""
        if self.cache_dir is not None:
            return self.cache_dir
        return get_cache_dir()


def load_config(path: Path | None = None) -> ArcsyncConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated ArcsyncConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return ArcsyncConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def get_config(path: Path | None = None) -> ArcsyncConfig:
    """Load configuration, falling back to defaults when no file exists.

    Args:
        path: Optional custom config path.

    Returns:
        Loaded ArcsyncConfig, or a default one if the file is missing.

    Raises:
        ConfigParseError: If the file exists but is not valid TOML.
        ConfigError: If the file exists but doesn't match the schema.
    """
    try:
        return load_config(path)
    except ConfigNotFoundError:
        return ArcsyncConfig()


def save_config(config: ArcsyncConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The ArcsyncConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    # TOML has no null, so unset fields are simply omitted
    data = {key: str(value) for key, value in config.model_dump().items() if value is not None}

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path
