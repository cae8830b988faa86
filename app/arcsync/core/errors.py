"""Exception hierarchy for arcsync.

Every fatal condition raised by the core derives from ArcsyncError so that
callers (and the CLI) can handle them uniformly. Policy-driven skips
(exclusion, mode-based skip, idempotent match) are never errors.
"""


class ArcsyncError(Exception):
    """Base exception for all arcsync errors."""


class ManifestError(ArcsyncError):
    """Base exception for checksum manifest errors."""


class ManifestCorruptError(ManifestError):
    """Raised when a persisted manifest exists but cannot be parsed."""


class UnsupportedArchiveError(ArcsyncError):
    """Raised when no supported backend can open an existing archive."""


class ArchiveNotFoundError(ArcsyncError):
    """Raised when an archive to extract from does not exist."""


class ArchiveCreationFailedError(ArcsyncError):
    """Raised when adding entries to an archive fails."""


class ExtractionFailedError(ArcsyncError):
    """Raised when extracting an entry from an archive fails."""


class UnsupportedOperationError(ArcsyncError):
    """Raised when a backend does not support the requested operation."""


class SfxAssemblyFailedError(ArcsyncError):
    """Raised when the self-extracting package cannot be assembled."""


class InvalidSfxPathError(ArcsyncError):
    """Raised when the SFX output path or workspace subfolder is unusable."""


class CodecNotFoundError(ArcsyncError):
    """Raised when the 7z executable cannot be located."""


class ConfigError(ArcsyncError):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the configuration file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the configuration file cannot be parsed."""
