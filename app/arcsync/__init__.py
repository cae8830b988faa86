"""arcsync - Idempotent synchronization between a filesystem tree and an archive."""

__version__ = "0.1.0"
