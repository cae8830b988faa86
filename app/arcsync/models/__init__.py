"""Data models for arcsync.

This module exports the policy and entry models shared by the core.
"""

from arcsync.models.entry import ArchiveEntry, SyncResult
from arcsync.models.policy import ArchiveType, PathPattern, SyncMode, SyncPolicy

__all__ = [
    "ArchiveEntry",
    "ArchiveType",
    "PathPattern",
    "SyncMode",
    "SyncPolicy",
    "SyncResult",
]
