"""Core synchronization logic for arcsync.

This package contains the manifest, planner, session and SFX builder.
"""
