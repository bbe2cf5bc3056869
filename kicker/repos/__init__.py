"""Repository synchronization module.

This module handles:
- Composing git clone/checkout commands
- Bringing working copies to pinned revisions, re-cloning on corruption
"""

from kicker.repos.sync import SyncAction, SyncResult, sync_package, sync_packages

__all__ = ["SyncAction", "SyncResult", "sync_package", "sync_packages"]
