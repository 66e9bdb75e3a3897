"""Deduplicated, restorable history for a single credential file."""

from .config import BackupConfig
from .backup import BackupService, IndexStore, ScanScheduler

__author__ = "credguard contributors"
__version__ = "0.3.0"
__url__ = "https://github.com/credguard/credguard"

__all__ = ["BackupConfig", "BackupService", "IndexStore", "ScanScheduler"]
