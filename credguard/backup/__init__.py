"""Backup core: fingerprinting, index store, scan orchestration and scheduling."""

from .errors import (
    BackupError,
    BackupNotFoundError,
    InvalidLabelError,
    LabelConflictError,
    StorageError,
)
from .models import BackupEntry, IndexState, ScanReason, ScanResult
from .scheduler import ScanScheduler
from .service import BackupService
from .store import IndexStore

__all__ = [
    "BackupError",
    "BackupNotFoundError",
    "InvalidLabelError",
    "LabelConflictError",
    "StorageError",
    "BackupEntry",
    "IndexState",
    "ScanReason",
    "ScanResult",
    "ScanScheduler",
    "BackupService",
    "IndexStore",
]
