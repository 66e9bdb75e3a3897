"""Backup file naming and storage."""

from datetime import datetime
from pathlib import Path
from typing import Union

from .._utils import atomic_write_bytes, ensure_dir
from .hashing import short_hash

TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"
DEFAULT_EXTENSION = ".bak"
BACKUP_FILE_MODE = 0o600


def backup_extension(target_path: Union[str, Path]) -> str:
    """Extension for stored copies, taken from the target file."""
    return Path(target_path).suffix or DEFAULT_EXTENSION


def build_backup_filename(ts: datetime, content_digest: str, extension: str = DEFAULT_EXTENSION) -> str:
    """Build ``{timestamp}_{shortDigest}{extension}``.

    Example:
        >>> build_backup_filename(datetime(2025, 1, 2, 3, 4, 5), "ab" * 32, ".json")
        '20250102-030405_abababababab.json'
    """
    return f"{ts.strftime(TIMESTAMP_FORMAT)}_{short_hash(content_digest)}{extension}"


def ensure_unique_filename(backups_dir: Union[str, Path], base: str) -> str:
    """Return ``base`` or the first free ``stem-N`` variant in ``backups_dir``.

    Not safe against concurrent allocators; callers serialize creation.
    """
    backups_dir = ensure_dir(backups_dir)
    if not (backups_dir / base).exists():
        return base

    stem, suffix = Path(base).stem, Path(base).suffix
    counter = 1
    while True:
        candidate = f"{stem}-{counter}{suffix}"
        if not (backups_dir / candidate).exists():
            return candidate
        counter += 1


def write_backup_file(backups_dir: Union[str, Path], filename: str, data: bytes) -> Path:
    """Atomically store backup bytes and return the written path."""
    path = ensure_dir(backups_dir) / filename
    atomic_write_bytes(path, data, mode=BACKUP_FILE_MODE)
    return path
