"""Shared helpers: package logger and durable filesystem writes."""

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

logger = logging.getLogger("credguard")

PathLike = Union[str, Path]


def local_now() -> datetime:
    """Current time as an aware datetime in the local timezone."""
    return datetime.now().astimezone()


def expand_path(path: PathLike) -> Path:
    """Expand ``~`` and return an absolute path."""
    if not str(path):
        raise ValueError("path is empty")
    return Path(os.path.abspath(os.path.expanduser(str(path))))


def ensure_dir(directory: PathLike) -> Path:
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def read_file_if_exists(path: PathLike) -> Optional[bytes]:
    """Read a file, returning None when it does not exist."""
    try:
        with open(path, "rb") as f:
            return f.read()
    except FileNotFoundError:
        return None


def _fsync_directory(directory: Path) -> None:
    """Flush a rename to disk. Best effort: the rename has already happened."""
    # Not supported on Windows; the rename itself is still atomic there.
    if os.name != "posix":
        return
    try:
        fd = os.open(str(directory), os.O_RDONLY)
        try:
            os.fsync(fd)
        finally:
            os.close(fd)
    except OSError as e:
        logger.warning(f"Failed to fsync directory {directory}: {e}")


def atomic_write_bytes(path: PathLike, data: bytes, mode: Optional[int] = None) -> None:
    """Write bytes to ``path`` via a temp file in the same directory.

    The temp file is flushed and fsynced before being renamed over the
    destination, so readers only ever see the old or the new content.

    Args:
        path: Destination file
        data: Raw content
        mode: Optional permission bits applied to the temp file before rename
    """
    path = Path(path)
    directory = ensure_dir(path.parent)

    fd, tmp_name = tempfile.mkstemp(prefix=".tmp-", dir=str(directory))
    try:
        with os.fdopen(fd, "wb") as tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        if mode is not None:
            os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise

    _fsync_directory(directory)


def atomic_write_json(path: PathLike, payload: Any) -> None:
    """Serialize ``payload`` as indented JSON and write it atomically."""
    data = json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")
    atomic_write_bytes(path, data)
