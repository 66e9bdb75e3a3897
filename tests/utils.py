"""Test utilities for credguard tests."""

import errno
import itertools
import os
import stat
from pathlib import Path

# Distinct, increasing mtimes so rewrites of same-sized content never share a signature
_mtime_counter = itertools.count(1)
_BASE_MTIME_NS = 1_700_000_000_000_000_000

_real_fsync = os.fsync


def touch(path: Path) -> None:
    """Change only the modification time of ``path``."""
    mtime_ns = _BASE_MTIME_NS + next(_mtime_counter) * 1_000_000_000
    os.utime(path, ns=(mtime_ns, mtime_ns))


def write_target(path: Path, data: bytes) -> None:
    """Write the target file in place and give it a fresh modification time."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    touch(path)


def fsync_rejecting_directories(fd: int) -> None:
    """``os.fsync`` stand-in that fails like filesystems refusing directory fsync."""
    if stat.S_ISDIR(os.fstat(fd).st_mode):
        raise OSError(errno.EINVAL, "Invalid argument")
    _real_fsync(fd)
