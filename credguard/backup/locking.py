"""Advisory cross-process lock on a sidecar lock file.

Uses ``fcntl.flock`` on POSIX and ``msvcrt.locking`` on Windows. The lock is
advisory: it excludes other credguard processes (or anything else that
takes the same lock) but not a process that ignores it.
"""

import asyncio
import os
import time
from pathlib import Path
from typing import Optional, Union

from .._utils import ensure_dir, logger

if os.name == "nt":
    import msvcrt
else:
    import fcntl

_WINDOWS_RETRY_DELAY = 0.05


class ProcessFileLock:
    """Exclusive lock held on ``lock_path`` for the duration of a block.

    Acquisition blocks the calling thread, so the async context manager
    acquires it off the event loop.
    """

    def __init__(self, lock_path: Union[str, Path]):
        self.lock_path = Path(lock_path)
        self._fd: Optional[int] = None

    @property
    def locked(self) -> bool:
        return self._fd is not None

    def acquire(self) -> None:
        if self._fd is not None:
            raise RuntimeError(f"Lock already held: {self.lock_path}")

        ensure_dir(self.lock_path.parent)
        fd = os.open(str(self.lock_path), os.O_CREAT | os.O_RDWR, 0o600)
        try:
            self._lock_fd(fd)
        except BaseException:
            os.close(fd)
            raise
        self._fd = fd

    def release(self) -> None:
        if self._fd is None:
            return
        fd, self._fd = self._fd, None
        try:
            self._unlock_fd(fd)
        finally:
            os.close(fd)

    @staticmethod
    def _lock_fd(fd: int) -> None:
        if os.name == "nt":
            while True:
                try:
                    msvcrt.locking(fd, msvcrt.LK_NBLCK, 1)
                    return
                except OSError:
                    time.sleep(_WINDOWS_RETRY_DELAY)
        fcntl.flock(fd, fcntl.LOCK_EX)

    @staticmethod
    def _unlock_fd(fd: int) -> None:
        if os.name == "nt":
            os.lseek(fd, 0, os.SEEK_SET)
            msvcrt.locking(fd, msvcrt.LK_UNLCK, 1)
        else:
            fcntl.flock(fd, fcntl.LOCK_UN)

    def __enter__(self) -> "ProcessFileLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    async def __aenter__(self) -> "ProcessFileLock":
        acquiring = asyncio.ensure_future(asyncio.to_thread(self.acquire))
        try:
            await asyncio.shield(acquiring)
        except asyncio.CancelledError:
            # The worker thread cannot be interrupted; drop the lock once it lands
            acquiring.add_done_callback(lambda _: self.release())
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.release()
        logger.debug(f"Released lock {self.lock_path}")
