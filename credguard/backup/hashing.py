"""Fast stat signatures and full-content digests of the target file."""

import hashlib
import os
from datetime import datetime
from pathlib import Path
from typing import Tuple, Union

import xxhash

from .models import FileStat, FingerprintResult

DIGEST_ALGORITHM = "sha256"
SHORT_HASH_LENGTH = 12
CHUNK_SIZE = 64 * 1024


def compute_fingerprint(path: Union[str, Path]) -> FingerprintResult:
    """Compute a cheap signature from file metadata without reading content.

    The signature is an xxh64 digest of ``size|mtime_ns|inode|device``.
    It only short-circuits unmodified files; it is not collision-free.

    Args:
        path: File to stat

    Returns:
        FingerprintResult with the stat metadata and a 16-char hex signature

    Raises:
        FileNotFoundError: If the file does not exist
        OSError: For any other stat failure
    """
    st = os.stat(path)
    stat = FileStat(
        size=st.st_size,
        mod_time=datetime.fromtimestamp(st.st_mtime_ns / 1e9).astimezone(),
        mod_time_ns=st.st_mtime_ns,
        # Windows reports 0 for these unless the filesystem exposes them
        inode=st.st_ino or 0,
        device=st.st_dev or 0,
    )
    seed = f"{stat.size}|{stat.mod_time_ns}|{stat.inode}|{stat.device}"
    signature = xxhash.xxh64(seed.encode("utf-8")).hexdigest()
    return FingerprintResult(stat=stat, signature=signature)


def compute_content_hash(path: Union[str, Path]) -> Tuple[str, bytes]:
    """Hash the full file content and return it alongside the bytes read.

    A single read pass feeds both the digest and the returned buffer, so
    the caller can persist exactly the bytes that were hashed.

    Returns:
        (hex digest, raw bytes)
    """
    digest = hashlib.new(DIGEST_ALGORITHM)
    buffer = bytearray()

    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            digest.update(chunk)
            buffer.extend(chunk)

    return digest.hexdigest(), bytes(buffer)


def short_hash(content_digest: str) -> str:
    """Truncated digest used in file names and log lines."""
    return content_digest[:SHORT_HASH_LENGTH]
