"""Tests for fast signatures and content hashing."""

import hashlib
import os

import pytest

from credguard.backup.hashing import (
    CHUNK_SIZE,
    DIGEST_ALGORITHM,
    compute_content_hash,
    compute_fingerprint,
    short_hash,
)
from tests.utils import touch, write_target


def test_fingerprint_stable_for_untouched_file(tmp_path):
    path = tmp_path / "auth.json"
    write_target(path, b'{"token":"a"}')

    first = compute_fingerprint(path)
    second = compute_fingerprint(path)

    assert first.signature == second.signature
    assert len(first.signature) == 16
    int(first.signature, 16)  # hex
    assert first.stat.size == len(b'{"token":"a"}')
    assert first.stat.mod_time_ns == os.stat(path).st_mtime_ns


def test_fingerprint_changes_with_mtime_only(tmp_path):
    path = tmp_path / "auth.json"
    write_target(path, b'{"token":"a"}')
    before = compute_fingerprint(path)

    touch(path)
    after = compute_fingerprint(path)

    assert before.signature != after.signature
    assert before.stat.size == after.stat.size


def test_fingerprint_changes_with_size(tmp_path):
    path = tmp_path / "auth.json"
    write_target(path, b"short")
    before = compute_fingerprint(path)
    mtime = os.stat(path).st_mtime_ns

    path.write_bytes(b"much longer content")
    os.utime(path, ns=(mtime, mtime))
    after = compute_fingerprint(path)

    assert before.signature != after.signature


def test_fingerprint_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        compute_fingerprint(tmp_path / "missing.json")


def test_content_hash_matches_sha256_and_returns_bytes(tmp_path):
    path = tmp_path / "auth.json"
    data = b'{"token":"abc"}'
    path.write_bytes(data)

    digest, content = compute_content_hash(path)

    assert DIGEST_ALGORITHM == "sha256"
    assert digest == hashlib.sha256(data).hexdigest()
    assert content == data


def test_content_hash_multi_chunk_file(tmp_path):
    path = tmp_path / "big.bin"
    data = os.urandom(CHUNK_SIZE * 3 + 17)
    path.write_bytes(data)

    digest, content = compute_content_hash(path)

    assert digest == hashlib.sha256(data).hexdigest()
    assert content == data


def test_content_hash_empty_file(tmp_path):
    path = tmp_path / "empty"
    path.write_bytes(b"")

    digest, content = compute_content_hash(path)

    assert digest == hashlib.sha256(b"").hexdigest()
    assert content == b""


def test_content_hash_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        compute_content_hash(tmp_path / "missing")


def test_short_hash():
    digest = hashlib.sha256(b"x").hexdigest()
    assert short_hash(digest) == digest[:12]
    assert short_hash("abc") == "abc"
