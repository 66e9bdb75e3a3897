"""Tests for the durable write helpers."""

import stat
from unittest.mock import patch

from credguard._utils import atomic_write_bytes, read_file_if_exists
from tests.utils import fsync_rejecting_directories


def test_atomic_write_replaces_content(tmp_path):
    path = tmp_path / "nested" / "file.bin"

    atomic_write_bytes(path, b"first")
    atomic_write_bytes(path, b"second", mode=0o600)

    assert path.read_bytes() == b"second"
    assert stat.S_IMODE(path.stat().st_mode) == 0o600
    assert [p.name for p in path.parent.iterdir()] == ["file.bin"]

def test_atomic_write_survives_directory_fsync_failure(tmp_path):
    path = tmp_path / "file.bin"

    with patch("credguard._utils.os.fsync", side_effect=fsync_rejecting_directories):
        atomic_write_bytes(path, b"committed")

    assert path.read_bytes() == b"committed"

def test_read_file_if_exists(tmp_path):
    assert read_file_if_exists(tmp_path / "missing") is None

    (tmp_path / "present").write_bytes(b"data")
    assert read_file_if_exists(tmp_path / "present") == b"data"
