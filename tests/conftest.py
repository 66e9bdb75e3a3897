"""Global pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from credguard.backup import BackupService
from credguard.config import BackupConfig


@pytest.fixture
def backup_config(tmp_path):
    """Config with the target and data dir inside a temp directory."""
    return BackupConfig(
        target_path=tmp_path / "codex" / "auth.json",
        data_dir=tmp_path / "data",
        scan_interval=0,
    )


@pytest.fixture
def service(backup_config):
    """Backup service over the temp config."""
    return BackupService(backup_config)


@pytest.fixture
def target(backup_config):
    """Path of the protected file."""
    return backup_config.target_path
