"""Configuration management for credguard."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from ._utils import expand_path

DEFAULT_TARGET_DIR = "~/.codex"
DEFAULT_TARGET_FILE = "auth.json"
DEFAULT_DATA_DIR = "./data"
DEFAULT_SCAN_INTERVAL = 60.0
DEFAULT_LOGIN_COMMAND = ("codex", "login")
DEFAULT_LOGIN_TIMEOUT = 120.0


@dataclass(frozen=True)
class BackupConfig:
    """Locations and timings for the backup service.

    ``backups_dir`` and ``index_path`` default to ``<data_dir>/backups`` and
    ``<data_dir>/index.json``. A ``scan_interval`` of 0 disables periodic
    scanning.
    """
    target_path: Path = field(default_factory=lambda: expand_path(DEFAULT_TARGET_DIR) / DEFAULT_TARGET_FILE)
    data_dir: Path = field(default_factory=lambda: expand_path(DEFAULT_DATA_DIR))
    backups_dir: Optional[Path] = None
    index_path: Optional[Path] = None
    scan_interval: float = DEFAULT_SCAN_INTERVAL  # seconds
    login_command: Tuple[str, ...] = DEFAULT_LOGIN_COMMAND
    login_timeout: float = DEFAULT_LOGIN_TIMEOUT  # seconds

    @classmethod
    def build(
        cls,
        target_dir: str = DEFAULT_TARGET_DIR,
        target_file: str = DEFAULT_TARGET_FILE,
        data_dir: str = DEFAULT_DATA_DIR,
        **kwargs: Any,
    ) -> 'BackupConfig':
        """Create config from a target directory/file pair and a data dir."""
        return cls(
            target_path=expand_path(target_dir) / target_file,
            data_dir=expand_path(data_dir),
            **kwargs,
        )

    @classmethod
    def from_env(cls) -> 'BackupConfig':
        """Create config from environment variables."""
        return cls.build(
            target_dir=os.getenv("CREDGUARD_TARGET_DIR", DEFAULT_TARGET_DIR),
            target_file=os.getenv("CREDGUARD_TARGET_FILE", DEFAULT_TARGET_FILE),
            data_dir=os.getenv("CREDGUARD_DATA_DIR", DEFAULT_DATA_DIR),
            scan_interval=float(os.getenv("CREDGUARD_SCAN_INTERVAL", str(DEFAULT_SCAN_INTERVAL))),
            login_timeout=float(os.getenv("CREDGUARD_LOGIN_TIMEOUT", str(DEFAULT_LOGIN_TIMEOUT))),
        )

    @classmethod
    def from_file(cls, path: str) -> 'BackupConfig':
        """Create config from a JSON file, falling back to defaults if it is missing.

        Recognised keys: ``codex_dir``, ``codex_file``, ``data_dir``,
        ``scan_interval`` and ``login_timeout``. ``http_port`` is read by the
        API settings instead.
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw: Dict[str, Any] = json.load(f)
        except FileNotFoundError:
            return cls.build()
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid config file {path}: {e}") from e

        if not isinstance(raw, dict):
            raise ValueError(f"Invalid config file {path}: expected a JSON object")

        return cls.build(
            target_dir=raw.get("codex_dir") or DEFAULT_TARGET_DIR,
            target_file=raw.get("codex_file") or DEFAULT_TARGET_FILE,
            data_dir=raw.get("data_dir") or DEFAULT_DATA_DIR,
            scan_interval=float(raw.get("scan_interval", DEFAULT_SCAN_INTERVAL)),
            login_timeout=float(raw.get("login_timeout", DEFAULT_LOGIN_TIMEOUT)),
        )

    def __post_init__(self):
        """Validate configuration and fill derived paths."""
        if self.scan_interval < 0:
            raise ValueError(f"scan_interval must be non-negative, got {self.scan_interval}")
        if self.login_timeout <= 0:
            raise ValueError(f"login_timeout must be positive, got {self.login_timeout}")
        if not self.login_command:
            raise ValueError("login_command must not be empty")

        # Frozen dataclass: derived fields are set through object.__setattr__
        object.__setattr__(self, "target_path", Path(self.target_path))
        object.__setattr__(self, "data_dir", Path(self.data_dir))
        backups_dir = self.data_dir / "backups" if self.backups_dir is None else Path(self.backups_dir)
        index_path = self.data_dir / "index.json" if self.index_path is None else Path(self.index_path)
        object.__setattr__(self, "backups_dir", backups_dir)
        object.__setattr__(self, "index_path", index_path)
        object.__setattr__(self, "login_command", tuple(self.login_command))
