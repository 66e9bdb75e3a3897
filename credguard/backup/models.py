"""Data models for the backup index and scan results."""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class FileStat(BaseModel):
    """Stat metadata behind a fast signature."""

    size: int
    mod_time: datetime
    mod_time_ns: int
    inode: int = 0
    device: int = 0


class FingerprintResult(BaseModel):
    """Fast signature plus the stat it was derived from."""

    stat: FileStat
    signature: str


class BackupEntry(BaseModel):
    """One retained backup of the target file."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Unique backup identifier")
    filename: str = Field(..., description="Stored file name inside the backups directory")
    content_digest: str = Field(..., description="Hex digest of the captured bytes")
    fast_signature: str = Field(..., description="Fast signature observed at capture time")
    size: int = Field(..., description="Captured size in bytes")
    created_at: datetime = Field(..., description="Backup creation timestamp")
    label: str = Field(default="", description="Optional unique label")
    is_automatic: bool = Field(default=False, description="Created by the scheduler")
    source_path: str = Field(default="", description="Path the content was captured from")
    last_modified_at: Optional[datetime] = Field(default=None, description="Target mtime at capture time")


class IndexState(BaseModel):
    """Persisted catalogue of all backups."""

    model_config = ConfigDict(extra="ignore")

    target_path: str = ""
    digest_algorithm: str = ""
    latest_signature: str = ""
    entries: List[BackupEntry] = Field(default_factory=list)
    labels: Dict[str, str] = Field(default_factory=dict)


class ScanReason(str, Enum):
    """Why a scan did not create a backup."""
    TARGET_MISSING = "target-missing"
    UNCHANGED = "unchanged"
    DUPLICATE_CONTENT = "duplicate-content"


class ScanResult(BaseModel):
    created: bool
    entry: Optional[BackupEntry] = None
    reason: Optional[ScanReason] = None


class TargetStatus(BaseModel):
    """Current state of the protected file."""

    exists: bool
    target_path: str
    latest_signature: str = ""
    scan_interval_seconds: float = 0
    size: int = 0
    mod_time: Optional[datetime] = None
    signature: str = ""
    content_digest: str = ""
    content_digest_short: str = ""


class LoginOutcome(str, Enum):
    OK = "ok"
    FAILED = "failed"
    NOT_FOUND = "not-found"
    TIMEOUT = "timeout"


class LoginResult(BaseModel):
    """Captured output of the external login command."""

    outcome: LoginOutcome
    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome == LoginOutcome.OK
