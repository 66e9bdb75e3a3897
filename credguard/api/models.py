"""Pydantic models for API requests and responses."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

MAX_LABEL_LENGTH = 200


class CreateBackupRequest(BaseModel):
    label: Optional[str] = Field(default=None, max_length=MAX_LABEL_LENGTH)


class LabelUpdate(BaseModel):
    label: str = Field(default="", max_length=MAX_LABEL_LENGTH)


class HealthStatus(BaseModel):
    status: str  # "healthy", "degraded"
    target_exists: bool
    index_readable: bool
    scheduler_running: bool
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
