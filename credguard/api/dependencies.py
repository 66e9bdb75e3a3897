"""Dependency injection for FastAPI."""

from typing import TYPE_CHECKING, Optional

from fastapi import Request

if TYPE_CHECKING:
    from credguard.backup import BackupService, ScanScheduler


async def get_service(request: Request) -> "BackupService":
    """Get BackupService instance from app state."""
    return request.app.state.service


async def get_scheduler(request: Request) -> Optional["ScanScheduler"]:
    """Get the scan scheduler from app state if available."""
    return getattr(request.app.state, "scheduler", None)
