"""Scan and target status endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends

from credguard.backup import BackupError, BackupService
from credguard.backup.models import ScanResult, TargetStatus

from ..dependencies import get_service
from ..exceptions import translate_error
from ..models import CreateBackupRequest

router = APIRouter(tags=["scan"])


@router.post("/scan", response_model=ScanResult)
async def scan(
    request: Optional[CreateBackupRequest] = None,
    service: BackupService = Depends(get_service),
) -> ScanResult:
    """Run one manual scan of the target file."""
    label = request.label if request else None
    try:
        return await service.scan(is_automatic=False, label=label)
    except (BackupError, OSError) as e:
        raise translate_error(e) from e


@router.get("/status", response_model=TargetStatus)
async def status(service: BackupService = Depends(get_service)) -> TargetStatus:
    """Current target file state and last observed signature."""
    try:
        return await service.status()
    except (BackupError, OSError) as e:
        raise translate_error(e) from e
