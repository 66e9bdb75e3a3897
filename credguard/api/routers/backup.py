"""Backup listing, labelling, restore and delete endpoints."""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from credguard._utils import logger
from credguard.backup import BackupError, BackupService
from credguard.backup.models import BackupEntry, ScanResult

from ..dependencies import get_service
from ..exceptions import StorageFailure, translate_error
from ..models import CreateBackupRequest, LabelUpdate

router = APIRouter(prefix="/backups", tags=["backups"])


@router.get("", response_model=List[BackupEntry])
async def list_backups(service: BackupService = Depends(get_service)) -> List[BackupEntry]:
    """List all backups, newest first."""
    try:
        return await service.list_backups()
    except (BackupError, OSError) as e:
        raise translate_error(e) from e


@router.post("", response_model=ScanResult)
async def create_backup(
    request: Optional[CreateBackupRequest] = None,
    service: BackupService = Depends(get_service),
) -> ScanResult:
    """Manually back up the target file unless its content is already stored."""
    label = request.label if request else None
    try:
        return await service.create_backup(label)
    except (BackupError, OSError) as e:
        raise translate_error(e) from e


@router.get("/{backup_id}", response_model=BackupEntry)
async def get_backup(backup_id: str, service: BackupService = Depends(get_service)) -> BackupEntry:
    try:
        return await service.get_backup(backup_id)
    except (BackupError, OSError) as e:
        raise translate_error(e) from e


@router.get("/{backup_id}/download")
async def download_backup(backup_id: str, service: BackupService = Depends(get_service)) -> FileResponse:
    """Download the stored bytes of a backup."""
    try:
        entry = await service.get_backup(backup_id)
    except (BackupError, OSError) as e:
        raise translate_error(e) from e

    path = service.config.backups_dir / entry.filename
    if not path.exists():
        raise StorageFailure(f"Backup file missing: {entry.filename}")

    return FileResponse(
        path=path,
        media_type="application/octet-stream",
        filename=entry.filename,
    )


@router.patch("/{backup_id}/label", response_model=BackupEntry)
async def update_label(
    backup_id: str,
    request: LabelUpdate,
    service: BackupService = Depends(get_service),
) -> BackupEntry:
    """Set or clear a backup's label."""
    try:
        return await service.update_label(backup_id, request.label)
    except (BackupError, OSError) as e:
        raise translate_error(e) from e


@router.post("/{backup_id}/restore")
async def restore_backup(backup_id: str, service: BackupService = Depends(get_service)) -> Dict[str, str]:
    """Overwrite the target file with a backup."""
    try:
        await service.restore(backup_id)
    except (BackupError, OSError) as e:
        logger.error(f"Restore of {backup_id} failed: {e}")
        raise translate_error(e) from e
    return {"restored": backup_id}


@router.delete("/{backup_id}")
async def delete_backup(backup_id: str, service: BackupService = Depends(get_service)) -> Dict[str, str]:
    """Delete a backup and its stored file."""
    try:
        await service.delete(backup_id)
    except (BackupError, OSError) as e:
        raise translate_error(e) from e
    return {"deleted": backup_id}
