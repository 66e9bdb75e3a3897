"""Health check endpoints."""

from typing import Dict, Optional

from fastapi import APIRouter, Depends

from credguard.backup import BackupService, ScanScheduler, StorageError

from ..dependencies import get_scheduler, get_service
from ..models import HealthStatus

router = APIRouter(prefix="/health", tags=["health"])


async def check_index(service: BackupService) -> bool:
    """Check that the index file can be loaded."""
    try:
        await service.store.snapshot()
        return True
    except StorageError:
        return False


@router.get("", response_model=HealthStatus)
async def health_check(
    service: BackupService = Depends(get_service),
    scheduler: Optional[ScanScheduler] = Depends(get_scheduler),
) -> HealthStatus:
    """Index readability, target presence and scheduler state."""
    index_ok = await check_index(service)
    target_exists = service.config.target_path.exists()
    scheduler_running = scheduler is not None and scheduler.running

    return HealthStatus(
        status="healthy" if index_ok else "degraded",
        target_exists=target_exists,
        index_readable=index_ok,
        scheduler_running=scheduler_running,
    )


@router.get("/live")
async def liveness_probe() -> Dict[str, str]:
    """Liveness probe."""
    return {"status": "alive"}
