"""Pass-through for the external credential login command."""

from fastapi import APIRouter, Depends

from credguard.backup import BackupService
from credguard.backup.models import LoginResult

from ..dependencies import get_service

router = APIRouter(prefix="/login", tags=["login"])


@router.post("", response_model=LoginResult)
async def login(service: BackupService = Depends(get_service)) -> LoginResult:
    """Run the login command; the outcome field tells failures apart."""
    return await service.login()
