"""Custom exceptions for FastAPI application."""

from fastapi import HTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from credguard.backup.errors import (
    BackupNotFoundError,
    InvalidLabelError,
    LabelConflictError,
)


class CredguardAPIError(HTTPException):
    """Base exception for API errors; ``detail`` carries a machine-readable code."""

    code = "error"

    def __init__(self, status_code: int, message: str):
        super().__init__(status_code, {"code": self.code, "message": message})


class BackupNotFound(CredguardAPIError):
    code = "not_found"

    def __init__(self, backup_id: str):
        super().__init__(HTTP_404_NOT_FOUND, f"Backup {backup_id} not found")


class LabelConflict(CredguardAPIError):
    code = "label_conflict"

    def __init__(self, label: str):
        super().__init__(HTTP_409_CONFLICT, f"Label '{label}' is already in use, choose another")


class InvalidLabel(CredguardAPIError):
    code = "invalid_label"

    def __init__(self, message: str):
        super().__init__(HTTP_400_BAD_REQUEST, message)


class StorageFailure(CredguardAPIError):
    code = "io_error"

    def __init__(self, message: str):
        super().__init__(HTTP_500_INTERNAL_SERVER_ERROR, message)


def translate_error(exc: Exception) -> CredguardAPIError:
    """Map a core exception onto its API error."""
    if isinstance(exc, BackupNotFoundError):
        return BackupNotFound(exc.backup_id)
    if isinstance(exc, LabelConflictError):
        return LabelConflict(exc.label)
    if isinstance(exc, InvalidLabelError):
        return InvalidLabel(str(exc))
    return StorageFailure(str(exc))
