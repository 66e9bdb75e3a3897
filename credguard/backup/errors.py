"""Exceptions raised by the backup core."""


class BackupError(Exception):
    """Base exception for backup operations."""
    pass


class BackupNotFoundError(BackupError):
    """No backup entry with the requested id."""

    def __init__(self, backup_id: str):
        super().__init__(f"Backup not found: {backup_id}")
        self.backup_id = backup_id


class LabelConflictError(BackupError):
    """Label is already owned by another entry."""

    def __init__(self, label: str):
        super().__init__(f"Label already exists: {label}")
        self.label = label


class InvalidLabelError(BackupError):
    """Label supplied explicitly but blank."""
    pass


class StorageError(BackupError):
    """Reading or persisting the index or a backup file failed."""
    pass
