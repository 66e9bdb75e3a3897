"""Scan, dedup and restore orchestration for the protected file."""

import asyncio
import uuid
from pathlib import Path
from typing import List, Optional

from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt

from .._utils import atomic_write_bytes, ensure_dir, local_now, logger
from ..config import BackupConfig
from .errors import InvalidLabelError, LabelConflictError, StorageError
from .hashing import compute_content_hash, compute_fingerprint, short_hash
from .login import run_login_command
from .models import (
    BackupEntry,
    IndexState,
    LoginResult,
    ScanReason,
    ScanResult,
    TargetStatus,
)
from .naming import (
    BACKUP_FILE_MODE,
    TIMESTAMP_FORMAT,
    backup_extension,
    build_backup_filename,
    ensure_unique_filename,
    write_backup_file,
)
from .store import IndexStore, find_by_digest

MAX_LABEL_RETRIES = 20


class BackupService:
    """Decide when the target file warrants a new backup, and manage backups.

    A scan is serialized end to end by the service's own lock, so two scans
    never both conclude that a new content digest is unseen. Label, restore
    and delete operations only go through the index store's lock.
    """

    def __init__(self, config: BackupConfig):
        """Initialize the service and create its directories.

        Args:
            config: Target and data locations
        """
        self.config = config
        ensure_dir(config.data_dir)
        ensure_dir(config.backups_dir)
        self.store = IndexStore(config.index_path, config.target_path)
        self._scan_lock = asyncio.Lock()
        logger.info(
            f"Backup service initialized: target={config.target_path} "
            f"data_dir={config.data_dir} scan_interval={config.scan_interval}s"
        )

    @property
    def scan_in_progress(self) -> bool:
        return self._scan_lock.locked()

    async def scan(self, is_automatic: bool = False, label: Optional[str] = None) -> ScanResult:
        """Run one scan cycle.

        Args:
            is_automatic: True when triggered by the scheduler
            label: Optional label for a new backup. Must be non-blank and
                unused; when omitted a ``manual-``/``auto-`` timestamp label
                is generated.

        Returns:
            ScanResult; ``created`` is False with a reason when the target is
            missing, unchanged, or its content is already backed up

        Raises:
            InvalidLabelError: If ``label`` is blank
            LabelConflictError: If ``label`` is taken (or, for manual scans,
                became taken before commit)
            StorageError: If the index cannot be read or written
        """
        if label is not None:
            label = label.strip()
            if not label:
                raise InvalidLabelError("Label must not be blank")

        async with self._scan_lock:
            return await self._scan_locked(is_automatic, label)

    async def create_backup(self, label: Optional[str] = None) -> ScanResult:
        """Manually request a backup of the current target content."""
        return await self.scan(is_automatic=False, label=label)

    async def list_backups(self) -> List[BackupEntry]:
        """All backups, newest first."""
        return await self.store.list_entries()

    async def get_backup(self, backup_id: str) -> BackupEntry:
        return await self.store.find_by_id(backup_id)

    async def update_label(self, backup_id: str, label: str) -> BackupEntry:
        """Set or clear (empty string) a backup's label."""
        entry = await self.store.update_label(backup_id, label.strip())
        logger.info(f"Updated label of {backup_id}: {entry.label!r}")
        return entry

    async def restore(self, backup_id: str) -> BackupEntry:
        """Overwrite the target file with a stored backup.

        Returns:
            The restored entry

        Raises:
            BackupNotFoundError: If the backup does not exist
            StorageError: If the backup cannot be read or the target written
        """
        entry = await self.store.find_by_id(backup_id)
        backup_path = self.config.backups_dir / entry.filename
        target = self.config.target_path

        try:
            data = backup_path.read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read backup file {backup_path}: {e}") from e

        try:
            atomic_write_bytes(target, data, mode=BACKUP_FILE_MODE)
        except OSError as e:
            raise StorageError(f"Failed to write target {target}: {e}") from e

        # The next scan corrects a stale signature, so failure here is not fatal
        try:
            fingerprint = compute_fingerprint(target)
            await self.store.set_latest_signature(fingerprint.signature)
        except (OSError, StorageError) as e:
            logger.warning(f"Failed to refresh latest signature after restore: {e}")

        logger.info(f"Restored backup {backup_id} -> {target}")
        return entry

    async def delete(self, backup_id: str) -> BackupEntry:
        """Delete a backup's index entry and its stored file.

        Raises:
            BackupNotFoundError: If the backup does not exist
        """
        entry = await self.store.delete_entry(backup_id)
        self._remove_backup_file(self.config.backups_dir / entry.filename)
        logger.info(f"Deleted backup {backup_id} (label={entry.label!r})")
        return entry

    async def status(self) -> TargetStatus:
        """Describe the target file and the last observed signature."""
        state = await self.store.snapshot()
        target = self.config.target_path
        status = TargetStatus(
            exists=False,
            target_path=str(target),
            latest_signature=state.latest_signature,
            scan_interval_seconds=self.config.scan_interval,
        )

        try:
            fingerprint = compute_fingerprint(target)
            content_digest, _ = compute_content_hash(target)
        except FileNotFoundError:
            return status

        return status.model_copy(update={
            "exists": True,
            "size": fingerprint.stat.size,
            "mod_time": fingerprint.stat.mod_time,
            "signature": fingerprint.signature,
            "content_digest": content_digest,
            "content_digest_short": short_hash(content_digest),
        })

    async def login(self) -> LoginResult:
        """Run the configured login command."""
        return await run_login_command(self.config.login_command, self.config.login_timeout)

    # Private helper methods

    async def _scan_locked(self, is_automatic: bool, label: Optional[str]) -> ScanResult:
        state = await self.store.snapshot()
        target = self.config.target_path

        try:
            fingerprint = compute_fingerprint(target)
        except FileNotFoundError:
            logger.debug(f"Scan skipped: target missing {target}")
            return ScanResult(created=False, reason=ScanReason.TARGET_MISSING)

        signature = fingerprint.signature
        if state.latest_signature == signature:
            return ScanResult(created=False, reason=ScanReason.UNCHANGED)

        try:
            content_digest, data = compute_content_hash(target)
        except FileNotFoundError:
            logger.debug(f"Scan skipped: target vanished before read {target}")
            return ScanResult(created=False, reason=ScanReason.TARGET_MISSING)

        if find_by_digest(state, content_digest) is not None:
            await self.store.set_latest_signature(signature)
            logger.info(f"Scan skipped: signature changed but content exists hash={short_hash(content_digest)}")
            return ScanResult(created=False, reason=ScanReason.DUPLICATE_CONTENT)

        now = local_now()
        final_label = self._resolve_label(state, is_automatic, label, now.strftime(TIMESTAMP_FORMAT))

        base = build_backup_filename(now, content_digest, backup_extension(target))
        try:
            filename = ensure_unique_filename(self.config.backups_dir, base)
            backup_path = write_backup_file(self.config.backups_dir, filename, data)
        except OSError as e:
            raise StorageError(f"Failed to write backup file: {e}") from e

        entry = BackupEntry(
            id=str(uuid.uuid4()),
            filename=filename,
            content_digest=content_digest,
            fast_signature=signature,
            size=len(data),
            created_at=now,
            label=final_label,
            is_automatic=is_automatic,
            source_path=str(target),
            last_modified_at=fingerprint.stat.mod_time,
        )

        try:
            entry = await self._commit(entry, signature, is_automatic)
        except BaseException:
            self._remove_backup_file(backup_path)
            raise

        logger.info(
            f"Created backup id={entry.id} label={entry.label!r} "
            f"signature={signature} hash={short_hash(content_digest)}"
        )
        return ScanResult(created=True, entry=entry)

    def _resolve_label(
        self,
        state: IndexState,
        is_automatic: bool,
        label: Optional[str],
        timestamp: str,
    ) -> str:
        """Pick the label for a new backup from the pre-commit snapshot."""
        if label is not None:
            if label in state.labels:
                raise LabelConflictError(label)
            return label

        base = f"{'auto' if is_automatic else 'manual'}-{timestamp}"
        candidate = base
        counter = 1
        while candidate in state.labels:
            candidate = f"{base}-{counter}"
            counter += 1
        return candidate

    async def _commit(self, entry: BackupEntry, signature: str, is_automatic: bool) -> BackupEntry:
        """Add ``entry`` to the index.

        A label taken between resolution and commit is surfaced for manual
        scans. Automatic scans retry with ``-1``, ``-2``, ... suffixes.
        """
        if not is_automatic:
            await self.store.add_entry(entry, signature)
            return entry

        base_label = entry.label
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(MAX_LABEL_RETRIES),
            retry=retry_if_exception_type(LabelConflictError),
            reraise=True,
        ):
            with attempt:
                number = attempt.retry_state.attempt_number
                if number > 1:
                    entry = entry.model_copy(update={"label": f"{base_label}-{number - 1}"})
                    logger.info(f"Automatic backup label conflict, trying {entry.label}")
                await self.store.add_entry(entry, signature)
        return entry

    def _remove_backup_file(self, path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Failed to remove backup file {path}: {e}")
