"""Durable, concurrency-safe index of backups."""

import asyncio
import json
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from pydantic import ValidationError

from .._utils import atomic_write_json, logger, read_file_if_exists
from .errors import BackupNotFoundError, LabelConflictError, StorageError
from .hashing import DIGEST_ALGORITHM
from .locking import ProcessFileLock
from .models import BackupEntry, IndexState

Mutator = Callable[[IndexState], None]


class IndexStore:
    """Sole reader/writer of ``index.json``.

    Every mutation runs under an in-process ``asyncio.Lock`` and an advisory
    file lock on ``<index_path>.lock``, reloads the persisted state, applies
    the mutation and replaces the file through a temp-file rename. A failed
    mutation or write leaves the previous file untouched.
    """

    def __init__(self, index_path: Union[str, Path], target_path: Union[str, Path] = ""):
        """Initialize the store. Nothing is read until first access.

        Args:
            index_path: Path of the JSON index file
            target_path: Protected file, recorded in the index when absent
        """
        self.index_path = Path(index_path)
        self.lock_path = Path(f"{self.index_path}.lock")
        self.target_path = str(target_path)
        self._lock = asyncio.Lock()

    async def snapshot(self) -> IndexState:
        """Return an independent copy of the persisted state."""
        async with self._lock:
            return self._load()

    async def update(self, mutator: Mutator) -> IndexState:
        """Apply ``mutator`` to the current state and commit it atomically.

        Args:
            mutator: Callable that edits the state in place. Any exception it
                raises aborts the transaction without touching disk.

        Returns:
            Copy of the committed state

        Raises:
            StorageError: If loading or persisting the index fails
        """
        async with self._lock:
            try:
                async with ProcessFileLock(self.lock_path):
                    state = self._load()
                    mutator(state)
                    self._normalize(state)
                    self._persist(state)
            except OSError as e:
                raise StorageError(f"Index update failed for {self.index_path}: {e}") from e
            return state.model_copy(deep=True)

    async def add_entry(self, entry: BackupEntry, latest_signature: str) -> IndexState:
        """Append ``entry`` and advance the latest signature.

        Raises:
            LabelConflictError: If the entry's label belongs to another entry
        """
        def mutate(state: IndexState) -> None:
            if entry.label:
                owner = state.labels.get(entry.label)
                if owner is not None and owner != entry.id:
                    raise LabelConflictError(entry.label)
                state.labels[entry.label] = entry.id
            state.entries.append(entry.model_copy(deep=True))
            state.latest_signature = latest_signature

        return await self.update(mutate)

    async def set_latest_signature(self, signature: str) -> IndexState:
        def mutate(state: IndexState) -> None:
            state.latest_signature = signature

        return await self.update(mutate)

    async def update_label(self, backup_id: str, label: str) -> BackupEntry:
        """Change an entry's label; an empty label clears it.

        Raises:
            BackupNotFoundError: If no entry has ``backup_id``
            LabelConflictError: If ``label`` belongs to another entry
        """
        updated: List[BackupEntry] = []

        def mutate(state: IndexState) -> None:
            entry = _find(state.entries, backup_id)
            if entry is None:
                raise BackupNotFoundError(backup_id)
            if entry.label != label:
                if label:
                    owner = state.labels.get(label)
                    if owner is not None and owner != backup_id:
                        raise LabelConflictError(label)
                if entry.label:
                    state.labels.pop(entry.label, None)
                entry.label = label
                if label:
                    state.labels[label] = backup_id
            updated.append(entry.model_copy(deep=True))

        await self.update(mutate)
        return updated[0]

    async def delete_entry(self, backup_id: str) -> BackupEntry:
        """Remove an entry and its label.

        The latest signature becomes the fast signature of the newest
        remaining entry, or empty when none remain.

        Raises:
            BackupNotFoundError: If no entry has ``backup_id``
        """
        removed: List[BackupEntry] = []

        def mutate(state: IndexState) -> None:
            entry = _find(state.entries, backup_id)
            if entry is None:
                raise BackupNotFoundError(backup_id)
            state.entries = [e for e in state.entries if e.id != backup_id]
            if entry.label:
                state.labels.pop(entry.label, None)
            newest = max(state.entries, key=lambda e: e.created_at, default=None)
            state.latest_signature = newest.fast_signature if newest else ""
            removed.append(entry)

        await self.update(mutate)
        return removed[0]

    async def list_entries(self) -> List[BackupEntry]:
        """All entries, newest first."""
        state = await self.snapshot()
        return sorted(state.entries, key=lambda e: e.created_at, reverse=True)

    async def find_by_id(self, backup_id: str) -> BackupEntry:
        state = await self.snapshot()
        entry = _find(state.entries, backup_id)
        if entry is None:
            raise BackupNotFoundError(backup_id)
        return entry

    async def find_by_digest(self, content_digest: str) -> Optional[BackupEntry]:
        state = await self.snapshot()
        return find_by_digest(state, content_digest)

    # Private helper methods

    def _load(self) -> IndexState:
        try:
            raw = read_file_if_exists(self.index_path)
        except OSError as e:
            raise StorageError(f"Failed to read index {self.index_path}: {e}") from e

        if raw is None:
            state = IndexState()
        else:
            try:
                state = IndexState.model_validate(json.loads(raw.decode("utf-8")))
            except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
                raise StorageError(f"Failed to parse index {self.index_path}: {e}") from e

        self._normalize(state)
        return state

    def _normalize(self, state: IndexState) -> None:
        """Fill defaults and make the label table match the entries."""
        if not state.digest_algorithm:
            state.digest_algorithm = DIGEST_ALGORITHM
        if not state.target_path:
            state.target_path = self.target_path

        expected: Dict[str, str] = {}
        for entry in state.entries:
            if not entry.label:
                continue
            owner = expected.get(entry.label)
            if owner is not None and owner != entry.id:
                raise StorageError(f"Duplicate label in index: {entry.label}")
            expected[entry.label] = entry.id

        if state.labels != expected:
            logger.warning(f"Label table out of sync with entries in {self.index_path}, rebuilding")
            state.labels = expected

    def _persist(self, state: IndexState) -> None:
        try:
            atomic_write_json(self.index_path, state.model_dump(mode="json"))
        except OSError as e:
            raise StorageError(f"Failed to write index {self.index_path}: {e}") from e
        logger.debug(f"Index saved: {self.index_path} ({len(state.entries)} entries)")


def _find(entries: List[BackupEntry], backup_id: str) -> Optional[BackupEntry]:
    for entry in entries:
        if entry.id == backup_id:
            return entry
    return None


def find_by_digest(state: IndexState, content_digest: str) -> Optional[BackupEntry]:
    """First entry in ``state`` whose content digest matches."""
    for entry in state.entries:
        if entry.content_digest == content_digest:
            return entry.model_copy(deep=True)
    return None
