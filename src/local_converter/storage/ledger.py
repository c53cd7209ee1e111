"""History ledger: newest-first, capacity-bounded conversion records."""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable
from datetime import datetime, timezone

from pydantic import ValidationError

from local_converter.application.ports import KeyValueStore
from local_converter.schemas import HISTORY_ADAPTER, HistoryDraft, HistoryEntry
from local_converter.storage.settings import SettingsStore
from local_converter.storage.vault import ArtifactVault
from local_converter.types import HISTORY_CAPACITY, FileType

logger = logging.getLogger(__name__)

HISTORY_KEY = "conversion_history"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_entry_id() -> str:
    return uuid.uuid4().hex


class HistoryLedger:
    """Ordered list of past conversions.

    Removing an entry also removes its artifact from the vault. ``clear``
    only empties the list; artifacts are cleared through the vault.
    Read-modify-write cycles on the stored list are serialized by a lock
    shared by every orchestrator using this ledger.
    """

    def __init__(
        self,
        store: KeyValueStore,
        settings: SettingsStore,
        vault: ArtifactVault,
        *,
        capacity: int = HISTORY_CAPACITY,
        clock: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[], str] = _new_entry_id,
    ) -> None:
        self._store = store
        self._settings = settings
        self._vault = vault
        self._capacity = capacity
        self._clock = clock
        self._id_factory = id_factory
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def _load(self) -> list[HistoryEntry]:
        raw = self._store.get(HISTORY_KEY)
        if raw is None:
            return []
        try:
            return HISTORY_ADAPTER.validate_json(raw)
        except ValidationError as exc:
            logger.warning("stored history is unreadable, starting empty: %s", exc)
            return []

    def _save(self, entries: list[HistoryEntry]) -> None:
        payload = HISTORY_ADAPTER.dump_json(entries, by_alias=True).decode("utf-8")
        self._store.set(HISTORY_KEY, payload)

    def append(self, draft: HistoryDraft) -> HistoryEntry | None:
        """Record a conversion at the head of the list.

        Parameters
        ----------
        draft : HistoryDraft
            Metadata without id and timestamp.

        Returns
        -------
        HistoryEntry | None
            The stored entry, or ``None`` when history saving is disabled.
        """
        if not self._settings.get().save_history:
            logger.info("history disabled, %s not recorded", draft.file_name)
            return None
        entry = HistoryEntry(
            id=self._id_factory(),
            created_at=self._clock(),
            **draft.model_dump(),
        )
        with self._lock:
            entries = self._load()
            entries.insert(0, entry)
            del entries[self._capacity:]
            self._save(entries)
        logger.info("history entry added: %s (%s)", entry.file_name, entry.id)
        return entry

    def list(self) -> list[HistoryEntry]:
        return self._load()

    def filter_by_type(self, file_type: FileType | str) -> list[HistoryEntry]:
        wanted = FileType(file_type)
        return [entry for entry in self._load() if entry.file_type == wanted]

    def get(self, entry_id: str) -> HistoryEntry | None:
        return next((entry for entry in self._load() if entry.id == entry_id), None)

    def count(self) -> int:
        return len(self._load())

    def remove(self, entry_id: str) -> None:
        self._vault.delete(entry_id)
        with self._lock:
            entries = self._load()
            remaining = [entry for entry in entries if entry.id != entry_id]
            if len(remaining) == len(entries):
                return
            self._save(remaining)
        logger.info("history entry removed: %s", entry_id)

    def clear(self) -> None:
        with self._lock:
            self._save([])
        logger.info("history cleared")
