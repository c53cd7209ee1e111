"""Unit tests for the history ledger."""

from __future__ import annotations

import itertools
import json
import logging
from datetime import datetime, timedelta, timezone

import pytest

from local_converter.infrastructure.kv_store import MemoryKeyValueStore
from local_converter.schemas import HistoryDraft
from local_converter.storage.ledger import HISTORY_KEY, HistoryLedger
from local_converter.storage.settings import DEFAULT_SETTINGS, SettingsStore
from local_converter.storage.vault import ArtifactVault
from local_converter.types import FileType

_START = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _draft(name: str = "notes.pdf", file_type: FileType = FileType.DOCUMENT) -> HistoryDraft:
    return HistoryDraft(
        file_name=name,
        original_file_name=name.rsplit(".", 1)[0] + ".txt",
        file_type=file_type,
        file_size=42,
    )


def _ledger(store: MemoryKeyValueStore, capacity: int = 100) -> tuple[HistoryLedger, ArtifactVault]:
    counter = itertools.count(1)
    ticks = itertools.count()
    vault = ArtifactVault(store)
    ledger = HistoryLedger(
        store,
        SettingsStore(store),
        vault,
        capacity=capacity,
        clock=lambda: _START + timedelta(minutes=next(ticks)),
        id_factory=lambda: f"e{next(counter)}",
    )
    return ledger, vault


def test_newest_first(memory_store: MemoryKeyValueStore) -> None:
    ledger, _ = _ledger(memory_store)
    for name in ("a.pdf", "b.pdf", "c.pdf"):
        ledger.append(_draft(name))
    assert [entry.id for entry in ledger.list()] == ["e3", "e2", "e1"]
    assert ledger.list()[0].file_name == "c.pdf"
    assert ledger.count() == 3


def test_capacity_evicts_oldest(memory_store: MemoryKeyValueStore) -> None:
    ledger, _ = _ledger(memory_store)
    for index in range(101):
        ledger.append(_draft(f"doc{index}.pdf"))
    entries = ledger.list()
    assert len(entries) == 100
    assert entries[0].id == "e101"
    assert ledger.get("e1") is None
    assert entries[-1].id == "e2"


def test_small_capacity(memory_store: MemoryKeyValueStore) -> None:
    ledger, _ = _ledger(memory_store, capacity=2)
    for name in ("a.pdf", "b.pdf", "c.pdf"):
        ledger.append(_draft(name))
    assert [entry.file_name for entry in ledger.list()] == ["c.pdf", "b.pdf"]


def test_append_assigns_id_and_timestamp(memory_store: MemoryKeyValueStore) -> None:
    ledger, _ = _ledger(memory_store)
    entry = ledger.append(_draft())
    assert entry is not None
    assert entry.id == "e1"
    assert entry.created_at == _START
    assert entry.status == "success"
    assert entry.original_file_name == "notes.txt"


def test_disabled_history_records_nothing(memory_store: MemoryKeyValueStore) -> None:
    ledger, _ = _ledger(memory_store)
    SettingsStore(memory_store).set(DEFAULT_SETTINGS.updated({"saveHistory": False}))
    assert ledger.append(_draft()) is None
    assert ledger.list() == []


def test_disabled_history_is_logged_at_info(
    memory_store: MemoryKeyValueStore, caplog: pytest.LogCaptureFixture
) -> None:
    ledger, _ = _ledger(memory_store)
    SettingsStore(memory_store).set(DEFAULT_SETTINGS.updated({"saveHistory": False}))
    caplog.set_level(logging.INFO, logger="local_converter.storage.ledger")

    ledger.append(_draft())

    assert not [record for record in caplog.records if record.levelno >= logging.WARNING]
    assert any("history disabled" in record.getMessage() for record in caplog.records)


def test_remove_cascades_to_vault(memory_store: MemoryKeyValueStore) -> None:
    ledger, vault = _ledger(memory_store)
    entry = ledger.append(_draft())
    assert entry is not None
    vault.put(entry.id, b"%PDF-1.4")

    ledger.remove(entry.id)

    assert ledger.get(entry.id) is None
    assert vault.exists(entry.id) is False


def test_remove_unknown_id_is_noop(memory_store: MemoryKeyValueStore) -> None:
    ledger, _ = _ledger(memory_store)
    ledger.append(_draft())
    ledger.remove("missing")
    assert ledger.count() == 1


def test_clear_keeps_artifacts(memory_store: MemoryKeyValueStore) -> None:
    ledger, vault = _ledger(memory_store)
    entry = ledger.append(_draft())
    assert entry is not None
    vault.put(entry.id, b"data")

    ledger.clear()

    assert ledger.list() == []
    assert vault.ids() == [entry.id]


def test_filter_by_type(memory_store: MemoryKeyValueStore) -> None:
    ledger, _ = _ledger(memory_store)
    ledger.append(_draft("a.pdf", FileType.DOCUMENT))
    ledger.append(_draft("b_ocr.txt", FileType.TEXT))
    ledger.append(_draft("c.mp3", FileType.AUDIO))
    ledger.append(_draft("d.pdf", FileType.DOCUMENT))

    assert [entry.file_name for entry in ledger.filter_by_type(FileType.DOCUMENT)] == [
        "d.pdf",
        "a.pdf",
    ]
    assert [entry.file_name for entry in ledger.filter_by_type(FileType.AUDIO)] == ["c.mp3"]


def test_filter_by_type_accepts_plain_strings(memory_store: MemoryKeyValueStore) -> None:
    ledger, _ = _ledger(memory_store)
    ledger.append(_draft("a.pdf", FileType.DOCUMENT))
    ledger.append(_draft("b_ocr.txt", FileType.TEXT))

    assert ledger.filter_by_type("pdf") == ledger.filter_by_type(FileType.DOCUMENT)
    assert [entry.file_name for entry in ledger.filter_by_type("txt")] == ["b_ocr.txt"]


def test_persisted_record_uses_camel_case(memory_store: MemoryKeyValueStore) -> None:
    ledger, _ = _ledger(memory_store)
    ledger.append(_draft())
    stored = json.loads(memory_store.get(HISTORY_KEY) or "[]")
    assert set(stored[0]) == {
        "id",
        "fileName",
        "originalFileName",
        "fileType",
        "fileSize",
        "date",
        "status",
    }
    assert stored[0]["fileType"] == "pdf"


@pytest.mark.parametrize("raw", ["{broken", '{"not": "a list"}', '[{"id": 1}]'])
def test_unreadable_history_loads_empty(memory_store: MemoryKeyValueStore, raw: str) -> None:
    memory_store.set(HISTORY_KEY, raw)
    ledger, _ = _ledger(memory_store)
    assert ledger.list() == []
