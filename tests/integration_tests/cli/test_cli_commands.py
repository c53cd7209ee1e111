"""Integration tests for CLI commands over an in-memory application context."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from local_converter.application.context import AppContext, build_context
from local_converter.backends.registry import BackendRegistry
from local_converter.cli import cli as cli_module
from local_converter.infrastructure.kv_store import MemoryKeyValueStore
from local_converter.types import MEGABYTE, ConversionKind

runner = CliRunner()


@pytest.fixture
def context(monkeypatch: pytest.MonkeyPatch, recording_backend: type) -> AppContext:
    registry = BackendRegistry(
        {
            ConversionKind.DOCUMENT: recording_backend(ConversionKind.DOCUMENT),
            ConversionKind.SPEECH: recording_backend(ConversionKind.SPEECH),
        }
    )
    context = build_context(MemoryKeyValueStore(), registry)
    monkeypatch.setattr(cli_module, "open_context", lambda config: context)
    return context


@pytest.fixture
def notes(tmp_path: Path) -> Path:
    path = tmp_path / "notes.txt"
    path.write_text("Meeting at noon", encoding="utf-8")
    return path


def _convert(path: Path, kind: str, *extra: str) -> object:
    return runner.invoke(cli_module.app, ["convert", str(path), kind, *extra])


def test_help_lists_commands() -> None:
    result = runner.invoke(cli_module.app, ["--help"])
    assert result.exit_code == 0
    for command in ("convert", "history", "settings", "storage", "doctor"):
        assert command in result.output


def test_convert_writes_output_and_records_history(context: AppContext, notes: Path) -> None:
    result = _convert(notes, "document")

    assert result.exit_code == 0, result.output
    output = notes.with_name("notes.pdf")
    assert output.read_bytes() == b"converted:Meeting at noon"
    assert "✓ Saved:" in result.output
    entry = context.ledger.list()[0]
    assert f"History id: {entry.id} (kept for re-download)" in result.output
    assert context.vault.exists(entry.id)


def test_convert_to_explicit_directory(context: AppContext, notes: Path, tmp_path: Path) -> None:
    target_dir = tmp_path / "out"
    target_dir.mkdir()

    result = _convert(notes, "speech", "--output", str(target_dir))

    assert result.exit_code == 0, result.output
    assert (target_dir / "notes.mp3").exists()


def test_convert_creates_missing_output_directories(
    context: AppContext, notes: Path, tmp_path: Path
) -> None:
    target = tmp_path / "new" / "dir" / "memo.pdf"

    result = _convert(notes, "document", "--output", str(target))

    assert result.exit_code == 0, result.output
    assert target.read_bytes() == b"converted:Meeting at noon"


def test_convert_unwritable_output_reports_error(context: AppContext, notes: Path) -> None:
    target = notes / "memo.pdf"

    result = _convert(notes, "document", "--output", str(target))

    assert result.exit_code == 1
    assert "✗" in result.output
    assert not isinstance(result.exception, OSError)


def test_convert_incompatible_file_fails(context: AppContext, tmp_path: Path) -> None:
    image = tmp_path / "photo.png"
    image.write_bytes(b"\x89PNG\r\n")

    result = _convert(image, "document")

    assert result.exit_code == 1
    assert "Conversion failed" in result.output
    assert "select a text file" in result.output
    assert context.ledger.count() == 0


def test_convert_oversized_file_uses_selection_exit_code(context: AppContext, tmp_path: Path) -> None:
    big = tmp_path / "big.txt"
    big.write_bytes(b"a" * (10 * MEGABYTE + 1))

    result = _convert(big, "document")

    assert result.exit_code == 2
    assert "SelectionError" in result.output


def test_convert_unknown_kind_is_usage_error(context: AppContext, notes: Path) -> None:
    result = _convert(notes, "video")
    assert result.exit_code != 0


def test_convert_with_history_disabled(context: AppContext, notes: Path) -> None:
    runner.invoke(cli_module.app, ["settings", "set", "saveHistory=false"])

    result = _convert(notes, "document")

    assert result.exit_code == 0, result.output
    assert "History is disabled" in result.output
    assert context.ledger.count() == 0


def test_history_list_empty(context: AppContext) -> None:
    result = runner.invoke(cli_module.app, ["history", "list"])
    assert result.exit_code == 0
    assert "No conversions recorded." in result.output


def test_history_list_and_filter(context: AppContext, notes: Path) -> None:
    _convert(notes, "document")
    _convert(notes, "speech")

    listed = runner.invoke(cli_module.app, ["history", "list"])
    filtered = runner.invoke(cli_module.app, ["history", "list", "--type", "mp3"])

    assert listed.exit_code == 0
    lines = listed.output.strip().splitlines()
    assert len(lines) == 2
    assert lines[0].endswith("notes.mp3")
    assert lines[1].endswith("notes.pdf")
    assert "saved" in lines[0]
    assert filtered.output.strip().endswith("notes.mp3")
    assert "notes.pdf" not in filtered.output


def test_history_export_and_delete(context: AppContext, notes: Path, tmp_path: Path) -> None:
    _convert(notes, "document")
    entry_id = context.ledger.list()[0].id
    export_dir = tmp_path / "exports"
    export_dir.mkdir()

    exported = runner.invoke(cli_module.app, ["history", "export", entry_id, str(export_dir)])
    assert exported.exit_code == 0, exported.output
    assert (export_dir / "notes.pdf").read_bytes() == b"converted:Meeting at noon"

    deleted = runner.invoke(cli_module.app, ["history", "delete", entry_id])
    assert deleted.exit_code == 0
    assert context.ledger.count() == 0
    assert context.vault.exists(entry_id) is False

    missing = runner.invoke(cli_module.app, ["history", "export", entry_id, str(export_dir)])
    assert missing.exit_code == 1
    assert "No stored file" in missing.output


def test_history_clear_requires_confirmation(context: AppContext, notes: Path) -> None:
    _convert(notes, "document")

    aborted = runner.invoke(cli_module.app, ["history", "clear"], input="n\n")
    assert aborted.exit_code != 0
    assert context.ledger.count() == 1

    cleared = runner.invoke(cli_module.app, ["history", "clear", "--artifacts", "-y"])
    assert cleared.exit_code == 0
    assert "Removed 1 stored files." in cleared.output
    assert context.ledger.count() == 0
    assert context.vault.ids() == []


def test_settings_set_show_and_reset(context: AppContext) -> None:
    changed = runner.invoke(cli_module.app, ["settings", "set", "speechRate=1.5", "voice=female"])
    assert changed.exit_code == 0, changed.output
    assert context.settings.get().speech_rate == 1.5

    shown = runner.invoke(cli_module.app, ["settings", "show"])
    assert "speechRate = 1.5" in shown.output
    assert "voice = female" in shown.output

    reset = runner.invoke(cli_module.app, ["settings", "reset"])
    assert reset.exit_code == 0
    assert context.settings.get().voice == "male"


@pytest.mark.parametrize("assignment", ["colour=blue", "voice=robot", "novalue"])
def test_settings_set_rejects_bad_input(context: AppContext, assignment: str) -> None:
    result = runner.invoke(cli_module.app, ["settings", "set", assignment])
    assert result.exit_code == 2
    assert context.settings.get().voice == "male"


def test_storage_summary(context: AppContext, notes: Path) -> None:
    _convert(notes, "document")
    result = runner.invoke(cli_module.app, ["storage"])
    assert result.exit_code == 0
    assert "History entries: 1 (max 100)" in result.output
    assert "Stored files: 1" in result.output


def test_doctor_reports_backends(context: AppContext, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli_module, "ENGINE_DISTRIBUTIONS", ["definitely-not-installed-dist"])
    result = runner.invoke(cli_module.app, ["doctor"])
    assert result.exit_code == 0
    assert "definitely-not-installed-dist: <not installed>" in result.output
    assert "backends: document, speech" in result.output


def test_invalid_log_level_rejected() -> None:
    result = runner.invoke(cli_module.app, ["--log-level", "chatty", "storage"])
    assert result.exit_code == 2
