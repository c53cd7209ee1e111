"""Shared pytest configuration, markers and store fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from local_converter.application.results import ConversionResult, SourceFile
from local_converter.infrastructure.kv_store import MemoryKeyValueStore
from local_converter.schemas import AppSettings
from local_converter.types import OUTPUT_TYPES, ConversionKind


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Attach suite markers based on test file path."""
    del config
    for item in items:
        parts = set(Path(str(item.fspath)).parts)
        if "e2e_tests" in parts:
            item.add_marker(pytest.mark.e2e)
        elif "integration_tests" in parts:
            item.add_marker(pytest.mark.integration)
        elif "unit_tests" in parts:
            item.add_marker(pytest.mark.unit)


class RecordingBackend:
    """Backend double that echoes the input bytes as the artifact."""

    _SUFFIXES = {
        ConversionKind.DOCUMENT: ".pdf",
        ConversionKind.TEXT_EXTRACTION: "_ocr.txt",
        ConversionKind.SPEECH: ".mp3",
    }

    def __init__(self, kind: ConversionKind = ConversionKind.DOCUMENT, blob: bytes | None = None) -> None:
        self.kind = kind
        self.blob = blob
        self.calls: list[tuple[SourceFile, AppSettings]] = []

    def convert(self, source: SourceFile, settings: AppSettings) -> ConversionResult:
        self.calls.append((source, settings))
        blob = self.blob if self.blob is not None else b"converted:" + source.data
        return ConversionResult.ok(
            f"{source.stem}{self._SUFFIXES[self.kind]}", OUTPUT_TYPES[self.kind], blob
        )


@pytest.fixture
def memory_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def text_source() -> SourceFile:
    return SourceFile(name="notes.txt", mime_type="text/plain", data=b"a" * 2048)


@pytest.fixture
def image_source() -> SourceFile:
    return SourceFile(name="scan.png", mime_type="image/png", data=b"\x89PNG fake")


@pytest.fixture
def recording_backend() -> type[RecordingBackend]:
    """Return the backend double class so tests can build one per kind."""
    return RecordingBackend
