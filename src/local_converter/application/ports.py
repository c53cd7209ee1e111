"""Application ports for clean architecture boundaries."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol

from local_converter.application.results import ConversionResult, SourceFile
from local_converter.schemas import AppSettings


class KeyValueStore(Protocol):
    """Durable text-valued storage keyed by short names."""

    def get(self, key: str) -> str | None:
        """Return the stored value or ``None`` when absent."""

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    def remove(self, key: str) -> None:
        """Delete ``key``; no-op when absent."""

    def keys(self) -> Iterator[str]:
        """Iterate over stored keys."""

    def size_bytes(self) -> int:
        """Return the space used by all keys and values."""


class ConversionBackend(Protocol):
    """Engine implementing exactly one conversion kind.

    Backends never write history or artifacts; persistence belongs to the
    orchestrator.
    """

    def convert(self, source: SourceFile, settings: AppSettings) -> ConversionResult:
        """Convert ``source`` and describe the produced artifact."""
