"""Shared enums, type aliases and fixed limits."""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

MEGABYTE = 1024 * 1024

MAX_SELECTION_BYTES = 10 * MEGABYTE
MAX_ARTIFACT_BYTES = 5 * MEGABYTE
HISTORY_CAPACITY = 100

type VoiceGender = Literal["male", "female"]
type OcrLanguage = Literal["por", "eng", "spa", "fra"]
type PageSize = Literal["A4", "Letter", "A3"]
type Orientation = Literal["portrait", "landscape"]
type EntryStatus = Literal["success", "error"]


class ConversionKind(StrEnum):
    """What the user asked the file to become."""

    DOCUMENT = "document"
    TEXT_EXTRACTION = "text-extraction"
    SPEECH = "speech"


class FileType(StrEnum):
    """Type of the produced artifact, as recorded in history."""

    DOCUMENT = "pdf"
    TEXT = "txt"
    AUDIO = "mp3"


class ConversionState(StrEnum):
    """Orchestrator lifecycle states."""

    IDLE = "idle"
    FILE_SELECTED = "file-selected"
    TYPE_CHOSEN = "type-chosen"
    VALIDATING = "validating"
    CONVERTING = "converting"
    COMPLETED = "completed"
    FAILED = "failed"


OUTPUT_TYPES: dict[ConversionKind, FileType] = {
    ConversionKind.DOCUMENT: FileType.DOCUMENT,
    ConversionKind.TEXT_EXTRACTION: FileType.TEXT,
    ConversionKind.SPEECH: FileType.AUDIO,
}
