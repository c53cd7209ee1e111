"""Pydantic schemas for persisted settings and history records."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from local_converter.types import (
    EntryStatus,
    FileType,
    OcrLanguage,
    Orientation,
    PageSize,
    VoiceGender,
)


class AppSettings(BaseModel):
    """User-configurable conversion parameters.

    Serialized with camelCase keys (``speechRate``, ``marginMm``...). Field
    types are checked; ranges are not.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    voice: VoiceGender = "male"
    speech_rate: float = Field(default=1.0, alias="speechRate")
    ocr_language: OcrLanguage = Field(default="por", alias="ocrLanguage")
    ocr_precise: bool = Field(default=True, alias="ocrPrecise")
    page_size: PageSize = Field(default="A4", alias="pageSize")
    orientation: Orientation = "portrait"
    margin_mm: float = Field(default=20, alias="marginMm")
    font_size: float = Field(default=12, alias="fontSize")
    save_history: bool = Field(default=True, alias="saveHistory")

    def updated(self, changes: Mapping[str, object]) -> AppSettings:
        """Return a full copy with ``changes`` applied and re-validated.

        Keys may use either the attribute name or the serialized alias.

        Raises
        ------
        ValueError
            If a key is unknown.
        pydantic.ValidationError
            If a value does not fit the field type.
        """
        aliases = _settings_aliases()
        payload = self.model_dump(by_alias=True)
        for key, value in changes.items():
            alias = aliases.get(key)
            if alias is None:
                raise ValueError(
                    f"Unknown setting '{key}'. Known settings: {', '.join(sorted(payload))}"
                )
            payload[alias] = value
        return AppSettings.model_validate(payload)


def _settings_aliases() -> dict[str, str]:
    aliases: dict[str, str] = {}
    for name, field in AppSettings.model_fields.items():
        alias = field.alias or name
        aliases[name] = alias
        aliases[alias] = alias
    return aliases


class HistoryDraft(BaseModel):
    """History metadata before the ledger assigns an id and timestamp."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    file_name: str = Field(alias="fileName")
    original_file_name: str = Field(alias="originalFileName")
    file_type: FileType = Field(alias="fileType")
    file_size: int = Field(ge=0, alias="fileSize")
    status: EntryStatus = "success"


class HistoryEntry(BaseModel):
    """One persisted conversion record."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    id: str
    file_name: str = Field(alias="fileName")
    original_file_name: str = Field(alias="originalFileName")
    file_type: FileType = Field(alias="fileType")
    file_size: int = Field(ge=0, alias="fileSize")
    created_at: datetime = Field(alias="date")
    status: EntryStatus = "success"


HISTORY_ADAPTER: TypeAdapter[list[HistoryEntry]] = TypeAdapter(list[HistoryEntry])
