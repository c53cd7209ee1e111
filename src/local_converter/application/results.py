"""Application-layer input and result objects."""

from __future__ import annotations

import mimetypes
import stat
from dataclasses import dataclass, field
from pathlib import Path

from local_converter.errors import SelectionError
from local_converter.types import MAX_SELECTION_BYTES, ConversionState, FileType

DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class SourceFile:
    """A file selected for conversion, held in memory."""

    name: str
    mime_type: str
    data: bytes = field(repr=False)

    @classmethod
    def from_path(cls, path: Path, max_bytes: int = MAX_SELECTION_BYTES) -> SourceFile:
        """Read ``path`` and guess its mime type from the file name.

        Raises
        ------
        SelectionError
            If ``path`` is missing, is not a regular file, cannot be read, or
            is larger than ``max_bytes``. The size is checked before reading.
        """
        from local_converter.storage.vault import format_file_size

        path = Path(path)
        try:
            info = path.stat()
        except FileNotFoundError as exc:
            raise SelectionError(f"File not found: {path}. Check the path and try again.") from exc
        except OSError as exc:
            raise SelectionError(f"Cannot access {path}: {exc.strerror or exc}") from exc
        if not stat.S_ISREG(info.st_mode):
            raise SelectionError(f"{path} is not a regular file. Select a file to convert.")
        if info.st_size > max_bytes:
            raise SelectionError(
                f"File is too large ({format_file_size(info.st_size)}); "
                f"the maximum is {format_file_size(max_bytes)}."
            )
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise SelectionError(f"Cannot read {path}: {exc.strerror or exc}") from exc
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(name=path.name, mime_type=mime_type or DEFAULT_MIME_TYPE, data=data)

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def stem(self) -> str:
        """File name without its last extension."""
        stem = Path(self.name).stem
        return stem or self.name or "file"

    def is_text_like(self) -> bool:
        return "text" in self.mime_type.lower() or self.name.lower().endswith(".txt")

    def is_image_like(self) -> bool:
        return self.mime_type.lower().startswith("image/")


@dataclass(frozen=True)
class ConversionResult:
    """What a backend produced for one conversion."""

    success: bool
    file_name: str
    file_type: FileType
    file_size: int
    blob: bytes | None = field(default=None, repr=False)
    error: str | None = None

    @classmethod
    def ok(cls, file_name: str, file_type: FileType, blob: bytes) -> ConversionResult:
        return cls(
            success=True,
            file_name=file_name,
            file_type=file_type,
            file_size=len(blob),
            blob=blob,
        )

    @classmethod
    def failed(cls, file_name: str, file_type: FileType, error: str) -> ConversionResult:
        return cls(
            success=False,
            file_name=file_name,
            file_type=file_type,
            file_size=0,
            error=error,
        )


@dataclass(frozen=True)
class ConversionOutcome:
    """One-shot handoff from the orchestrator to presentation.

    ``result.blob`` is the in-memory artifact; it is returned even when the
    vault declined to keep a copy (``artifact_stored`` is then ``False``).
    ``entry_id`` is ``None`` when history saving is disabled.
    """

    state: ConversionState
    result: ConversionResult | None = None
    entry_id: str | None = None
    error: str | None = None
    artifact_stored: bool = False

    @property
    def succeeded(self) -> bool:
        return self.state is ConversionState.COMPLETED
