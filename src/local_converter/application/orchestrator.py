"""Conversion orchestrator: select, validate, convert, persist, hand off."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from local_converter.application.results import (
    ConversionOutcome,
    ConversionResult,
    SourceFile,
)
from local_converter.backends.registry import BackendRegistry
from local_converter.errors import (
    BackendNotFoundError,
    ConversionInProgressError,
    ConverterError,
    SelectionError,
    StorageError,
)
from local_converter.schemas import HistoryDraft
from local_converter.storage.ledger import HistoryLedger
from local_converter.storage.settings import SettingsStore
from local_converter.storage.vault import ArtifactVault, format_file_size
from local_converter.types import (
    MAX_SELECTION_BYTES,
    ConversionKind,
    ConversionState,
)

logger = logging.getLogger(__name__)

type ProgressCallback = Callable[[float], None]

GENERIC_FAILURE = "The file could not be converted."

_INCOMPATIBLE_MESSAGES: dict[ConversionKind, str] = {
    ConversionKind.DOCUMENT: "To convert to a document, select a text file (.txt).",
    ConversionKind.TEXT_EXTRACTION: "To extract text, select an image (JPG, PNG, etc.).",
    ConversionKind.SPEECH: "To convert to speech, select a text file (.txt).",
}

_BUSY_STATES = frozenset({ConversionState.VALIDATING, ConversionState.CONVERTING})


def check_compatibility(source: SourceFile, kind: ConversionKind) -> str | None:
    """Return a message when ``source`` cannot feed ``kind``, else ``None``."""
    if kind is ConversionKind.TEXT_EXTRACTION:
        accepted = source.is_image_like()
    else:
        accepted = source.is_text_like()
    return None if accepted else _INCOMPATIBLE_MESSAGES[kind]


class ConversionOrchestrator:
    """Drive one conversion at a time through the state machine.

    ``Idle -> FileSelected -> TypeChosen -> Validating -> Converting ->
    Completed | Failed``. Selection problems raise ``SelectionError``;
    everything after ``convert()`` starts ends in a returned
    ``ConversionOutcome``. Only the orchestrator writes history and
    artifacts.
    """

    def __init__(
        self,
        settings: SettingsStore,
        ledger: HistoryLedger,
        vault: ArtifactVault,
        backends: BackendRegistry,
        *,
        max_selection_bytes: int = MAX_SELECTION_BYTES,
        progress: ProgressCallback | None = None,
    ) -> None:
        self._settings = settings
        self._ledger = ledger
        self._vault = vault
        self._backends = backends
        self._max_selection_bytes = max_selection_bytes
        self._progress = progress
        self._state = ConversionState.IDLE
        self._source: SourceFile | None = None
        self._kind: ConversionKind | None = None

    @property
    def state(self) -> ConversionState:
        return self._state

    @property
    def source(self) -> SourceFile | None:
        return self._source

    @property
    def kind(self) -> ConversionKind | None:
        return self._kind

    def _ensure_not_busy(self) -> None:
        if self._state in _BUSY_STATES:
            raise ConversionInProgressError("A conversion is already in progress.")

    def _report(self, fraction: float) -> None:
        if self._progress is None:
            return
        try:
            self._progress(fraction)
        except Exception:
            logger.exception("progress callback failed at %.0f%%", fraction * 100)

    def reset(self) -> None:
        """Forget the current selection and return to ``Idle``."""
        self._ensure_not_busy()
        self._source = None
        self._kind = None
        self._state = ConversionState.IDLE

    def select_file(self, source: SourceFile | None) -> None:
        """Select the file to convert.

        Raises
        ------
        SelectionError
            If no file is given or it exceeds the selection ceiling; the
            orchestrator is back in ``Idle``.
        ConversionInProgressError
            If a conversion is running.
        """
        self._ensure_not_busy()
        if source is None:
            self.reset()
            raise SelectionError("No file selected.")
        if source.size > self._max_selection_bytes:
            self.reset()
            raise SelectionError(
                f"File is too large ({format_file_size(source.size)}); "
                f"the maximum is {format_file_size(self._max_selection_bytes)}."
            )
        self._source = source
        self._kind = None
        self._state = ConversionState.FILE_SELECTED
        logger.info("file selected: %s (%s, %s)", source.name, source.mime_type, source.size)

    def choose_kind(self, kind: ConversionKind | str | None) -> None:
        """Choose what the selected file should become.

        Raises
        ------
        SelectionError
            If no file is selected, or ``kind`` is missing or unknown.
        ConversionInProgressError
            If a conversion is running.
        """
        self._ensure_not_busy()
        if self._source is None:
            raise SelectionError("Select a file before choosing a conversion kind.")
        if kind is None:
            raise SelectionError("No conversion kind chosen.")
        try:
            parsed = ConversionKind(kind)
        except ValueError as exc:
            choices = ", ".join(item.value for item in ConversionKind)
            raise SelectionError(
                f"Unknown conversion kind '{kind}'. Choose one of: {choices}."
            ) from exc
        self._kind = parsed
        self._state = ConversionState.TYPE_CHOSEN

    async def convert(self) -> ConversionOutcome:
        """Validate the selection, run the backend and persist the result.

        Returns
        -------
        ConversionOutcome
            ``Completed`` with the in-memory artifact and history id, or
            ``Failed`` with a user-facing message.

        Raises
        ------
        SelectionError
            If no file or no kind is selected.
        ConversionInProgressError
            If a conversion is already running.
        """
        self._ensure_not_busy()
        if self._source is None:
            raise SelectionError("No file selected.")
        if self._kind is None:
            raise SelectionError("No conversion kind chosen.")
        source, kind = self._source, self._kind

        self._state = ConversionState.VALIDATING
        try:
            return await self._execute(source, kind)
        except Exception:
            logger.exception("unexpected error while converting %s to %s", source.name, kind)
            return self._fail(GENERIC_FAILURE)

    async def _execute(self, source: SourceFile, kind: ConversionKind) -> ConversionOutcome:
        self._report(0.0)
        problem = check_compatibility(source, kind)
        if problem is not None:
            return self._fail(problem)
        try:
            backend = self._backends.get(kind)
        except BackendNotFoundError as exc:
            return self._fail(str(exc))
        settings = self._settings.get()

        self._state = ConversionState.CONVERTING
        self._report(0.3)
        try:
            result = await asyncio.to_thread(backend.convert, source, settings)
        except ConverterError as exc:
            logger.warning("%s conversion of %s failed: %s", kind, source.name, exc)
            return self._fail(str(exc) or GENERIC_FAILURE)
        except Exception:
            logger.exception("unexpected error during %s conversion of %s", kind, source.name)
            return self._fail(GENERIC_FAILURE)

        if not result.success or result.blob is None:
            return self._fail(result.error or GENERIC_FAILURE, result)

        self._report(0.8)
        entry_id, stored = await self._persist(source, result)
        self._state = ConversionState.COMPLETED
        self._report(1.0)
        return ConversionOutcome(
            state=ConversionState.COMPLETED,
            result=result,
            entry_id=entry_id,
            artifact_stored=stored,
        )

    async def run(self, source: SourceFile, kind: ConversionKind | str) -> ConversionOutcome:
        """Select ``source``, choose ``kind`` and convert in one call."""
        self.select_file(source)
        self.choose_kind(kind)
        return await self.convert()

    def _fail(self, message: str, result: ConversionResult | None = None) -> ConversionOutcome:
        self._state = ConversionState.FAILED
        logger.info("conversion failed: %s", message)
        return ConversionOutcome(state=ConversionState.FAILED, result=result, error=message)

    async def _persist(self, source: SourceFile, result: ConversionResult) -> tuple[str | None, bool]:
        draft = HistoryDraft(
            file_name=result.file_name,
            original_file_name=source.name,
            file_type=result.file_type,
            file_size=result.file_size,
        )
        try:
            entry = await asyncio.to_thread(self._ledger.append, draft)
        except StorageError as exc:
            logger.warning("history not updated for %s: %s", result.file_name, exc)
            return None, False
        if entry is None or result.blob is None:
            return None, False
        try:
            stored = await asyncio.to_thread(self._vault.put, entry.id, result.blob)
        except Exception:
            logger.exception("artifact %s could not be stored", entry.id)
            stored = False
        return entry.id, stored
