"""Public file-based conversion API (delegates to the orchestrator)."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

from local_converter.application.context import AppContext, open_context
from local_converter.application.orchestrator import ProgressCallback
from local_converter.application.results import ConversionOutcome, SourceFile
from local_converter.types import ConversionKind


def convert_path(
    path: Path,
    kind: ConversionKind | str,
    *,
    context: Optional[AppContext] = None,
    progress: Optional[ProgressCallback] = None,
) -> ConversionOutcome:
    """Convert the file at ``path`` and record it in local history."""
    context = context or open_context()
    source = SourceFile.from_path(path)
    orchestrator = context.orchestrator(progress=progress)
    return asyncio.run(orchestrator.run(source, kind))


def export_artifact(entry_id: str, destination: Path, *, context: Optional[AppContext] = None) -> Path:
    """Write a stored artifact to ``destination`` and return the written path.

    A directory destination receives the file under its recorded name.

    Raises
    ------
    LookupError
        If no artifact is stored for ``entry_id``.
    """
    context = context or open_context()
    blob = context.vault.get(entry_id)
    if blob is None:
        raise LookupError(f"No stored file for history entry '{entry_id}'.")
    if destination.is_dir():
        entry = context.ledger.get(entry_id)
        destination = destination / (entry.file_name if entry else entry_id)
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(blob)
    return destination
