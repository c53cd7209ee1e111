"""On-device file conversion with local history."""

from __future__ import annotations

from pathlib import Path

from local_converter.application.results import ConversionOutcome
from local_converter.types import ConversionKind

__version__ = "0.1.0"


def convert_file(path: Path, kind: ConversionKind | str) -> ConversionOutcome:
    """Convert a local file into a document, extracted text or speech.

    Parameters
    ----------
    path : Path
        File to convert. Text files feed ``document`` and ``speech``; images
        feed ``text-extraction``.
    kind : ConversionKind | str
        Target conversion kind.

    Returns
    -------
    ConversionOutcome
        Completed outcome with the produced bytes in ``result.blob`` and the
        history id, or a failed outcome with ``error`` set.

    Raises
    ------
    SelectionError
        If the file is missing, is not a regular file, is larger than 10 MB,
        or the kind is unknown.
    """
    from local_converter.api import convert_path as _impl

    return _impl(Path(path), kind)


__all__ = ["ConversionKind", "ConversionOutcome", "convert_file"]
