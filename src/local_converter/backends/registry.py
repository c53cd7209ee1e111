"""Backend registry keyed by conversion kind."""

from __future__ import annotations

from collections.abc import Mapping

from local_converter.application.ports import ConversionBackend
from local_converter.backends.builtins import (
    PdfDocumentBackend,
    Pyttsx3SpeechBackend,
    TesseractTextBackend,
)
from local_converter.errors import BackendNotFoundError
from local_converter.types import ConversionKind


class BackendRegistry:
    """One backend per conversion kind."""

    def __init__(self, backends: Mapping[ConversionKind, ConversionBackend] | None = None) -> None:
        self._backends: dict[ConversionKind, ConversionBackend] = {}
        for kind, backend in (backends or {}).items():
            self.register(kind, backend)

    def register(self, kind: ConversionKind, backend: ConversionBackend) -> None:
        """Register ``backend`` for ``kind``, replacing any previous one.

        Parameters
        ----------
        kind : ConversionKind
            Conversion kind served by the backend.
        backend : ConversionBackend
            Object exposing ``convert(source, settings)``.
        """
        self._backends[ConversionKind(kind)] = backend

    def kinds(self) -> list[ConversionKind]:
        """Return registered kinds in declaration order."""
        return [kind for kind in ConversionKind if kind in self._backends]

    def get(self, kind: ConversionKind) -> ConversionBackend:
        """Return the backend for ``kind``.

        Raises
        ------
        BackendNotFoundError
            If no backend is registered for ``kind``.
        """
        try:
            return self._backends[kind]
        except KeyError as exc:
            available = ", ".join(str(item) for item in self.kinds()) or "none"
            raise BackendNotFoundError(
                f"No backend registered for '{kind}'. Available: {available}"
            ) from exc

    def __contains__(self, kind: object) -> bool:
        return kind in self._backends


def create_default_registry() -> BackendRegistry:
    """Create a registry holding the built-in backends."""
    return BackendRegistry(
        {
            ConversionKind.DOCUMENT: PdfDocumentBackend(),
            ConversionKind.TEXT_EXTRACTION: TesseractTextBackend(),
            ConversionKind.SPEECH: Pyttsx3SpeechBackend(),
        }
    )
