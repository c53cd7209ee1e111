"""Application-layer orchestration and result objects."""

from __future__ import annotations

from typing import TYPE_CHECKING

from local_converter.application.results import (
    ConversionOutcome,
    ConversionResult,
    SourceFile,
)
from local_converter.config import AppConfig
from local_converter.types import ConversionKind

if TYPE_CHECKING:
    from local_converter.application.context import AppContext


def open_context(config: AppConfig | None = None) -> AppContext:
    """Open the application context via lazy import."""
    from local_converter.application.context import open_context as _impl

    return _impl(config)


async def convert_source(
    context: AppContext,
    source: SourceFile,
    kind: ConversionKind | str,
) -> ConversionOutcome:
    """Run one conversion on a fresh orchestrator from ``context``."""
    return await context.orchestrator().run(source, kind)


__all__ = [
    "ConversionOutcome",
    "ConversionResult",
    "SourceFile",
    "open_context",
    "convert_source",
]
