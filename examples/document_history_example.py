#!/usr/bin/env python3
"""Convert a text file to PDF, then browse and re-export it from history.

Needs the document extra:

    uv pip install -e ".[document]"
"""

from __future__ import annotations

import tempfile
from pathlib import Path

from local_converter.api import convert_path, export_artifact
from local_converter.application.context import open_context
from local_converter.config import AppConfig
from local_converter.storage.vault import format_file_size


def main() -> None:
    """Run a conversion against a throwaway data directory."""
    with tempfile.TemporaryDirectory() as tmp:
        workdir = Path(tmp)
        context = open_context(AppConfig(data_dir=workdir / "data"))
        context.settings.set(
            context.settings.get().updated({"pageSize": "Letter", "fontSize": 14})
        )

        source = workdir / "letter.txt"
        source.write_text("Dear reader,\n\nThis page was rendered on this machine.\n", encoding="utf-8")

        outcome = convert_path(
            source,
            "document",
            context=context,
            progress=lambda fraction: print(f"progress: {fraction:.0%}"),
        )
        if not outcome.succeeded or outcome.entry_id is None:
            raise SystemExit(f"FAIL: {outcome.error}")

        for entry in context.ledger.list():
            print(f"{entry.id}  {entry.file_name}  {format_file_size(entry.file_size)}")

        exported = export_artifact(outcome.entry_id, workdir, context=context)
        print(f"Re-exported {exported.name}: {exported.read_bytes()[:8]!r}")

        context.ledger.remove(outcome.entry_id)
        print(f"Artifact kept after delete: {context.vault.exists(outcome.entry_id)}")


if __name__ == "__main__":
    main()
