#!/usr/bin/env python3
"""Layer boundary checks for local_converter."""

from __future__ import annotations

from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
PACKAGE = ROOT / "src/local_converter"

ENGINE_IMPORTS = [
    "import fpdf",
    "from fpdf",
    "import pytesseract",
    "from PIL",
    "import PIL",
    "import pyttsx3",
]

# Each layer and the imports it must never contain.
RULES: dict[str, list[str]] = {
    "application": ["import typer", "from typer", *ENGINE_IMPORTS],
    "storage": [
        "import typer",
        "from typer",
        "local_converter.backends",
        "local_converter.application.orchestrator",
        *ENGINE_IMPORTS,
    ],
    "backends": ["import typer", "from typer", "local_converter.storage", "local_converter.application.context"],
    "infrastructure": ["import typer", "local_converter.storage", "local_converter.backends"],
    "cli": ENGINE_IMPORTS,
}


def _violations(path: Path, banned: list[str]) -> list[str]:
    text = path.read_text(encoding="utf-8")
    return [f"{path.relative_to(ROOT)}: found '{token}'" for token in banned if token in text]


def main() -> None:
    """Fail when a module imports across a forbidden layer boundary."""
    found: list[str] = []
    for layer, banned in RULES.items():
        for path in sorted((PACKAGE / layer).glob("*.py")):
            found.extend(_violations(path, banned))
    if found:
        raise SystemExit("Architecture violations:\n" + "\n".join(f"- {item}" for item in found))
    print("Architecture checks passed.")


if __name__ == "__main__":
    main()
