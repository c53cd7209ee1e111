#!/usr/bin/env python3
"""Generate or verify requirements.txt from pyproject.toml extras.

    uv run python scripts/sync_requirements.py          # rewrite
    uv run python scripts/sync_requirements.py --check  # fail when stale
"""

from __future__ import annotations

import sys
import tomllib
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
REQUIREMENTS = ROOT / "requirements.txt"
# Everything a full install needs; test tooling stays in the `test` extra.
SYNC_EXTRAS = ("cli", "document", "ocr", "speech")


def _expected() -> list[str]:
    project = tomllib.loads((ROOT / "pyproject.toml").read_text(encoding="utf-8"))["project"]
    deps = set(project.get("dependencies", []))
    optional = project.get("optional-dependencies", {})
    for extra in SYNC_EXTRAS:
        deps.update(optional.get(extra, []))
    return sorted(dep.strip() for dep in deps if dep.strip())


def _current() -> set[str]:
    if not REQUIREMENTS.exists():
        return set()
    lines = REQUIREMENTS.read_text(encoding="utf-8").splitlines()
    return {line.split("#", 1)[0].strip() for line in lines} - {""}


def _write(reqs: list[str]) -> None:
    header = [
        f"# Generated from pyproject.toml (base + extras: {','.join(SYNC_EXTRAS)})",
        "# Do not edit manually; run: uv run python scripts/sync_requirements.py",
        "",
    ]
    REQUIREMENTS.write_text("\n".join(header + reqs) + "\n", encoding="utf-8")
    print(f"Wrote {len(reqs)} requirements to {REQUIREMENTS.name}")


def _check(reqs: list[str]) -> None:
    expected, actual = set(reqs), _current()
    if expected == actual:
        print("Dependency sync check passed.")
        return
    parts = [
        "requirements.txt is out of sync with pyproject.toml.",
        "Run: uv run python scripts/sync_requirements.py",
    ]
    parts.extend(f"- missing: {entry}" for entry in sorted(expected - actual))
    parts.extend(f"- unexpected: {entry}" for entry in sorted(actual - expected))
    raise SystemExit("\n".join(parts))


def main(argv: list[str]) -> None:
    """Rewrite requirements.txt, or verify it with ``--check``."""
    reqs = _expected()
    if "--check" in argv:
        _check(reqs)
    else:
        _write(reqs)


if __name__ == "__main__":
    main(sys.argv[1:])
