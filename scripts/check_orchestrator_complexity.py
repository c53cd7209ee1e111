#!/usr/bin/env python3
"""Statement-count guard for the conversion orchestrator methods."""

from __future__ import annotations

import ast
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
TARGET = ROOT / "src/local_converter/application/orchestrator.py"
MAX_STATEMENTS = 40

_FUNCTIONS = (ast.FunctionDef, ast.AsyncFunctionDef)


def _statement_count(node: ast.AST) -> int:
    return sum(isinstance(child, ast.stmt) for child in ast.walk(node)) - 1


def main() -> None:
    """Fail when an orchestrator function or method grows past the threshold."""
    tree = ast.parse(TARGET.read_text(encoding="utf-8"))
    violations: list[str] = []
    for node in ast.walk(tree):
        if isinstance(node, _FUNCTIONS):
            count = _statement_count(node)
            if count > MAX_STATEMENTS:
                violations.append(f"{node.name}: {count} statements")
    if violations:
        raise SystemExit(
            "Orchestrator complexity threshold exceeded:\n"
            + "\n".join(f"- {item}" for item in violations)
        )
    print("Orchestrator complexity check passed.")


if __name__ == "__main__":
    main()
