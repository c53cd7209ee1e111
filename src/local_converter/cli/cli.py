#!/usr/bin/env python3
"""
local_converter.cli.cli

Typer-based CLI for on-device file conversion and local history.

Engines are optional extras; install only the ones you need.

Examples
--------
Install core + CLI + document support:

    uv pip install -e ".[cli,document]"

Install everything:

    uv pip install -e ".[cli,document,ocr,speech]"
"""

from __future__ import annotations

import asyncio
import importlib
import logging
import sys
import traceback
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError

from local_converter.application.context import AppContext, open_context
from local_converter.application.results import SourceFile
from local_converter.config import AppConfig
from local_converter.errors import ConverterError
from local_converter.storage.vault import format_file_size
from local_converter.types import ConversionKind, FileType

app = typer.Typer(
    name="local-converter",
    help="Convert text to PDF, images to text and text to speech, on this device.",
    no_args_is_help=True,
)
history_app = typer.Typer(help="Browse, export and delete past conversions.", no_args_is_help=True)
settings_app = typer.Typer(help="Show and change conversion settings.", no_args_is_help=True)
app.add_typer(history_app, name="history")
app.add_typer(settings_app, name="settings")

ENGINE_DISTRIBUTIONS = ["fpdf2", "pytesseract", "Pillow", "pyttsx3"]


def _print_error(exc: Exception, debug: bool) -> int:
    """Print a user-friendly error and return the process exit code."""
    typer.secho(f"✗ {type(exc).__name__}: {exc}", fg=typer.colors.RED, err=True)
    if debug:
        typer.echo("\nTraceback:", err=True)
        typer.echo("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), err=True)
    code = getattr(exc, "exit_code", None)
    if isinstance(code, int) and code > 0:
        return code
    return 1


def _parse_assignments(items: list[str] | None) -> dict[str, str]:
    """Parse repeated KEY=VALUE entries."""
    parsed: dict[str, str] = {}
    for item in items or []:
        if "=" not in item:
            raise typer.BadParameter(f"Invalid entry '{item}'. Use KEY=VALUE format.")
        key, value = item.split("=", 1)
        key = key.strip()
        if not key:
            raise typer.BadParameter("Setting name cannot be empty.")
        parsed[key] = value.strip()
    return parsed


def _context(ctx: typer.Context) -> AppContext:
    """Return the shared application context, opening it on first use."""
    state: dict[str, Any] = ctx.obj
    if state.get("context") is None:
        state["context"] = open_context(AppConfig.from_env())
    return state["context"]


def _debug(ctx: typer.Context) -> bool:
    return bool(ctx.obj.get("debug", False))


# -----------------------------
# Global options
# -----------------------------
@app.callback()
def _main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Show full tracebacks on error."),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Logging level (default: LOCAL_CONVERTER_LOG_LEVEL or WARNING).",
    ),
) -> None:
    """Initialize shared CLI state and logging."""
    level_name = (log_level or AppConfig.from_env().log_level).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise typer.BadParameter(f"Unknown log level '{level_name}'.")
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = {"debug": debug, "context": None}


# -----------------------------
# Conversion
# -----------------------------
@app.command("convert")
def convert_cmd(
    ctx: typer.Context,
    file_path: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="File to convert (.txt for document/speech, an image for text-extraction).",
    ),
    kind: ConversionKind = typer.Argument(..., help="Conversion kind."),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Where to write the result (default: next to the input).",
    ),
) -> None:
    """Convert a file and record it in history."""
    debug = _debug(ctx)
    context = _context(ctx)
    orchestrator = context.orchestrator()
    try:
        outcome = asyncio.run(orchestrator.run(SourceFile.from_path(file_path), kind))
    except ConverterError as exc:
        raise typer.Exit(code=_print_error(exc, debug))

    if not outcome.succeeded or outcome.result is None or outcome.result.blob is None:
        typer.secho(f"✗ Conversion failed: {outcome.error}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    result = outcome.result
    target = output or file_path.with_name(result.file_name)
    if target.is_dir():
        target = target / result.file_name
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(result.blob)
    except OSError as exc:
        raise typer.Exit(code=_print_error(exc, debug))
    typer.secho(f"✓ Saved: {target} ({format_file_size(result.file_size)})", fg=typer.colors.GREEN)
    if outcome.entry_id is None:
        typer.echo("History is disabled; nothing recorded.")
    elif outcome.artifact_stored:
        typer.echo(f"History id: {outcome.entry_id} (kept for re-download)")
    else:
        typer.echo(f"History id: {outcome.entry_id} (too large to keep for re-download)")


# -----------------------------
# History
# -----------------------------
@history_app.command("list")
def history_list_cmd(
    ctx: typer.Context,
    file_type: FileType | None = typer.Option(None, "--type", help="Only show this output type."),
) -> None:
    """List past conversions, newest first."""
    context = _context(ctx)
    entries = context.ledger.filter_by_type(file_type) if file_type else context.ledger.list()
    if not entries:
        typer.echo("No conversions recorded.")
        return
    for entry in entries:
        kept = "saved" if context.vault.exists(entry.id) else "-"
        typer.echo(
            f"{entry.id}  {entry.created_at:%Y-%m-%d %H:%M}  {entry.file_type.value:<3}  "
            f"{format_file_size(entry.file_size):>10}  {kept:<5}  {entry.file_name}"
        )


@history_app.command("export")
def history_export_cmd(
    ctx: typer.Context,
    entry_id: str = typer.Argument(..., help="History entry id."),
    destination: Path = typer.Argument(..., help="File or directory to write to."),
) -> None:
    """Write a stored conversion result back to disk."""
    from local_converter.api import export_artifact

    try:
        written = export_artifact(entry_id, destination, context=_context(ctx))
    except LookupError as exc:
        typer.secho(f"✗ {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    typer.secho(f"✓ Saved: {written}", fg=typer.colors.GREEN)


@history_app.command("delete")
def history_delete_cmd(
    ctx: typer.Context,
    entry_id: str = typer.Argument(..., help="History entry id."),
) -> None:
    """Delete a history entry and its stored file."""
    context = _context(ctx)
    try:
        context.ledger.remove(entry_id)
    except ConverterError as exc:
        raise typer.Exit(code=_print_error(exc, _debug(ctx)))
    typer.echo(f"Deleted {entry_id}.")


@history_app.command("clear")
def history_clear_cmd(
    ctx: typer.Context,
    artifacts: bool = typer.Option(
        False, "--artifacts", help="Also delete every stored result file."
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Remove all history entries."""
    if not yes:
        typer.confirm("Delete ALL history entries? This cannot be undone.", abort=True)
    context = _context(ctx)
    try:
        context.ledger.clear()
        removed = context.vault.clear() if artifacts else 0
    except ConverterError as exc:
        raise typer.Exit(code=_print_error(exc, _debug(ctx)))
    typer.echo("History cleared.")
    if artifacts:
        typer.echo(f"Removed {removed} stored files.")


# -----------------------------
# Settings
# -----------------------------
@settings_app.command("show")
def settings_show_cmd(ctx: typer.Context) -> None:
    """Print current settings."""
    settings = _context(ctx).settings.get()
    for key, value in settings.model_dump(by_alias=True).items():
        typer.echo(f"{key} = {value}")


@settings_app.command("set")
def settings_set_cmd(
    ctx: typer.Context,
    assignments: list[str] = typer.Argument(..., help="Settings as KEY=VALUE (e.g. speechRate=1.2)."),
) -> None:
    """Change one or more settings."""
    context = _context(ctx)
    changes = _parse_assignments(assignments)
    try:
        updated = context.settings.get().updated(changes)
    except (ValidationError, ValueError) as exc:
        raise typer.BadParameter(str(exc)) from exc
    try:
        context.settings.set(updated)
    except ConverterError as exc:
        raise typer.Exit(code=_print_error(exc, _debug(ctx)))
    typer.secho("✓ Settings saved.", fg=typer.colors.GREEN)


@settings_app.command("reset")
def settings_reset_cmd(ctx: typer.Context) -> None:
    """Restore default settings."""
    try:
        _context(ctx).settings.reset()
    except ConverterError as exc:
        raise typer.Exit(code=_print_error(exc, _debug(ctx)))
    typer.echo("Settings reset to defaults.")


# -----------------------------
# Diagnostics
# -----------------------------
@app.command("storage")
def storage_cmd(ctx: typer.Context) -> None:
    """Summarize local storage usage."""
    context = _context(ctx)
    typer.echo(f"History entries: {context.ledger.count()} (max {context.ledger.capacity})")
    typer.echo(f"Stored files: {len(context.vault.ids())}")
    typer.echo(f"Space used: {format_file_size(context.store.size_bytes())}")


@app.command("doctor")
def doctor_cmd(ctx: typer.Context) -> None:
    """Print installed engine versions and registered backends."""
    import importlib.metadata as metadata

    typer.echo(f"Python: {sys.version.split()[0]}")
    for distribution in ENGINE_DISTRIBUTIONS:
        try:
            typer.echo(f"{distribution}: {metadata.version(distribution)}")
        except metadata.PackageNotFoundError:
            typer.echo(f"{distribution}: <not installed>")

    try:
        tesseract = importlib.import_module("pytesseract")
        typer.echo(f"tesseract: {tesseract.get_tesseract_version()}")
    except Exception:
        typer.echo("tesseract: <unavailable>")

    kinds = _context(ctx).backends.kinds()
    typer.echo(f"backends: {', '.join(kind.value for kind in kinds) or '<none>'}")


if __name__ == "__main__":
    app()
