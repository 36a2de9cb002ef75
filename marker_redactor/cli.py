from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import NoReturn

import typer
from pydantic import ValidationError

from .app import load_store
from .app import run as app_run
from .config import Settings
from .errors import ConfigurationValueError, ErrorCategory
from .handlers.commands import (
    COMMAND_NAMES,
    MSG_NO_ACTIVE_FILE,
    REDACT_AND_EXTRACT,
    TOGGLE_REDACTION_MARKER,
    CommandContext,
    Notice,
)
from .logging import configure_logging
from .output import FileSystemSink
from .redaction import Position, extract
from .state.buffer import StringBuffer

app = typer.Typer(help="Mask marker-delimited spans of sensitive text")

config_app = typer.Typer(help="Show and edit redaction settings")
app.add_typer(config_app, name="config")

logger = logging.getLogger(__name__)

MSG_READ_FAILED = "Failed to read the document. See the logs for details."
MSG_SAVE_FAILED = "Failed to save the document. See the logs for details."


@app.callback()
def main(
    log_level: str | None = typer.Option(None, help="Logging level (defaults to LOG_LEVEL)"),
) -> None:
    configure_logging(log_level.upper() if log_level else None)


def _settings(**overrides: object) -> Settings:
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise typer.BadParameter(str(e)) from e


def _fail(message: str) -> NoReturn:
    typer.echo(message, err=True)
    raise typer.Exit(code=1)


def _open_document(document: Path, root: Path) -> tuple[StringBuffer | None, str | None]:
    """Read ``document`` into a buffer and work out its path relative to ``root``.

    The text is decoded without newline translation so ``\\r\\n`` survives.
    """
    doc = document.expanduser().resolve()
    if not doc.is_file():
        return None, None
    try:
        text = doc.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError):
        logger.error(
            "document_read_failed",
            exc_info=True,
            extra={"document": str(doc), "error_category": ErrorCategory.IO.value},
        )
        _fail(MSG_READ_FAILED)
    try:
        rel = doc.relative_to(root).as_posix()
    except ValueError:
        rel = doc.name
    return StringBuffer(text), rel


def _save_document(document: Path, text: str) -> None:
    doc = document.expanduser().resolve()
    try:
        doc.write_text(text, encoding="utf-8", newline="")
    except OSError:
        logger.error(
            "document_write_failed",
            exc_info=True,
            extra={"document": str(doc), "error_category": ErrorCategory.IO.value},
        )
        _fail(MSG_SAVE_FAILED)


def _emit(notice: Notice | None) -> None:
    if notice is None:
        return
    if notice.is_error:
        _fail(notice.message)
    typer.echo(notice.message)


@app.command()
def redact(
    document: Path = typer.Argument(..., help="Document to redact"),
    root: Path | None = typer.Option(
        None, help="Folder the document path is taken relative to (defaults to cwd)"
    ),
    output_path: str | None = typer.Option(None, help="Output folder for this run only"),
    layout: str | None = typer.Option(None, help="Output layout: mirror or flat"),
    verbose: bool = typer.Option(False, help="Print effective settings"),
) -> None:
    """Redact and Extract: write a masked copy of DOCUMENT to the output folder."""
    overrides: dict[str, object] = {}
    if layout is not None:
        overrides["output_layout"] = layout
    settings = _settings(**overrides)
    config = load_store(settings).config
    if output_path is not None:
        config = config.model_copy(update={"output_path": output_path})
    if verbose:
        typer.echo(settings.model_dump_json(indent=2))
        typer.echo(config.model_dump_json(indent=2, by_alias=True))

    base_dir = (root or Path.cwd()).expanduser().resolve()
    buffer, rel = _open_document(document, base_dir)
    ctx = CommandContext(
        config=config,
        buffer=buffer,
        document_path=rel,
        sink=FileSystemSink(),
        layout=settings.output_layout,
        base_dir=base_dir,
        source_path=document.expanduser().resolve(),
    )
    _emit(asyncio.run(app_run(REDACT_AND_EXTRACT, ctx)))


@app.command()
def preview(
    document: Path = typer.Argument(..., help="Document to redact"),
    marker: str | None = typer.Option(None, help="Marker override"),
    symbol: str | None = typer.Option(None, help="Mask symbol override"),
) -> None:
    """Print the redacted text of DOCUMENT without writing anything."""
    config = load_store(_settings()).config
    buffer, _ = _open_document(document, Path.cwd())
    if buffer is None:
        _fail(MSG_NO_ACTIVE_FILE)
    typer.echo(
        extract(buffer.get_value(), marker or config.marker, symbol or config.mask_symbol),
        nl=False,
    )


@app.command()
def toggle(
    document: Path = typer.Argument(..., help="Document to edit"),
    line: int = typer.Option(..., help="Cursor (or selection start) line, zero-based"),
    ch: int = typer.Option(..., help="Cursor (or selection start) column, zero-based"),
    end_line: int | None = typer.Option(None, help="Selection end line"),
    end_ch: int | None = typer.Option(None, help="Selection end column"),
    in_place: bool = typer.Option(False, help="Rewrite DOCUMENT instead of printing it"),
) -> None:
    """Toggle Redaction Marker: wrap a selection or insert a marker at the cursor."""
    config = load_store(_settings()).config
    base_dir = Path.cwd().resolve()
    buffer, rel = _open_document(document, base_dir)
    if buffer is not None:
        try:
            if end_line is not None and end_ch is not None:
                buffer.select(Position(line, ch), Position(end_line, end_ch))
            else:
                buffer.set_cursor(Position(line, ch))
        except ValueError as e:
            raise typer.BadParameter(str(e)) from e

    ctx = CommandContext(config=config, buffer=buffer, document_path=rel)
    _emit(asyncio.run(app_run(TOGGLE_REDACTION_MARKER, ctx)))
    if buffer is None:
        return

    cursor = buffer.get_cursor()
    if in_place:
        _save_document(document, buffer.get_value())
        typer.echo(f"Cursor at {cursor.line}:{cursor.ch}")
    else:
        typer.echo(buffer.get_value(), nl=False)
        typer.echo(f"Cursor at {cursor.line}:{cursor.ch}", err=True)


@app.command("commands")
def list_commands() -> None:
    """Print the available commands."""
    config = load_store(_settings()).config
    for command_id, name in COMMAND_NAMES.items():
        suffix = f" [{config.shortcut_label}]" if command_id == TOGGLE_REDACTION_MARKER else ""
        typer.echo(f"{command_id}: {name}{suffix}")


@config_app.command("show")
def config_show() -> None:
    """Print the current settings as JSON."""
    config = load_store(_settings()).config
    typer.echo(json.dumps(config.to_persisted(), indent=2, ensure_ascii=False))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Setting name, e.g. maskSymbol or mask_symbol"),
    value: str = typer.Argument(..., help="New value"),
) -> None:
    """Change one setting and save it immediately."""
    store = load_store(_settings())
    try:
        config = store.update(**{key: value})
    except ConfigurationValueError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1) from e
    except OSError as e:
        logger.error(
            "settings_save_failed",
            exc_info=True,
            extra={"error_category": ErrorCategory.IO.value},
        )
        typer.echo("Failed to save settings. See the logs for details.", err=True)
        raise typer.Exit(code=1) from e
    typer.echo(json.dumps(config.to_persisted(), indent=2, ensure_ascii=False))


@config_app.command("reset")
def config_reset() -> None:
    """Restore the default settings."""
    config = load_store(_settings()).reset()
    typer.echo(json.dumps(config.to_persisted(), indent=2, ensure_ascii=False))


if __name__ == "__main__":  # pragma: no cover
    app()
