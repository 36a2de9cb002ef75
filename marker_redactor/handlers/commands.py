"""Command handlers for "Redact and Extract" and "Toggle Redaction Marker".

Handlers never raise: known failures are logged and turned into a
:class:`Notice` for the user.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from ..config import OutputLayout, RedactorConfig
from ..errors import (
    ConfigurationMissingError,
    NoActiveDocumentError,
    OutputConflictError,
    OutputWriteError,
)
from ..metrics import extract_ms, spans_masked_total, write_failures_total
from ..output import FileSystemSink, WriteSink, resolve_output_path
from ..redaction import Redactor, toggle
from ..state.buffer import TextBuffer, apply_edit

logger = logging.getLogger(__name__)

REDACT_AND_EXTRACT = "redact-and-extract"
TOGGLE_REDACTION_MARKER = "toggle-redaction-marker"

COMMAND_NAMES = {
    REDACT_AND_EXTRACT: "Redact and Extract",
    TOGGLE_REDACTION_MARKER: "Toggle Redaction Marker",
}

MSG_SET_OUTPUT_PATH = "Please set the redacted output path in the settings."
MSG_NO_ACTIVE_FILE = "No active file found."
MSG_WRITE_FAILED = "Failed to write the redacted file. See the logs for details."
MSG_OVERWRITES_SOURCE = "The output path points at the document itself; choose another folder."


@dataclass
class Notice:
    message: str
    level: Literal["info", "error"] = "info"

    @property
    def is_error(self) -> bool:
        return self.level == "error"


@dataclass
class CommandContext:
    """Everything a command needs from its host."""

    config: RedactorConfig
    buffer: TextBuffer | None = None
    document_path: str | None = None
    sink: WriteSink = field(default_factory=FileSystemSink)
    layout: OutputLayout = "mirror"
    base_dir: Path | None = None
    source_path: Path | None = None


async def _extract_to_sink(ctx: CommandContext) -> Path:
    config = ctx.config
    if not config.output_path.strip():
        raise ConfigurationMissingError("output path is not set")
    if ctx.buffer is None or not ctx.document_path:
        raise NoActiveDocumentError("no active document")

    target = resolve_output_path(config.output_path, ctx.document_path, ctx.layout, ctx.base_dir)
    if ctx.source_path is not None and target.resolve() == Path(ctx.source_path).resolve():
        raise OutputConflictError(f"output would overwrite {ctx.source_path}")

    text = ctx.buffer.get_value()
    redactor = Redactor.from_config(config)
    with extract_ms.time():
        redacted, spans = redactor.redact_with_count(text)
    spans_masked_total.inc(spans)

    logger.info(
        "redaction_extracted",
        extra={
            "command": REDACT_AND_EXTRACT,
            "document": ctx.document_path,
            "text_length": len(text),
            "spans": spans,
        },
    )
    try:
        await ctx.sink.ensure_dir(target.parent)
        await ctx.sink.write(target, redacted)
    except OSError as e:
        raise OutputWriteError(str(target)) from e
    return target


async def handle_redact_and_extract(ctx: CommandContext) -> Notice:
    """Write a redacted copy of the active document to the output folder."""

    try:
        target = await _extract_to_sink(ctx)
    except ConfigurationMissingError as e:
        logger.warning(
            "output_path_missing",
            extra={"command": REDACT_AND_EXTRACT, "error_category": e.category.value},
        )
        return Notice(MSG_SET_OUTPUT_PATH, level="error")
    except NoActiveDocumentError as e:
        logger.warning(
            "no_active_document",
            extra={"command": REDACT_AND_EXTRACT, "error_category": e.category.value},
        )
        return Notice(MSG_NO_ACTIVE_FILE, level="error")
    except OutputConflictError as e:
        logger.warning(
            "output_overwrites_source",
            extra={
                "command": REDACT_AND_EXTRACT,
                "document": ctx.document_path,
                "error_category": e.category.value,
            },
        )
        return Notice(MSG_OVERWRITES_SOURCE, level="error")
    except OutputWriteError as e:
        write_failures_total.inc()
        logger.error(
            "output_write_failed",
            exc_info=True,
            extra={
                "command": REDACT_AND_EXTRACT,
                "document": ctx.document_path,
                "output_path": e.path,
                "error_category": e.category.value,
            },
        )
        return Notice(MSG_WRITE_FAILED, level="error")

    logger.info(
        "redaction_written",
        extra={"command": REDACT_AND_EXTRACT, "output_path": str(target)},
    )
    return Notice(f"Redacted text extracted to {target}")


async def handle_toggle_marker(ctx: CommandContext) -> Notice | None:
    """Wrap the selection in markers, or insert one marker at the cursor."""

    if ctx.buffer is None:
        logger.warning(
            "no_active_document",
            extra={
                "command": TOGGLE_REDACTION_MARKER,
                "error_category": NoActiveDocumentError.category.value,
            },
        )
        return Notice(MSG_NO_ACTIVE_FILE, level="error")

    op = toggle(ctx.buffer.get_selection(), ctx.buffer.get_cursor(), ctx.config.marker)
    apply_edit(ctx.buffer, op)
    logger.debug(
        "marker_toggled",
        extra={"command": TOGGLE_REDACTION_MARKER, "document": ctx.document_path},
    )
    return None
