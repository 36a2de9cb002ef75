from __future__ import annotations

import logging

from .config import Settings, get_settings
from .handlers.commands import (
    REDACT_AND_EXTRACT,
    TOGGLE_REDACTION_MARKER,
    CommandContext,
    Notice,
    handle_redact_and_extract,
    handle_toggle_marker,
)
from .handlers.dispatcher import CommandDispatcher
from .metrics import commands_total
from .state.store import ConfigurationStore, JsonFileStorage


def build_dispatcher() -> CommandDispatcher:
    dispatcher = CommandDispatcher()
    dispatcher.on(REDACT_AND_EXTRACT, handle_redact_and_extract)
    dispatcher.on(TOGGLE_REDACTION_MARKER, handle_toggle_marker)
    return dispatcher


def load_store(settings: Settings | None = None) -> ConfigurationStore:
    """Load the persisted redaction settings once, merged over defaults."""

    settings = settings or get_settings()
    store = ConfigurationStore(JsonFileStorage(settings.resolved_settings_file))
    store.load()
    return store


async def run(
    command_id: str,
    ctx: CommandContext,
    dispatcher: CommandDispatcher | None = None,
) -> Notice | None:
    """Run a single command to completion and return its notice."""

    dispatcher = dispatcher or build_dispatcher()
    log = logging.getLogger(__name__)

    log.info(
        "command_started",
        extra={
            "command": command_id,
            "document": ctx.document_path,
            "marker": ctx.config.marker,
            "layout": ctx.layout,
        },
    )
    commands_total.inc()
    notice = await dispatcher.dispatch(command_id, ctx)
    if notice is not None and notice.is_error:
        log.info("command_failed", extra={"command": command_id})
    return notice
