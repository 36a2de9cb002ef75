from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from .commands import CommandContext, Notice

CommandHandler = Callable[["CommandContext"], Awaitable["Notice | None"]]


class CommandDispatcher:
    """Minimal async command dispatcher.

    Handlers are registered under a command id and awaited when that command
    is dispatched. Unknown command ids are ignored.

    The :meth:`on` method can be used either as a decorator::

        dispatcher = CommandDispatcher()


        @dispatcher.on("redact-and-extract")
        async def handler(ctx): ...

    or called directly::

        dispatcher.on("redact-and-extract", handler)

    """

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}

    def on(
        self, command_id: str, handler: CommandHandler | None = None
    ) -> CommandHandler | Callable[[CommandHandler], CommandHandler]:
        """Register ``handler`` for ``command_id``.

        If ``handler`` is ``None`` this functions as a decorator factory.
        """

        if handler is not None:
            self._handlers[command_id] = handler
            return handler

        def decorator(func: CommandHandler) -> CommandHandler:
            self._handlers[command_id] = func
            return func

        return decorator

    def commands(self) -> list[str]:
        return list(self._handlers)

    async def dispatch(self, command_id: str, ctx: CommandContext) -> Notice | None:
        handler = self._handlers.get(command_id)
        if handler is None:
            logging.getLogger(__name__).debug("unknown_command", extra={"command": command_id})
            return None
        return await handler(ctx)
