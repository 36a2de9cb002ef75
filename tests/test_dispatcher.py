import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from marker_redactor import app
from marker_redactor.config import RedactorConfig
from marker_redactor.handlers.commands import (
    REDACT_AND_EXTRACT,
    TOGGLE_REDACTION_MARKER,
    CommandContext,
    Notice,
)
from marker_redactor.handlers.dispatcher import CommandDispatcher
from marker_redactor.state.buffer import StringBuffer


def test_on_registers_handlers():
    async def main():
        dispatcher = CommandDispatcher()
        called: list[str] = []

        @dispatcher.on("decorated")
        async def decorated(ctx):
            called.append("a")
            return Notice("done")

        async def direct(ctx):
            called.append("b")

        dispatcher.on("direct", direct)

        ctx = CommandContext(config=RedactorConfig())
        notice = await dispatcher.dispatch("decorated", ctx)
        await dispatcher.dispatch("direct", ctx)
        missing = await dispatcher.dispatch("unknown", ctx)

        assert called == ["a", "b"]
        assert notice == Notice("done")
        assert missing is None

    asyncio.run(main())


def test_app_dispatcher_knows_both_commands():
    assert app.build_dispatcher().commands() == [REDACT_AND_EXTRACT, TOGGLE_REDACTION_MARKER]


def test_app_run_dispatches_and_counts():
    from marker_redactor import metrics

    before = metrics.commands_total.value
    buf = StringBuffer("abc")
    ctx = CommandContext(config=RedactorConfig(marker="!!"), buffer=buf, document_path="a.md")
    notice = asyncio.run(app.run(TOGGLE_REDACTION_MARKER, ctx))
    assert notice is None
    assert buf.get_value() == "!!abc"
    assert metrics.commands_total.value == before + 1
