import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from marker_redactor.output import FileSystemSink, resolve_output_path


def test_mirror_layout_keeps_relative_path():
    assert resolve_output_path("/out", "notes/a.md") == Path("/out/notes/a.md")


def test_flat_layout_keeps_base_name():
    assert resolve_output_path("/out", "notes/deep/a.md", "flat") == Path("/out/a.md")


def test_relative_root_resolved_against_base_dir(tmp_path):
    got = resolve_output_path("redacted", "a.md", base_dir=tmp_path)
    assert got == tmp_path / "redacted" / "a.md"


def test_file_system_sink_creates_directories(tmp_path):
    async def main():
        sink = FileSystemSink()
        target = tmp_path / "x" / "y" / "out.md"
        await sink.ensure_dir(target.parent)
        # creating an existing directory again is fine
        await sink.ensure_dir(target.parent)
        await sink.write(target, "██ ok")
        return target

    target = asyncio.run(main())
    assert target.read_text(encoding="utf-8") == "██ ok"


def test_file_system_sink_keeps_line_endings(tmp_path):
    target = tmp_path / "crlf.md"
    asyncio.run(FileSystemSink().write(target, "a\r\nb\rc\n"))
    assert target.read_bytes() == b"a\r\nb\rc\n"
