"""Output path resolution and the file write sink."""

from __future__ import annotations

import asyncio
from pathlib import Path, PurePath
from typing import Protocol

from .config import OutputLayout


class WriteSink(Protocol):
    async def ensure_dir(self, path: Path) -> None: ...

    async def write(self, path: Path, content: str) -> None: ...


class FileSystemSink:
    """Write redacted copies to the local file system.

    Blocking calls run in a worker thread so the caller only awaits the I/O.
    Errors surface as ``OSError``.
    """

    encoding = "utf-8"

    async def ensure_dir(self, path: Path) -> None:
        await asyncio.to_thread(Path(path).mkdir, parents=True, exist_ok=True)

    async def write(self, path: Path, content: str) -> None:
        # newline="" keeps the document's own line endings
        await asyncio.to_thread(
            Path(path).write_text, content, encoding=self.encoding, newline=""
        )


def resolve_output_path(
    output_root: str,
    document_path: str,
    layout: OutputLayout = "mirror",
    base_dir: Path | None = None,
) -> Path:
    """Return where the redacted copy of ``document_path`` is written.

    ``mirror`` keeps the document's relative path below ``output_root``;
    ``flat`` keeps only its file name. A relative ``output_root`` is taken
    relative to ``base_dir`` when one is given.
    """
    root = Path(output_root).expanduser()
    if base_dir is not None and not root.is_absolute():
        root = Path(base_dir) / root

    doc = PurePath(document_path)
    if layout == "flat":
        return root / doc.name
    if doc.is_absolute():
        doc = PurePath(*doc.parts[1:])
    return root / doc
