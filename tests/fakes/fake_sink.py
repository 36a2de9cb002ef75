from __future__ import annotations

from pathlib import Path


class RecordingSink:
    """Write sink that keeps everything in memory."""

    def __init__(self) -> None:
        self.dirs: list[Path] = []
        self.writes: dict[Path, str] = {}

    async def ensure_dir(self, path: Path) -> None:
        self.dirs.append(Path(path))

    async def write(self, path: Path, content: str) -> None:
        self.writes[Path(path)] = content


class FailingSink(RecordingSink):
    def __init__(self, exc: OSError | None = None, *, on: str = "write") -> None:
        super().__init__()
        self.exc = exc or PermissionError("permission denied")
        self.on = on

    async def ensure_dir(self, path: Path) -> None:
        if self.on == "ensure_dir":
            raise self.exc
        await super().ensure_dir(path)

    async def write(self, path: Path, content: str) -> None:
        if self.on == "write":
            raise self.exc
        await super().write(path, content)
