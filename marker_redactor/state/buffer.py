from __future__ import annotations

from typing import Protocol

from ..redaction import EditOperation, Position, Selection


class TextBuffer(Protocol):
    """Editable document as seen by the command handlers."""

    def get_value(self) -> str: ...

    def get_selection(self) -> Selection | None: ...

    def get_cursor(self) -> Position: ...

    def set_cursor(self, pos: Position) -> None: ...

    def replace_range(self, text: str, start: Position, end: Position) -> None: ...


class StringBuffer:
    """In-memory :class:`TextBuffer` over a plain string.

    Lines are separated by ``"\\n"``. Positions that fall outside the document
    raise ``ValueError``.
    """

    def __init__(self, text: str = "", cursor: Position | None = None) -> None:
        self._text = text
        self._cursor = Position(0, 0)
        self._anchor: Position | None = None
        if cursor is not None:
            self.set_cursor(cursor)

    def get_value(self) -> str:
        return self._text

    def offset_of(self, pos: Position) -> int:
        lines = self._text.split("\n")
        if pos.line < 0 or pos.line >= len(lines):
            raise ValueError(f"line {pos.line} out of range (document has {len(lines)})")
        if pos.ch < 0 or pos.ch > len(lines[pos.line]):
            raise ValueError(f"column {pos.ch} out of range on line {pos.line}")
        return sum(len(line) + 1 for line in lines[: pos.line]) + pos.ch

    def position_of(self, offset: int) -> Position:
        if offset < 0 or offset > len(self._text):
            raise ValueError(f"offset {offset} out of range")
        before = self._text[:offset]
        line = before.count("\n")
        return Position(line, offset - (before.rfind("\n") + 1))

    def select(self, start: Position, end: Position) -> None:
        """Select ``start``..``end``; the cursor sits at ``end``."""
        self.offset_of(start)
        self.set_cursor(end)
        self._anchor = start

    def get_selection(self) -> Selection | None:
        if self._anchor is None or self._anchor == self._cursor:
            return None
        a, b = self.offset_of(self._anchor), self.offset_of(self._cursor)
        if a > b:
            a, b = b, a
        return Selection(self.position_of(a), self.position_of(b), self._text[a:b])

    def get_cursor(self) -> Position:
        return self._cursor

    def set_cursor(self, pos: Position) -> None:
        self.offset_of(pos)
        self._cursor = pos
        self._anchor = None

    def replace_range(self, text: str, start: Position, end: Position) -> None:
        a, b = self.offset_of(start), self.offset_of(end)
        if a > b:
            a, b = b, a
        self._text = self._text[:a] + text + self._text[b:]
        self._anchor = None
        self._cursor = self.position_of(a + len(text))


def apply_edit(buffer: TextBuffer, op: EditOperation) -> None:
    """Apply ``op`` to ``buffer`` and move its cursor."""
    buffer.replace_range(op.text, op.start, op.end)
    buffer.set_cursor(op.cursor)
