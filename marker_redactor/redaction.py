"""Marker-based redaction utilities.

Spans of text bounded by a marker (``==secret==`` by default) are replaced by
a mask symbol repeated once per character, markers included in the
replacement. :func:`toggle` describes the edit that inserts markers around a
selection or at the cursor.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from .config import RedactorConfig


@dataclass(frozen=True)
class Position:
    """Zero-based line / column location in a document."""

    line: int
    ch: int


@dataclass(frozen=True)
class Selection:
    start: Position
    end: Position
    text: str


@dataclass(frozen=True)
class EditOperation:
    """Replace ``start``..``end`` with ``text`` and move the cursor."""

    start: Position
    end: Position
    text: str
    cursor: Position


@lru_cache(maxsize=32)
def _span_pattern(marker: str) -> re.Pattern[str]:
    # The marker is user supplied; match it literally.
    m = re.escape(marker)
    return re.compile(f"{m}(.*?){m}", re.DOTALL)


def find_spans(text: str, marker: str) -> list[tuple[int, int]]:
    """Return ``(start, end)`` offsets of every ``marker...marker`` region.

    Matching is minimal and left to right; a marker inside an open span closes
    it. An unterminated trailing marker is not reported.
    """
    if not marker:
        return []
    return [m.span() for m in _span_pattern(marker).finditer(text)]


def extract_with_count(text: str, marker: str, mask_symbol: str) -> tuple[str, int]:
    """Mask every marked span and return the new text with the span count.

    Each ``marker + inner + marker`` match becomes ``mask_symbol`` repeated
    ``len(inner)`` times. With an empty marker, or no complete span, the input
    is returned unchanged.
    """
    if not marker:
        return text, 0
    return _span_pattern(marker).subn(lambda m: mask_symbol * len(m.group(1)), text)


def extract(text: str, marker: str, mask_symbol: str) -> str:
    """Return ``text`` with every marked span masked."""
    return extract_with_count(text, marker, mask_symbol)[0]


def _end_of_insert(start: Position, text: str) -> Position:
    lines = text.split("\n")
    if len(lines) == 1:
        return Position(start.line, start.ch + len(text))
    return Position(start.line + len(lines) - 1, len(lines[-1]))


def wrap_lines(text: str, marker: str) -> str:
    """Wrap every non-blank line of ``text`` in ``marker``.

    Whitespace-only lines are left as they are; the marker goes at the very
    start and end of each line, outside any indentation. A trailing ``\\r``
    belongs to the line ending and stays after the closing marker.
    """
    wrapped = []
    for line in text.split("\n"):
        if line.strip() == "":
            wrapped.append(line)
            continue
        body, eol = (line[:-1], "\r") if line.endswith("\r") else (line, "")
        wrapped.append(f"{marker}{body}{marker}{eol}")
    return "\n".join(wrapped)


def toggle(selection: Selection | None, cursor: Position, marker: str) -> EditOperation:
    """Describe the edit that adds redaction markers.

    With a non-empty selection every non-blank line in it is wrapped and the
    result replaces the selection. Otherwise a single marker is inserted at
    ``cursor`` and the cursor moves past it.

    Markers are only ever added: running this on already wrapped text wraps it
    again rather than stripping the existing markers.
    """
    if selection is not None and selection.text:
        wrapped = wrap_lines(selection.text, marker)
        return EditOperation(
            start=selection.start,
            end=selection.end,
            text=wrapped,
            cursor=_end_of_insert(selection.start, wrapped),
        )
    return EditOperation(
        start=cursor,
        end=cursor,
        text=marker,
        cursor=Position(cursor.line, cursor.ch + len(marker)),
    )


@dataclass
class Redactor:
    """Mask marked spans using a fixed marker and symbol."""

    marker: str = "=="
    mask_symbol: str = "█"

    @classmethod
    def from_config(cls, config: RedactorConfig) -> Redactor:
        return cls(marker=config.marker, mask_symbol=config.mask_symbol)

    def redact(self, text: str) -> str:
        """Return ``text`` with any marked spans masked."""
        return extract(text, self.marker, self.mask_symbol)

    def redact_with_count(self, text: str) -> tuple[str, int]:
        return extract_with_count(text, self.marker, self.mask_symbol)
