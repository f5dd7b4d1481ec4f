"""Bounded undo history of the links the engine inserted."""

from __future__ import annotations

from dataclasses import dataclass

from pi.autolink.host import Position
from pi.autolink.link_syntax import find_links

MAX_UNDO_RECORDS = 10

# Backspace/Delete only undo a link this recent
IMPLICIT_UNDO_WINDOW_S = 30.0


@dataclass(frozen=True)
class UndoRecord:
    """The state of a line just before the engine replaced text in it."""

    line: int
    original: str
    cursor: Position
    timestamp: float
    target: str


class UndoLedger:
    """FIFO-bounded stack of undo records, newest last.

    Recording past ``max_size`` evicts the oldest record.
    """

    def __init__(self, max_size: int = MAX_UNDO_RECORDS) -> None:
        self._records: list[UndoRecord] = []
        self._max_size = max_size

    def record_and_bound(self, record: UndoRecord) -> None:
        """Append *record*, dropping the oldest records beyond the bound."""
        self._records.append(record)
        while len(self._records) > self._max_size:
            self._records.pop(0)

    def pop_latest(self) -> UndoRecord | None:
        """Pop and return the most recent record, or None if empty."""
        return self._records.pop() if self._records else None

    def peek_latest(self) -> UndoRecord | None:
        return self._records[-1] if self._records else None

    def clear(self) -> None:
        self._records.clear()

    def records(self) -> list[UndoRecord]:
        """Records oldest first."""
        return list(self._records)

    @property
    def length(self) -> int:
        return len(self._records)

    @property
    def max_size(self) -> int:
        return self._max_size


def implicit_undo_applies(
    record: UndoRecord,
    line_text: str,
    cursor: Position,
    *,
    forward: bool,
    now: float,
    window_s: float = IMPLICIT_UNDO_WINDOW_S,
) -> bool:
    """Decide whether a Backspace (or Delete, when *forward*) undoes *record*.

    The cursor must be on the record's line, touching a link to the
    record's target: Backspace in (start, end], Delete in [start, end).
    The record must also be at most *window_s* seconds old.
    """
    if cursor.line != record.line or not record.target:
        return False
    if now - record.timestamp > window_s:
        return False

    for link in find_links(line_text):
        if link.target != record.target:
            continue
        if forward and link.start <= cursor.ch < link.end:
            return True
        if not forward and link.start < cursor.ch <= link.end:
            return True
    return False
