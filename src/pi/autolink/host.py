"""Editor host protocol and an in-memory text buffer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol, runtime_checkable


@dataclass(frozen=True)
class Position:
    """A (line, column) position; ``ch`` is a character offset in the line."""

    line: int
    ch: int


@runtime_checkable
class EditorHost(Protocol):
    """Interface the engine needs from a text editor.

    Lines are addressed by index; columns by character offset.
    """

    @property
    def document_path(self) -> str | None:
        """Vault path of the document being edited, if any."""
        ...

    def get_cursor(self) -> Position:
        ...

    def set_cursor(self, position: Position) -> None:
        ...

    def get_line(self, line: int) -> str:
        ...

    def set_line(self, line: int, text: str) -> None:
        ...

    def line_count(self) -> int:
        ...

    def has_selection(self) -> bool:
        """Whether a non-empty text selection is active."""
        ...


class TextBuffer:
    """In-memory editor: a list of lines and a cursor.

    ``on_change`` fires after every text mutation, which is how hosts feed
    the engine's text-change events.
    """

    def __init__(self, text: str = "", document_path: str | None = None) -> None:
        self._lines = text.split("\n")
        self._cursor = Position(len(self._lines) - 1, len(self._lines[-1]))
        self._document_path = document_path
        self._selection: tuple[Position, Position] | None = None
        self.on_change: list[Callable[[TextBuffer], None]] = []

    @property
    def document_path(self) -> str | None:
        return self._document_path

    # --- EditorHost ---

    def get_cursor(self) -> Position:
        return self._cursor

    def set_cursor(self, position: Position) -> None:
        line = max(0, min(position.line, len(self._lines) - 1))
        ch = max(0, min(position.ch, len(self._lines[line])))
        self._cursor = Position(line, ch)
        self._selection = None

    def get_line(self, line: int) -> str:
        return self._lines[line]

    def set_line(self, line: int, text: str) -> None:
        if not 0 <= line < len(self._lines):
            raise IndexError(f"Line {line} out of range")
        self._lines[line] = text
        self._changed()

    def line_count(self) -> int:
        return len(self._lines)

    def has_selection(self) -> bool:
        return self._selection is not None and self._selection[0] != self._selection[1]

    # --- Editing ---

    def get_text(self) -> str:
        return "\n".join(self._lines)

    def select(self, start: Position, end: Position) -> None:
        self._selection = (start, end)

    def insert_text(self, text: str) -> None:
        """Insert *text* at the cursor (may contain newlines)."""
        line, ch = self._cursor.line, self._cursor.ch
        current = self._lines[line]
        before, after = current[:ch], current[ch:]
        parts = text.split("\n")
        if len(parts) == 1:
            self._lines[line] = before + text + after
            self._cursor = Position(line, ch + len(text))
        else:
            new_lines = [before + parts[0], *parts[1:-1], parts[-1] + after]
            self._lines[line : line + 1] = new_lines
            self._cursor = Position(line + len(parts) - 1, len(parts[-1]))
        self._selection = None
        self._changed()

    def type_text(self, text: str) -> None:
        """Insert *text* one character at a time, firing a change per character."""
        for char in text:
            self.insert_text(char)

    def backspace(self) -> None:
        line, ch = self._cursor.line, self._cursor.ch
        if ch > 0:
            current = self._lines[line]
            self._lines[line] = current[: ch - 1] + current[ch:]
            self._cursor = Position(line, ch - 1)
        elif line > 0:
            prev = self._lines[line - 1]
            self._lines[line - 1 : line + 1] = [prev + self._lines[line]]
            self._cursor = Position(line - 1, len(prev))
        else:
            return
        self._changed()

    def delete_forward(self) -> None:
        line, ch = self._cursor.line, self._cursor.ch
        current = self._lines[line]
        if ch < len(current):
            self._lines[line] = current[:ch] + current[ch + 1 :]
        elif line < len(self._lines) - 1:
            self._lines[line : line + 2] = [current + self._lines[line + 1]]
        else:
            return
        self._changed()

    def _changed(self) -> None:
        for listener in list(self.on_change):
            listener(self)
