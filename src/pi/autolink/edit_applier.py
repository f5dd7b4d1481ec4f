"""Replacing a typed fragment with link syntax, undoably."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pi.autolink.context import EngineContext
from pi.autolink.disambiguation import Fragment
from pi.autolink.host import EditorHost, Position
from pi.autolink.resolver import Candidate
from pi.autolink.undo_ledger import UndoRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LinkEdit:
    """Result of substituting a link into a line."""

    line_text: str
    cursor_ch: int
    link: str


def apply_link(line: str, fragment: Fragment, candidate: Candidate, cursor_ch: int) -> LinkEdit:
    """Replace ``line[fragment.start:fragment.end]`` with the candidate's link.

    Text after the fragment, such as the delimiter that completed the
    word, is kept. The cursor keeps its offset relative to that text,
    which puts it right after the link (and delimiter), clamped to the
    new line length.
    """
    if not 0 <= fragment.start <= fragment.end <= len(line):
        raise ValueError(f"Fragment span {fragment.start}:{fragment.end} outside line")

    link = candidate.link_text()
    new_line = line[: fragment.start] + link + line[fragment.end :]
    new_cursor = cursor_ch + len(link) - (fragment.end - fragment.start)
    return LinkEdit(
        line_text=new_line,
        cursor_ch=max(0, min(len(new_line), new_cursor)),
        link=link,
    )


class EditApplier:
    """Applies link edits to an editor, recording undo state first."""

    def __init__(self, context: EngineContext) -> None:
        self._context = context

    def apply(self, editor: EditorHost, fragment: Fragment, candidate: Candidate) -> LinkEdit:
        cursor = editor.get_cursor()
        line = editor.get_line(cursor.line)
        edit = apply_link(line, fragment, candidate, cursor.ch)

        self._context.ledger.record_and_bound(
            UndoRecord(
                line=cursor.line,
                original=line,
                cursor=cursor,
                timestamp=self._context.clock(),
                target=candidate.target,
            )
        )

        with self._context.mutation():
            editor.set_line(cursor.line, edit.line_text)
            editor.set_cursor(Position(cursor.line, edit.cursor_ch))

        logger.debug("Linked %r as %s on line %d", fragment.text, edit.link, cursor.line)
        return edit

    def undo_latest(self, editor: EditorHost) -> UndoRecord | None:
        """Restore the line and cursor captured by the newest record.

        A record whose line no longer exists is discarded without an edit.
        """
        ledger = self._context.ledger
        record = ledger.peek_latest()
        if record is None:
            return None
        if record.line >= editor.line_count():
            ledger.pop_latest()
            logger.debug("Line %d is gone; dropping undo record for %s", record.line, record.target)
            return None
        ledger.pop_latest()
        with self._context.mutation():
            editor.set_line(record.line, record.original)
            editor.set_cursor(record.cursor)
        self._context.suppression.activate()
        logger.info("Undid auto-link to %s on line %d", record.target, record.line)
        return record
