"""Link syntax: building wikilinks and detecting positions inside links.

Detection is a heuristic. It may report free text as inside a link, but
never reports a position inside a real link as free text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

WIKILINK_OPEN = "[["
WIKILINK_CLOSE = "]]"

# [[Target]] or [[Target|Label]]
WIKILINK_RE = re.compile(r"\[\[([^|\]]+)(?:\|[^\]]+)?\]\]")


@dataclass(frozen=True)
class LinkSpan:
    """A wikilink found in a line: target identifier and [start, end) offsets."""

    target: str
    start: int
    end: int


def is_inside_link(line: str, column: int) -> bool:
    """Return True if *column* in *line* sits inside a link.

    Two syntaxes are recognized:

    * ``[[...]]``: more ``[[`` than ``]]`` markers before the column.
    * ``[text](url)``: the last ``[`` before the column comes after the
      last ``]`` before it, and ``](`` follows the column.

    A column strictly between the delimiters of a complete ``[[...]]``
    link (for example between its two opening brackets) also counts.
    """
    before = line[:column]
    after = line[column:]

    if before.count(WIKILINK_OPEN) > before.count(WIKILINK_CLOSE):
        return True

    if before.rfind("[") > before.rfind("]") and "](" in after:
        return True

    return any(link.start < column < link.end for link in find_links(line))


def build_link(target: str, label: str | None = None) -> str:
    """Build ``[[target]]``, or ``[[target|label]]`` when a label is given."""
    if label is None:
        return f"{WIKILINK_OPEN}{target}{WIKILINK_CLOSE}"
    return f"{WIKILINK_OPEN}{target}|{label}{WIKILINK_CLOSE}"


def find_links(line: str) -> list[LinkSpan]:
    """All wikilinks in *line*, left to right."""
    return [
        LinkSpan(target=m.group(1), start=m.start(), end=m.end())
        for m in WIKILINK_RE.finditer(line)
    ]
