"""Prefix matching of typed text against the title index."""

from __future__ import annotations

from dataclasses import dataclass

from pi.autolink.link_syntax import build_link
from pi.autolink.title_index import TitleIndex
from pi.autolink.vault import Document


@dataclass(frozen=True)
class Candidate:
    """A document the typed text may refer to."""

    display_title: str
    document: Document
    is_alias: bool = False

    @property
    def target(self) -> str:
        """Link target identifier (the document's basename)."""
        return self.document.basename

    def link_text(self) -> str:
        """Wikilink for this candidate; alias matches keep the alias as label."""
        return build_link(self.target, self.display_title if self.is_alias else None)


class MatchResolver:
    """Finds candidates whose title or alias starts with the typed text.

    Results keep index order, titles before aliases, and are never ranked.
    A document matched by title is not repeated through one of its aliases.
    """

    def __init__(self, index: TitleIndex, max_suggestions: int = 10) -> None:
        self._index = index
        self.max_suggestions = max_suggestions

    def find_matches(self, typed: str, exclude_title: str = "") -> list[Candidate]:
        search_key = self._index.normalize(typed)
        excluded_key = self._index.normalize(exclude_title)
        matches: list[Candidate] = []
        seen_paths: set[str] = set()

        for key, entry in self._index.titles():
            if key != excluded_key and key.startswith(search_key):
                matches.append(Candidate(entry.display, entry.document, is_alias=False))
                seen_paths.add(entry.document.path)

        for key, entry in self._index.aliases():
            if entry.document.basename == exclude_title:
                continue
            if not key.startswith(search_key) or entry.document.path in seen_paths:
                continue
            matches.append(Candidate(entry.display, entry.document, is_alias=True))
            seen_paths.add(entry.document.path)

        return matches[: self.max_suggestions]
