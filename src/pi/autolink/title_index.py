"""Title/alias index over the linkable documents of a vault."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from pi.autolink.settings import ROOT_FOLDER_SENTINEL, ScopeMode
from pi.autolink.vault import Document

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexEntry:
    """One searchable key: the text as declared and the document it names."""

    display: str
    document: Document


def read_aliases(metadata: dict[str, Any]) -> list[str]:
    """Aliases declared in front matter.

    ``aliases`` may be a single string or a list. Non-string and blank
    entries are ignored.
    """
    value = metadata.get("aliases")
    if value is None:
        return []
    candidates = value if isinstance(value, list) else [value]
    return [alias for alias in candidates if isinstance(alias, str) and alias.strip()]


def relevant_documents(
    documents: Iterable[Document],
    scope: ScopeMode,
    *,
    active_document: Document | None = None,
    custom_folders: Iterable[str] = (),
) -> list[Document]:
    """Filter markdown *documents* down to the ones in *scope*.

    * ``global``: every document.
    * ``folder``: documents sharing the active document's parent folder;
      every document when there is no active document.
    * ``custom``: documents under one of *custom_folders*; ``/`` matches
      every path. An empty folder list means every document.
    """
    docs = [d for d in documents if d.is_markdown]

    if scope == "folder":
        if active_document is None:
            return docs
        return [d for d in docs if d.parent == active_document.parent]

    if scope == "custom":
        folders = list(custom_folders)
        if not folders:
            return docs
        prefixes = ["" if f == ROOT_FOLDER_SENTINEL else f + "/" for f in folders]
        return [d for d in docs if any(d.path.startswith(p) for p in prefixes)]

    return docs


class TitleIndex:
    """Maps normalized titles and aliases to documents.

    Keys are case-folded unless case-sensitive. The index is only ever
    rebuilt wholesale; there is no incremental update path.
    """

    def __init__(self, *, case_sensitive: bool = False, include_aliases: bool = True) -> None:
        self._case_sensitive = case_sensitive
        self._include_aliases = include_aliases
        self._titles: dict[str, IndexEntry] = {}
        self._aliases: dict[str, IndexEntry] = {}

    @property
    def case_sensitive(self) -> bool:
        return self._case_sensitive

    def normalize(self, text: str) -> str:
        return text if self._case_sensitive else text.lower()

    def configure(self, *, case_sensitive: bool, include_aliases: bool) -> None:
        """Change normalization; takes effect on the next rebuild."""
        self._case_sensitive = case_sensitive
        self._include_aliases = include_aliases

    def rebuild(
        self,
        scope: ScopeMode,
        documents: Iterable[Document],
        *,
        active_document: Document | None = None,
        custom_folders: Iterable[str] = (),
    ) -> None:
        """Recompute every entry from the documents relevant under *scope*."""
        self._titles.clear()
        self._aliases.clear()

        relevant = relevant_documents(
            documents,
            scope,
            active_document=active_document,
            custom_folders=custom_folders,
        )
        for document in relevant:
            basename = document.basename
            self._titles[self.normalize(basename)] = IndexEntry(basename, document)

            if not self._include_aliases:
                continue
            for alias in read_aliases(document.metadata):
                self._aliases[self.normalize(alias)] = IndexEntry(alias, document)

        logger.debug(
            "Rebuilt title index (%s scope): %d titles, %d aliases",
            scope,
            len(self._titles),
            len(self._aliases),
        )

    def titles(self) -> list[tuple[str, IndexEntry]]:
        """Title entries in index order."""
        return list(self._titles.items())

    def aliases(self) -> list[tuple[str, IndexEntry]]:
        """Alias entries in index order."""
        return list(self._aliases.items())

    def __len__(self) -> int:
        return len(self._titles) + len(self._aliases)
