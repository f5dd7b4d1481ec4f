"""Document collections: in-memory and directory-backed vaults.

A vault hands the title index its documents and notifies subscribers when
a markdown document is created, renamed or deleted.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Callable, Iterable, Literal

import frontmatter
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSION = ".md"

# Vault-relative folder of documents at the root
ROOT_FOLDER = "/"


# ============================================================================
# Documents and events
# ============================================================================


@dataclass(frozen=True)
class Document:
    """A document in a vault, addressed by its vault-relative POSIX path."""

    path: str
    metadata: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def basename(self) -> str:
        """File name without extension; the link target identifier."""
        return PurePosixPath(self.path).stem

    @property
    def extension(self) -> str:
        return PurePosixPath(self.path).suffix.lstrip(".")

    @property
    def parent(self) -> str:
        """Vault-relative parent folder, ``/`` for the vault root."""
        parent = str(PurePosixPath(self.path).parent)
        return ROOT_FOLDER if parent in (".", "") else parent

    @property
    def is_markdown(self) -> bool:
        return self.path.endswith(MARKDOWN_EXTENSION)


VaultEventKind = Literal["create", "rename", "delete"]


@dataclass(frozen=True)
class VaultEvent:
    kind: VaultEventKind
    path: str
    old_path: str | None = None  # rename only


VaultListener = Callable[[VaultEvent], None]


# ============================================================================
# InMemoryVault
# ============================================================================


class InMemoryVault:
    """A vault held in memory.

    Documents are kept in insertion order; renaming keeps a document's
    position. Only markdown documents notify subscribers.
    """

    def __init__(self, documents: Iterable[Document] = ()) -> None:
        self._documents: dict[str, Document] = {}
        self._listeners: list[VaultListener] = []
        for document in documents:
            self._documents[document.path] = document

    # --- Queries ---

    def documents(self) -> list[Document]:
        """All documents, in insertion order."""
        return list(self._documents.values())

    def markdown_documents(self) -> list[Document]:
        return [d for d in self._documents.values() if d.is_markdown]

    def get(self, path: str) -> Document | None:
        return self._documents.get(path)

    # --- Subscriptions ---

    def subscribe(self, listener: VaultListener) -> Callable[[], None]:
        """Register *listener*; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: VaultEvent) -> None:
        if not event.path.endswith(MARKDOWN_EXTENSION):
            return
        for listener in list(self._listeners):
            listener(event)

    # --- Mutations ---

    def create(self, path: str, metadata: dict[str, Any] | None = None) -> Document:
        document = Document(path=path, metadata=dict(metadata or {}))
        self._documents[path] = document
        self._emit(VaultEvent(kind="create", path=path))
        return document

    def rename(self, old_path: str, new_path: str) -> Document:
        if old_path not in self._documents:
            raise KeyError(old_path)
        old = self._documents[old_path]
        renamed = Document(path=new_path, metadata=old.metadata)
        self._documents = {
            (new_path if path == old_path else path): (renamed if path == old_path else doc)
            for path, doc in self._documents.items()
        }
        self._emit(VaultEvent(kind="rename", path=new_path, old_path=old_path))
        return renamed

    def delete(self, path: str) -> None:
        if self._documents.pop(path, None) is None:
            raise KeyError(path)
        self._emit(VaultEvent(kind="delete", path=path))

    def set_metadata(self, path: str, metadata: dict[str, Any]) -> Document:
        """Replace a document's metadata without notifying (like a cache refresh)."""
        document = Document(path=path, metadata=dict(metadata))
        self._documents[path] = document
        return document


# ============================================================================
# DirectoryVault
# ============================================================================


def load_document(root: Path, file_path: Path) -> Document:
    """Read one markdown file into a Document, front matter as metadata.

    Unreadable or unparsable files still produce a Document, with empty
    metadata, so they stay linkable by file name.
    """
    rel = file_path.relative_to(root).as_posix()
    try:
        post = frontmatter.load(file_path)
        metadata = dict(post.metadata)
    except Exception as e:
        logger.debug("Reading %s without front matter: %s", rel, e)
        metadata = {}
    return Document(path=rel, metadata=metadata)


class DirectoryVault(InMemoryVault):
    """A vault backed by a folder of markdown files.

    ``start_watching`` observes the folder with watchdog. File system events
    arrive on the observer thread and are handed to the asyncio loop, so
    subscribers always run on the loop's thread.
    """

    def __init__(self, root: str | os.PathLike[str]) -> None:
        super().__init__()
        self._root = Path(root).resolve()
        self._observer: Any = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self.load()

    @property
    def root(self) -> Path:
        return self._root

    def load(self) -> None:
        """(Re)read every markdown file under the root."""
        self._documents = {}
        if not self._root.is_dir():
            logger.warning("Vault folder %s does not exist", self._root)
            return
        for file_path in sorted(self._root.rglob(f"*{MARKDOWN_EXTENSION}")):
            rel_parts = file_path.relative_to(self._root).parts
            if any(part.startswith(".") for part in rel_parts):
                continue
            document = load_document(self._root, file_path)
            self._documents[document.path] = document
        logger.debug("Loaded %d documents from %s", len(self._documents), self._root)

    # --- Watching ---

    def start_watching(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        if self._observer is not None:
            return
        self._loop = loop or asyncio.get_running_loop()

        vault = self

        class _Handler(FileSystemEventHandler):
            def on_any_event(self, event: FileSystemEvent) -> None:
                if event.is_directory:
                    return
                assert vault._loop is not None
                vault._loop.call_soon_threadsafe(vault._handle_fs_event, event)

        self._observer = Observer()
        self._observer.schedule(_Handler(), str(self._root), recursive=True)
        self._observer.start()
        logger.info("Watching vault %s", self._root)

    def stop_watching(self) -> None:
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None
        self._loop = None

    def _relative(self, path: str | bytes) -> str | None:
        raw = os.fsdecode(path)
        try:
            return Path(raw).resolve().relative_to(self._root).as_posix()
        except ValueError:
            return None

    def _handle_fs_event(self, event: FileSystemEvent) -> None:
        src = self._relative(event.src_path)
        if src is None:
            return

        if event.event_type == "moved":
            dest = self._relative(getattr(event, "dest_path", ""))
            if dest is None:
                return
            if src in self._documents:
                document = load_document(self._root, self._root / dest)
                self._documents.pop(src)
                self._documents[dest] = document
                self._emit(VaultEvent(kind="rename", path=dest, old_path=src))
            elif dest.endswith(MARKDOWN_EXTENSION):
                self._documents[dest] = load_document(self._root, self._root / dest)
                self._emit(VaultEvent(kind="create", path=dest))
        elif event.event_type == "created":
            if not src.endswith(MARKDOWN_EXTENSION):
                return
            self._documents[src] = load_document(self._root, self._root / src)
            self._emit(VaultEvent(kind="create", path=src))
        elif event.event_type == "deleted":
            if self._documents.pop(src, None) is not None:
                self._emit(VaultEvent(kind="delete", path=src))
        elif event.event_type == "modified" and src in self._documents:
            # Alias edits refresh metadata without a lifecycle event
            self._documents[src] = load_document(self._root, self._root / src)
