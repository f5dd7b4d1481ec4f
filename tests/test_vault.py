"""Tests for pi.autolink.vault -- documents, events and folder loading."""

from __future__ import annotations

import asyncio

import pytest
from watchdog.events import FileCreatedEvent, FileDeletedEvent, FileMovedEvent

from pi.autolink.engine import AutoLinkEngine
from pi.autolink.host import TextBuffer
from pi.autolink.vault import DirectoryVault, Document, InMemoryVault, VaultEvent


class TestDocument:
    def test_path_parts(self) -> None:
        doc = Document("Projects/Deep Work.md")
        assert doc.basename == "Deep Work"
        assert doc.extension == "md"
        assert doc.parent == "Projects"
        assert doc.is_markdown

    def test_root_parent(self) -> None:
        assert Document("Note.md").parent == "/"

    def test_non_markdown(self) -> None:
        assert not Document("image.png").is_markdown

    def test_equality_ignores_metadata(self) -> None:
        assert Document("Note.md", {"aliases": ["n"]}) == Document("Note.md")


class TestInMemoryVault:
    def _collect(self, vault: InMemoryVault) -> list[VaultEvent]:
        events: list[VaultEvent] = []
        vault.subscribe(events.append)
        return events

    def test_create_notifies(self) -> None:
        vault = InMemoryVault()
        events = self._collect(vault)
        vault.create("Note.md")
        assert events == [VaultEvent(kind="create", path="Note.md")]
        assert vault.get("Note.md") == Document("Note.md")

    def test_rename_keeps_order(self) -> None:
        vault = InMemoryVault([Document("A.md"), Document("B.md"), Document("C.md")])
        events = self._collect(vault)
        vault.rename("B.md", "Z.md")
        assert [d.path for d in vault.documents()] == ["A.md", "Z.md", "C.md"]
        assert events == [VaultEvent(kind="rename", path="Z.md", old_path="B.md")]

    def test_delete(self) -> None:
        vault = InMemoryVault([Document("A.md")])
        events = self._collect(vault)
        vault.delete("A.md")
        assert vault.documents() == []
        assert events == [VaultEvent(kind="delete", path="A.md")]

    def test_missing_documents_raise(self) -> None:
        vault = InMemoryVault()
        with pytest.raises(KeyError):
            vault.delete("nope.md")
        with pytest.raises(KeyError):
            vault.rename("nope.md", "other.md")

    def test_non_markdown_does_not_notify(self) -> None:
        vault = InMemoryVault()
        events = self._collect(vault)
        vault.create("image.png")
        assert events == []
        assert vault.markdown_documents() == []

    def test_unsubscribe(self) -> None:
        vault = InMemoryVault()
        events: list[VaultEvent] = []
        unsubscribe = vault.subscribe(events.append)
        unsubscribe()
        vault.create("Note.md")
        assert events == []

    def test_set_metadata_is_silent(self) -> None:
        vault = InMemoryVault([Document("A.md")])
        events = self._collect(vault)
        vault.set_metadata("A.md", {"aliases": ["a"]})
        assert events == []
        assert vault.get("A.md").metadata == {"aliases": ["a"]}


class TestDirectoryVault:
    def _write(self, root, rel: str, content: str) -> None:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    def test_loads_markdown_with_front_matter(self, tmp_path) -> None:
        self._write(tmp_path, "Deep Work.md", "---\naliases: [Focus]\n---\nBody\n")
        self._write(tmp_path, "Projects/Alpha.md", "No front matter\n")
        self._write(tmp_path, "notes.txt", "ignored\n")
        vault = DirectoryVault(tmp_path)
        assert [d.path for d in vault.documents()] == ["Deep Work.md", "Projects/Alpha.md"]
        assert vault.get("Deep Work.md").metadata["aliases"] == ["Focus"]
        assert vault.get("Projects/Alpha.md").metadata == {}

    def test_skips_hidden_folders(self, tmp_path) -> None:
        self._write(tmp_path, ".trash/Old.md", "old\n")
        self._write(tmp_path, "Kept.md", "kept\n")
        assert [d.path for d in DirectoryVault(tmp_path).documents()] == ["Kept.md"]

    def test_broken_front_matter_still_indexed(self, tmp_path) -> None:
        self._write(tmp_path, "Broken.md", "---\naliases: [unclosed\n---\nBody\n")
        vault = DirectoryVault(tmp_path)
        assert vault.get("Broken.md") == Document("Broken.md")
        assert vault.get("Broken.md").metadata == {}

    def test_missing_folder_is_empty(self, tmp_path) -> None:
        assert DirectoryVault(tmp_path / "missing").documents() == []

    def test_file_events_update_documents(self, tmp_path) -> None:
        vault = DirectoryVault(tmp_path)
        events: list[VaultEvent] = []
        vault.subscribe(events.append)

        self._write(tmp_path, "New.md", "---\naliases: Fresh\n---\n")
        vault._handle_fs_event(FileCreatedEvent(str(tmp_path / "New.md")))
        assert vault.get("New.md").metadata["aliases"] == "Fresh"

        (tmp_path / "New.md").rename(tmp_path / "Renamed.md")
        vault._handle_fs_event(
            FileMovedEvent(str(tmp_path / "New.md"), str(tmp_path / "Renamed.md"))
        )
        assert vault.get("New.md") is None
        assert vault.get("Renamed.md") is not None

        (tmp_path / "Renamed.md").unlink()
        vault._handle_fs_event(FileDeletedEvent(str(tmp_path / "Renamed.md")))
        assert vault.documents() == []

        assert [e.kind for e in events] == ["create", "rename", "delete"]


class TestWatching:
    @pytest.mark.asyncio
    async def test_created_file_reaches_subscribers_on_the_loop(self, tmp_path) -> None:
        vault = DirectoryVault(tmp_path)
        loop = asyncio.get_running_loop()
        created = asyncio.Event()
        events: list[VaultEvent] = []

        def on_event(event: VaultEvent) -> None:
            assert asyncio.get_running_loop() is loop
            events.append(event)
            if event.kind == "create":
                created.set()

        vault.subscribe(on_event)
        vault.start_watching()
        try:
            (tmp_path / "Watched.md").write_text("body\n", encoding="utf-8")
            await asyncio.wait_for(created.wait(), timeout=5)
        finally:
            vault.stop_watching()

        assert events[0] == VaultEvent(kind="create", path="Watched.md")
        assert vault.get("Watched.md") is not None

    @pytest.mark.asyncio
    async def test_engine_links_a_file_created_while_watching(self, tmp_path) -> None:
        vault = DirectoryVault(tmp_path)
        engine = AutoLinkEngine(vault)
        engine.start()
        created = asyncio.Event()
        vault.subscribe(lambda event: created.set())
        vault.start_watching()
        try:
            (tmp_path / "Later.md").write_text("body\n", encoding="utf-8")
            await asyncio.wait_for(created.wait(), timeout=5)
        finally:
            vault.stop_watching()
            engine.close()

        buffer = TextBuffer()
        buffer.type_text("Later ")
        engine.handle_editor_change(buffer)
        assert buffer.get_text() == "[[Later]] "

    @pytest.mark.asyncio
    async def test_stop_watching_is_idempotent(self, tmp_path) -> None:
        vault = DirectoryVault(tmp_path)
        vault.start_watching()
        vault.start_watching()
        vault.stop_watching()
        vault.stop_watching()
