"""Shared test doubles."""

from __future__ import annotations

from pi.autolink.suggestions import SuggestionSession
from pi.autolink.vault import Document, InMemoryVault


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingView:
    """Suggestion view that records what it was asked to do."""

    def __init__(self, fail_mount: bool = False) -> None:
        self.fail_mount = fail_mount
        self.mounted: list[SuggestionSession] = []
        self.updates = 0
        self.unmounts = 0

    def mount(self, session: SuggestionSession) -> None:
        if self.fail_mount:
            raise RuntimeError("no room for a popup")
        self.mounted.append(session)

    def update(self, session: SuggestionSession) -> None:
        self.updates += 1

    def unmount(self) -> None:
        self.unmounts += 1


def make_vault(*paths: str, aliases: dict[str, list[str]] | None = None) -> InMemoryVault:
    """Vault of documents at *paths*; *aliases* maps a path to its aliases."""
    aliases = aliases or {}
    return InMemoryVault(
        Document(path, {"aliases": aliases[path]} if path in aliases else {})
        for path in paths
    )
