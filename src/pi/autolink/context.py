"""Per-engine mutable state: undo ledger, suppression and re-entrancy guard."""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Callable, Iterator

from pi.autolink.undo_ledger import MAX_UNDO_RECORDS, UndoLedger

# Auto-linking stays off this long after an undo
SUPPRESSION_COOLDOWN_S = 1.0

Clock = Callable[[], float]


class AutoLinkSuppression:
    """A flag that switches itself off after a cool-down.

    Stored as an expiry time on the engine clock, so nothing has to be
    scheduled or cancelled.
    """

    def __init__(self, clock: Clock, cooldown_s: float = SUPPRESSION_COOLDOWN_S) -> None:
        self._clock = clock
        self._cooldown_s = cooldown_s
        self._until: float | None = None

    def activate(self) -> None:
        """Suppress auto-linking for the cool-down, restarting it if active."""
        self._until = self._clock() + self._cooldown_s

    def reset(self) -> None:
        self._until = None

    @property
    def active(self) -> bool:
        if self._until is None:
            return False
        if self._clock() >= self._until:
            self._until = None
            return False
        return True


class EngineContext:
    """State owned by one engine instance and passed to its operations."""

    def __init__(self, clock: Clock | None = None, max_undo_records: int = MAX_UNDO_RECORDS) -> None:
        self.clock: Clock = clock or time.monotonic
        self.ledger = UndoLedger(max_undo_records)
        self.suppression = AutoLinkSuppression(self.clock)
        self._mutating = False

    @property
    def mutating(self) -> bool:
        """True while the engine itself is changing editor text."""
        return self._mutating

    @contextmanager
    def mutation(self) -> Iterator[None]:
        self._mutating = True
        try:
            yield
        finally:
            self._mutating = False
