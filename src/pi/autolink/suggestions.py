"""Suggestion sessions: interactive candidate selection.

A session moves closed -> open -> (accepted | cancelled) -> closed and is
owned by a single ``SessionOwner``, which never lets two sessions be open
at once. Sessions observe keys rather than capturing them: a key is
consumed only when the session acts on it.
"""

from __future__ import annotations

import logging
from typing import Callable, Literal, Protocol

from pi.autolink.disambiguation import Fragment
from pi.autolink.host import EditorHost
from pi.autolink.keybindings import AutoLinkKeybindingsManager, get_autolink_keybindings
from pi.autolink.keys import KeyEvent, digit_value
from pi.autolink.resolver import Candidate
from pi.autolink.utils import common_prefix, truncate_to_width

logger = logging.getLogger(__name__)

SessionState = Literal["closed", "open", "accepted", "cancelled"]


# ============================================================================
# Rendering
# ============================================================================


class SuggestionListTheme(Protocol):
    selected_text: Callable[[str], str]
    description: Callable[[str], str]
    scroll_info: Callable[[str], str]


class PlainTheme:
    """Theme that leaves text unstyled."""

    @staticmethod
    def selected_text(text: str) -> str:
        return text

    @staticmethod
    def description(text: str) -> str:
        return text

    @staticmethod
    def scroll_info(text: str) -> str:
        return text


def describe(candidate: Candidate) -> str:
    if candidate.is_alias:
        return f"alias of {candidate.target}"
    return candidate.document.path


class SuggestionList:
    """Candidate list with a wrapping selection and terminal rendering."""

    def __init__(
        self,
        candidates: list[Candidate],
        max_visible: int = 10,
        theme: SuggestionListTheme | None = None,
    ) -> None:
        self._candidates = list(candidates)
        self._selected_index = 0
        self._max_visible = max_visible
        self._theme = theme or PlainTheme()

    @property
    def candidates(self) -> list[Candidate]:
        return list(self._candidates)

    @property
    def selected_index(self) -> int:
        return self._selected_index

    def set_selected_index(self, index: int) -> None:
        self._selected_index = max(0, min(index, len(self._candidates) - 1))

    def move(self, delta: int) -> None:
        """Move the selection by *delta*, wrapping at both ends."""
        if self._candidates:
            self._selected_index = (self._selected_index + delta) % len(self._candidates)

    def get_selected(self) -> Candidate | None:
        if 0 <= self._selected_index < len(self._candidates):
            return self._candidates[self._selected_index]
        return None

    def render(self, width: int) -> list[str]:
        lines: list[str] = []
        total = len(self._candidates)
        if total == 0:
            return lines

        start_index = max(
            0,
            min(self._selected_index - self._max_visible // 2, total - self._max_visible),
        )
        end_index = min(start_index + self._max_visible, total)

        for i in range(start_index, end_index):
            candidate = self._candidates[i]
            is_selected = i == self._selected_index
            prefix = "→ " if is_selected else "  "
            number = f"{i + 1}. " if i < 9 else "   "
            label = number + candidate.display_title

            if width > 40:
                value = truncate_to_width(label, min(30, width - len(prefix) - 4), "")
                spacing = " " * max(1, 32 - len(value))
                remaining = width - len(prefix) - len(value) - len(spacing) - 2
                desc = truncate_to_width(describe(candidate), remaining, "") if remaining > 10 else ""
            else:
                value = truncate_to_width(label, width - len(prefix) - 2, "")
                spacing = desc = ""

            if is_selected:
                line = self._theme.selected_text(f"{prefix}{value}{spacing}{desc}".rstrip())
            else:
                line = prefix + value + (self._theme.description(spacing + desc) if desc else "")
            lines.append(line)

        if start_index > 0 or end_index < total:
            scroll_text = f"  ({self._selected_index + 1}/{total})"
            lines.append(self._theme.scroll_info(truncate_to_width(scroll_text, width - 2, "")))

        return lines


# ============================================================================
# Session
# ============================================================================


class SuggestionView(Protocol):
    """Whatever draws a session (a popup, an overlay, a terminal panel)."""

    def mount(self, session: SuggestionSession) -> None:
        ...

    def update(self, session: SuggestionSession) -> None:
        ...

    def unmount(self) -> None:
        ...


class SuggestionSession:
    """One popup's worth of candidates for one typed fragment."""

    def __init__(
        self,
        editor: EditorHost,
        fragment: Fragment,
        candidates: list[Candidate],
        *,
        enter_accepts: bool = True,
        keybindings: AutoLinkKeybindingsManager | None = None,
        max_visible: int = 10,
        theme: SuggestionListTheme | None = None,
    ) -> None:
        self.editor = editor
        self.fragment = fragment
        self.enter_accepts = enter_accepts
        self.list = SuggestionList(candidates, max_visible=max_visible, theme=theme)
        self._keybindings = keybindings or get_autolink_keybindings()
        self._state: SessionState = "closed"
        self.outcome: SessionState | None = None

        self.on_accept: Callable[[SuggestionSession, Candidate], None] | None = None
        self.on_close: Callable[[SuggestionSession], None] | None = None
        self.on_selection_change: Callable[[SuggestionSession], None] | None = None

    # --- State ---

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state == "open"

    @property
    def candidates(self) -> list[Candidate]:
        return self.list.candidates

    @property
    def selected_index(self) -> int:
        return self.list.selected_index

    def common_prefix(self) -> str:
        """Longest prefix shared by all candidate titles."""
        return common_prefix([c.display_title for c in self.list.candidates])

    def open(self) -> None:
        if self._state != "closed":
            raise RuntimeError(f"Cannot open a session in state {self._state!r}")
        self._state = "open"

    # --- Keyboard ---

    def handle_key(self, event: KeyEvent) -> bool:
        """Act on *event*; returns True when the key was consumed."""
        if not self.is_open or event.source == "other":
            return False
        if self.editor.has_selection():
            return False

        kb = self._keybindings
        key = event.key

        if kb.matches(key, "selectUp"):
            self._move(-1)
            return True
        if kb.matches(key, "selectDown"):
            self._move(1)
            return True
        if kb.matches(key, "selectCancel"):
            self.cancel()
            return True
        if kb.matches(key, "acceptEnter"):
            if not self.enter_accepts:
                return False
            self.accept()
            return True
        if kb.matches(key, "acceptTab"):
            if self._tab_indents():
                return False
            self.accept()
            return True

        digit = digit_value(key)
        if digit is not None and digit <= len(self.list.candidates):
            self.accept(digit - 1)
            return True

        return False

    def _tab_indents(self) -> bool:
        cursor = self.editor.get_cursor()
        return self.editor.get_line(cursor.line)[: cursor.ch].strip() == ""

    def _move(self, delta: int) -> None:
        self.list.move(delta)
        if self.on_selection_change:
            self.on_selection_change(self)

    # --- Pointer ---

    def hover(self, index: int) -> None:
        """Highlight *index* without accepting."""
        if not self.is_open or not 0 <= index < len(self.list.candidates):
            return
        if index != self.list.selected_index:
            self.list.set_selected_index(index)
            if self.on_selection_change:
                self.on_selection_change(self)

    def click(self, index: int) -> None:
        """Select and accept *index*."""
        if self.is_open and 0 <= index < len(self.list.candidates):
            self.accept(index)

    def click_outside(self) -> None:
        self.cancel()

    # --- Transitions ---

    def accept(self, index: int | None = None) -> None:
        if not self.is_open:
            return
        if index is not None:
            self.list.set_selected_index(index)
        candidate = self.list.get_selected()
        if candidate is None:
            self.cancel()
            return
        self._state = "accepted"
        if self.on_accept:
            self.on_accept(self, candidate)
        self._finish()

    def cancel(self) -> None:
        if not self.is_open:
            return
        self._state = "cancelled"
        self._finish()

    def close(self) -> None:
        """Close without accepting, whatever the current state."""
        if self._state == "open":
            self._state = "cancelled"
        if self._state != "closed":
            self._finish()

    def _finish(self) -> None:
        self.outcome = self._state
        if self.on_close:
            self.on_close(self)
        self._state = "closed"


class SessionOwner:
    """Holds at most one open session and its view."""

    def __init__(self, view: SuggestionView | None = None) -> None:
        self._view = view
        self._session: SuggestionSession | None = None

    @property
    def session(self) -> SuggestionSession | None:
        return self._session

    def open(self, session: SuggestionSession) -> SuggestionSession | None:
        """Replace any current session with *session* and mount it.

        Returns None, with nothing left mounted, if the view fails to mount.
        """
        self.close()
        session.open()
        session.on_close = self._closed
        if self._view is not None:
            session.on_selection_change = self._view.update
            try:
                self._view.mount(session)
            except Exception:
                logger.exception("Failed to mount suggestion view")
                self._teardown_view()
                session.on_close = None
                session.close()
                return None
        self._session = session
        return session

    def close(self) -> None:
        if self._session is not None:
            self._session.close()

    def _closed(self, session: SuggestionSession) -> None:
        if session is not self._session:
            return
        self._session = None
        self._teardown_view()

    def _teardown_view(self) -> None:
        if self._view is None:
            return
        try:
            self._view.unmount()
        except Exception:
            logger.exception("Failed to unmount suggestion view")
