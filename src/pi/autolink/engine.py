"""AutoLinkEngine: turns typing into wikilinks.

Control flow per text change::

    change -> inside-link gate -> fragment -> candidates -> decision
           -> (edit applier | suggestion session) -> undo ledger

Everything runs on the host's UI thread. Text changes are debounced; the
engine's own edits are excluded from re-evaluation by the context's
mutation guard, and undo restores are followed by a short suppression.
"""

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import Callable

from pi.autolink.context import Clock, EngineContext
from pi.autolink.debounce import Debouncer
from pi.autolink.disambiguation import (
    AutoApply,
    Close,
    Decision,
    Disambiguator,
    DisambiguationState,
    Fragment,
    Offer,
    Wait,
)
from pi.autolink.edit_applier import EditApplier, LinkEdit
from pi.autolink.host import EditorHost
from pi.autolink.keybindings import AutoLinkKeybindingsManager, get_autolink_keybindings
from pi.autolink.keys import KeyEvent
from pi.autolink.link_syntax import is_inside_link
from pi.autolink.resolver import Candidate, MatchResolver
from pi.autolink.settings import AutoLinkSettings, ModePolicy, SettingsManager
from pi.autolink.suggestions import SessionOwner, SuggestionSession, SuggestionView
from pi.autolink.title_index import TitleIndex
from pi.autolink.undo_ledger import implicit_undo_applies
from pi.autolink.vault import InMemoryVault, VaultEvent

logger = logging.getLogger(__name__)

UNDO_NOTICE = "Auto-link undone"


def document_title(path: str | None) -> str:
    return PurePosixPath(path).stem if path else ""


class AutoLinkEngine:
    """Owns the index, the decision state and the undo ledger for one vault.

    Settings come from a ``SettingsManager`` (re-read by ``apply_settings``)
    or a fixed ``AutoLinkSettings`` snapshot.
    """

    def __init__(
        self,
        vault: InMemoryVault,
        settings: SettingsManager | AutoLinkSettings | None = None,
        *,
        view: SuggestionView | None = None,
        notify: Callable[[str], None] | None = None,
        clock: Clock | None = None,
        keybindings: AutoLinkKeybindingsManager | None = None,
    ) -> None:
        self._vault = vault
        self._settings_manager = settings if isinstance(settings, SettingsManager) else None
        if self._settings_manager is not None:
            self._settings = self._settings_manager.snapshot()
        else:
            self._settings = settings if isinstance(settings, AutoLinkSettings) else AutoLinkSettings()
        self._policy = ModePolicy.for_settings(self._settings)
        self._notify = notify
        self._keybindings = keybindings or get_autolink_keybindings()

        self.context = EngineContext(clock)
        self.index = TitleIndex(
            case_sensitive=self._settings.case_sensitive,
            include_aliases=self._settings.include_aliases,
        )
        self.resolver = MatchResolver(self.index, self._settings.max_suggestions)
        self.disambiguator = Disambiguator(self.resolver, self._settings.min_word_length)
        self.applier = EditApplier(self.context)
        self.sessions = SessionOwner(view)

        self._active_path: str | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self._debounced = Debouncer(self.handle_editor_change, self._settings.debounce_ms)

        self.rebuild_index()

    # --- Lifecycle ---

    def start(self) -> None:
        """Subscribe to vault lifecycle events."""
        if self._unsubscribe is None:
            self._unsubscribe = self._vault.subscribe(self._on_vault_event)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._debounced.cancel()
        self.sessions.close()
        self.disambiguator.reset()

    # --- Settings ---

    @property
    def settings(self) -> AutoLinkSettings:
        return self._settings

    @property
    def policy(self) -> ModePolicy:
        return self._policy

    @property
    def state(self) -> DisambiguationState:
        return self.disambiguator.state

    def apply_settings(self, settings: AutoLinkSettings | None = None) -> None:
        """Adopt new settings (or re-read the manager) and rebuild the index."""
        if settings is None:
            if self._settings_manager is None:
                return
            settings = self._settings_manager.snapshot()

        self._settings = settings
        self._policy = ModePolicy.for_settings(settings)
        self.index.configure(
            case_sensitive=settings.case_sensitive,
            include_aliases=settings.include_aliases,
        )
        self.resolver.max_suggestions = settings.max_suggestions
        self.disambiguator.min_word_length = settings.min_word_length
        self.disambiguator.reset()
        self.sessions.close()
        if settings.debounce_ms != self._debounced.delay_ms:
            self._debounced.set_delay(settings.debounce_ms)
        self.rebuild_index()

    # --- Index ---

    def rebuild_index(self) -> None:
        active = self._vault.get(self._active_path) if self._active_path else None
        self.index.rebuild(
            self._policy.scope,
            self._vault.markdown_documents(),
            active_document=active,
            custom_folders=self._policy.custom_folders,
        )

    def set_active_document(self, path: str | None) -> None:
        """Record the document being edited; folder scope follows it."""
        if path == self._active_path:
            return
        self._active_path = path
        self.disambiguator.reset()
        if self._policy.scope == "folder":
            self.rebuild_index()

    def _on_vault_event(self, event: VaultEvent) -> None:
        logger.debug("Vault %s: %s", event.kind, event.path)
        self.rebuild_index()

    # --- Text changes ---

    def on_editor_change(self, editor: EditorHost) -> None:
        """Text-change hook for hosts; evaluation runs after the debounce delay."""
        if self.context.mutating:
            return
        self._debounced(editor)

    def handle_editor_change(self, editor: EditorHost) -> Decision | None:
        """Evaluate the current cursor position now.

        Returns the decision taken, or None while auto-linking is suppressed.
        """
        if self.context.suppression.active:
            return None
        if editor.document_path != self._active_path:
            self.set_active_document(editor.document_path)

        cursor = editor.get_cursor()
        line = editor.get_line(cursor.line)

        if is_inside_link(line, cursor.ch):
            self.sessions.close()
            self.disambiguator.reset()
            return Close("inside link")

        decision = self.disambiguator.evaluate(
            line,
            cursor.ch,
            self._policy,
            exclude_title=document_title(editor.document_path),
        )

        if isinstance(decision, AutoApply):
            self.sessions.close()
            self.applier.apply(editor, decision.fragment, decision.candidate)
        elif isinstance(decision, Offer):
            self._open_session(editor, decision)
        elif isinstance(decision, (Close, Wait)):
            self.sessions.close()

        return decision

    # --- Suggestion sessions ---

    def _open_session(self, editor: EditorHost, offer: Offer) -> SuggestionSession | None:
        session = SuggestionSession(
            editor,
            offer.fragment,
            offer.candidates,
            enter_accepts=self._policy.enter_accepts,
            keybindings=self._keybindings,
            max_visible=self._settings.max_suggestions,
        )
        session.on_accept = self._accept_suggestion
        return self.sessions.open(session)

    def _accept_suggestion(self, session: SuggestionSession, candidate: Candidate) -> None:
        editor = session.editor
        cursor = editor.get_cursor()
        fragment = _locate_fragment(editor.get_line(cursor.line), cursor.ch, session.fragment)
        if fragment is None:
            logger.debug("Typed text %r is gone; nothing to link", session.fragment.text)
            return
        self.apply_candidate(editor, fragment, candidate)

    def apply_candidate(self, editor: EditorHost, fragment: Fragment, candidate: Candidate) -> LinkEdit:
        """Link *fragment* to *candidate* and forget pending state."""
        edit = self.applier.apply(editor, fragment, candidate)
        self.disambiguator.reset()
        return edit

    # --- Keys and undo ---

    def handle_key(self, editor: EditorHost, event: KeyEvent) -> bool:
        """Offer a key press to the engine; True means the host must not handle it."""
        session = self.sessions.session
        if session is not None and session.editor is editor and session.handle_key(event):
            return True

        kb = self._keybindings
        if kb.matches(event.key, "undoAutolink"):
            return self.undo_last_autolink(editor)
        if kb.matches(event.key, "deleteCharBackward"):
            return self._implicit_undo(editor, forward=False)
        if kb.matches(event.key, "deleteCharForward"):
            return self._implicit_undo(editor, forward=True)
        return False

    def undo_last_autolink(self, editor: EditorHost) -> bool:
        """Restore the line as it was before the latest auto-link."""
        record = self.applier.undo_latest(editor)
        if record is None:
            return False
        self.sessions.close()
        self.disambiguator.reset()
        if self._notify:
            self._notify(UNDO_NOTICE)
        return True

    def _implicit_undo(self, editor: EditorHost, *, forward: bool) -> bool:
        record = self.context.ledger.peek_latest()
        if record is None:
            return False
        cursor = editor.get_cursor()
        if cursor.line != record.line or cursor.line >= editor.line_count():
            return False
        applies = implicit_undo_applies(
            record,
            editor.get_line(cursor.line),
            cursor,
            forward=forward,
            now=self.context.clock(),
        )
        if not applies:
            return False
        return self.undo_last_autolink(editor)


def _locate_fragment(line: str, cursor_ch: int, fragment: Fragment) -> Fragment | None:
    """Find *fragment* again in *line*: at its old span, else last before the cursor."""
    if fragment.end <= cursor_ch and line[fragment.start : fragment.end] == fragment.text:
        return fragment
    start = line[:cursor_ch].rfind(fragment.text)
    if start == -1:
        return None
    return Fragment(text=fragment.text, start=start, end=start + len(fragment.text))
