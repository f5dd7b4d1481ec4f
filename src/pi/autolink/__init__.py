"""pi-autolink: turns typed note titles into wikilinks while you write."""

# Context and undo
from pi.autolink.context import SUPPRESSION_COOLDOWN_S, AutoLinkSuppression, EngineContext

# Disambiguation
from pi.autolink.disambiguation import (
    AutoApply,
    Close,
    Decision,
    Disambiguator,
    DisambiguationState,
    Fragment,
    Offer,
    Wait,
    extract_fragment,
)

# Edits
from pi.autolink.edit_applier import EditApplier, LinkEdit, apply_link

# Engine
from pi.autolink.engine import UNDO_NOTICE, AutoLinkEngine

# Host collaborators
from pi.autolink.host import EditorHost, Position, TextBuffer

# Keybindings
from pi.autolink.keybindings import (
    DEFAULT_AUTOLINK_KEYBINDINGS,
    AutoLinkAction,
    AutoLinkKeybindingsManager,
    get_autolink_keybindings,
    set_autolink_keybindings,
)

# Keyboard input handling
from pi.autolink.keys import Key, KeyEvent, KeyId, matches_key, parse_key

# Link syntax
from pi.autolink.link_syntax import LinkSpan, build_link, find_links, is_inside_link

# Matching
from pi.autolink.resolver import Candidate, MatchResolver

# Settings
from pi.autolink.settings import (
    AutoLinkMode,
    AutoLinkSettings,
    ModePolicy,
    ScopeMode,
    SettingsManager,
)

# Suggestions
from pi.autolink.suggestions import (
    SessionOwner,
    SuggestionList,
    SuggestionListTheme,
    SuggestionSession,
    SuggestionView,
)

# Title index
from pi.autolink.title_index import IndexEntry, TitleIndex
from pi.autolink.undo_ledger import UndoLedger, UndoRecord, implicit_undo_applies

# Utilities
from pi.autolink.utils import common_prefix, truncate_to_width, visible_width

# Vault
from pi.autolink.vault import DirectoryVault, Document, InMemoryVault, VaultEvent

__all__ = [
    # Context and undo
    "SUPPRESSION_COOLDOWN_S",
    "AutoLinkSuppression",
    "EngineContext",
    "UndoLedger",
    "UndoRecord",
    "implicit_undo_applies",
    # Disambiguation
    "AutoApply",
    "Close",
    "Decision",
    "Disambiguator",
    "DisambiguationState",
    "Fragment",
    "Offer",
    "Wait",
    "extract_fragment",
    # Edits
    "EditApplier",
    "LinkEdit",
    "apply_link",
    # Engine
    "UNDO_NOTICE",
    "AutoLinkEngine",
    # Host collaborators
    "EditorHost",
    "Position",
    "TextBuffer",
    # Keybindings
    "DEFAULT_AUTOLINK_KEYBINDINGS",
    "AutoLinkAction",
    "AutoLinkKeybindingsManager",
    "get_autolink_keybindings",
    "set_autolink_keybindings",
    # Keys
    "Key",
    "KeyEvent",
    "KeyId",
    "matches_key",
    "parse_key",
    # Link syntax
    "LinkSpan",
    "build_link",
    "find_links",
    "is_inside_link",
    # Matching
    "Candidate",
    "MatchResolver",
    # Settings
    "AutoLinkMode",
    "AutoLinkSettings",
    "ModePolicy",
    "ScopeMode",
    "SettingsManager",
    # Suggestions
    "SessionOwner",
    "SuggestionList",
    "SuggestionListTheme",
    "SuggestionSession",
    "SuggestionView",
    # Title index
    "IndexEntry",
    "TitleIndex",
    # Utilities
    "common_prefix",
    "truncate_to_width",
    "visible_width",
    # Vault
    "DirectoryVault",
    "Document",
    "InMemoryVault",
    "VaultEvent",
]
