"""Key events and key identifier matching.

Hosts report key presses either as named key identifiers (``"enter"``,
``"ctrl+z"``, ``"3"``) or as raw terminal input, which ``parse_key``
decodes for the legacy sequences a suggestion session cares about.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

# ---------------------------------------------------------------------------
# Type alias
# ---------------------------------------------------------------------------

KeyId = str

KeySource = Literal["editor", "session", "other"]

# ---------------------------------------------------------------------------
# Key helper object
# ---------------------------------------------------------------------------


class Key:
    """Named key constants and modifier combinators."""

    escape = "escape"
    enter = "enter"
    tab = "tab"
    space = "space"
    backspace = "backspace"
    delete = "delete"
    up = "up"
    down = "down"
    left = "left"
    right = "right"
    home = "home"
    end = "end"

    @staticmethod
    def ctrl(key: str) -> str:
        return f"ctrl+{key}"

    @staticmethod
    def shift(key: str) -> str:
        return f"shift+{key}"

    @staticmethod
    def alt(key: str) -> str:
        return f"alt+{key}"


_ALIASES: dict[str, str] = {
    "esc": "escape",
    "return": "enter",
    "arrowup": "up",
    "arrowdown": "down",
    "arrowleft": "left",
    "arrowright": "right",
    "del": "delete",
    " ": "space",
}

_MODIFIER_ORDER = ("ctrl", "alt", "shift", "meta")

# Legacy terminal sequences
_LEGACY_SEQUENCES: dict[str, KeyId] = {
    "\x1b": "escape",
    "\r": "enter",
    "\n": "enter",
    "\t": "tab",
    "\x1b[Z": "shift+tab",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\x1b[3~": "delete",
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1b[1~": "home",
    "\x1b[4~": "end",
}


def normalize_key_id(key_id: str) -> KeyId:
    """Canonical form of a key identifier.

    Lower-cases names, resolves aliases (``esc``, ``ArrowUp``, ``Return``)
    and orders modifiers as ctrl, alt, shift, meta.
    """
    if len(key_id) == 1:
        return _ALIASES.get(key_id, key_id.lower())

    # "ctrl++" binds the plus key
    if key_id.endswith("++"):
        mod_parts, base = key_id[:-2].split("+"), "+"
    else:
        *mod_parts, base = key_id.split("+")

    base = base.lower()
    base = _ALIASES.get(base, base)
    mods = {p.lower() for p in mod_parts if p}
    ordered = [m for m in _MODIFIER_ORDER if m in mods]
    return "+".join([*ordered, base])


def parse_key(data: str) -> KeyId | None:
    """Decode raw terminal input into a key identifier.

    Handles printable characters, control characters (``\\x01`` is
    ``ctrl+a``) and the legacy escape sequences for arrows, editing and
    navigation keys. Returns None for input it does not recognize.
    """
    if not data:
        return None

    legacy = _LEGACY_SEQUENCES.get(data)
    if legacy is not None:
        return legacy

    if len(data) == 1:
        cp = ord(data)
        if cp == 0x20:
            return "space"
        if 1 <= cp <= 26:
            return f"ctrl+{chr(cp + 96)}"
        if cp >= 0x20:
            return _shifted(data)
        return None

    # Alt+<char> arrives as ESC followed by the character
    if len(data) == 2 and data[0] == "\x1b" and data[1] >= " ":
        inner = parse_key(data[1])
        return f"alt+{inner}" if inner else None

    return None


def _shifted(char: str) -> KeyId:
    if char.isalpha() and char.isupper():
        return f"shift+{char.lower()}"
    return char


def matches_key(data: str, key_id: KeyId) -> bool:
    """Check whether *data* corresponds to *key_id*.

    *data* may be a key identifier or raw terminal input.
    """
    wanted = normalize_key_id(key_id)
    if normalize_key_id(data) == wanted:
        return True
    parsed = parse_key(data)
    return parsed is not None and parsed == wanted


def digit_value(key_id: KeyId) -> int | None:
    """Return 1-9 for the digit keys, otherwise None."""
    key = normalize_key_id(key_id)
    if len(key) == 1 and key in "123456789":
        return int(key)
    return None


# ---------------------------------------------------------------------------
# Key events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KeyEvent:
    """A key press observed by the engine.

    ``source`` names the surface the event originated from. Sessions only
    consume keys coming from the editor or from the session itself.
    """

    key: KeyId
    source: KeySource = "editor"

    @classmethod
    def from_terminal(cls, data: str, source: KeySource = "editor") -> KeyEvent | None:
        """Build an event from raw terminal input, or None if undecodable."""
        key = parse_key(data)
        return cls(key=key, source=source) if key is not None else None

    @property
    def normalized(self) -> KeyId:
        return normalize_key_id(self.key)
