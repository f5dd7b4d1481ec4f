"""Keybindings for suggestion sessions and link undo."""

from __future__ import annotations

from typing import Literal

from pi.autolink.keys import KeyId, matches_key

AutoLinkAction = Literal[
    # Suggestion navigation
    "selectUp",
    "selectDown",
    # Accepting
    "acceptEnter",
    "acceptTab",
    # Closing
    "selectCancel",
    # Implicit undo
    "deleteCharBackward",
    "deleteCharForward",
    # Explicit undo command
    "undoAutolink",
]

AutoLinkKeybindingsConfig = dict[AutoLinkAction, KeyId | list[KeyId]]

DEFAULT_AUTOLINK_KEYBINDINGS: dict[AutoLinkAction, KeyId | list[KeyId]] = {
    # Suggestion navigation
    "selectUp": "up",
    "selectDown": "down",
    # Accepting
    "acceptEnter": "enter",
    "acceptTab": "tab",
    # Closing
    "selectCancel": "escape",
    # Implicit undo
    "deleteCharBackward": "backspace",
    "deleteCharForward": "delete",
    # Explicit undo command
    "undoAutolink": "ctrl+alt+z",
}


class AutoLinkKeybindingsManager:
    """Maps actions to the keys bound to them, defaults first then overrides."""

    def __init__(
        self, config: AutoLinkKeybindingsConfig | None = None
    ) -> None:
        self._action_to_keys: dict[AutoLinkAction, list[KeyId]] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: AutoLinkKeybindingsConfig) -> None:
        self._action_to_keys.clear()

        for action, keys in DEFAULT_AUTOLINK_KEYBINDINGS.items():
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = list(key_array)

        for action, keys in config.items():
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = list(key_array)

    def matches(self, data: str, action: AutoLinkAction) -> bool:
        """Check if input matches a specific action."""
        keys = self._action_to_keys.get(action)
        if not keys:
            return False
        return any(matches_key(data, key) for key in keys)

    def get_keys(self, action: AutoLinkAction) -> list[KeyId]:
        """Get keys bound to an action."""
        return self._action_to_keys.get(action, [])

    def set_config(self, config: AutoLinkKeybindingsConfig) -> None:
        """Update configuration."""
        self._build_maps(config)


_global_keybindings: AutoLinkKeybindingsManager | None = None


def get_autolink_keybindings() -> AutoLinkKeybindingsManager:
    global _global_keybindings
    if _global_keybindings is None:
        _global_keybindings = AutoLinkKeybindingsManager()
    return _global_keybindings


def set_autolink_keybindings(manager: AutoLinkKeybindingsManager) -> None:
    global _global_keybindings
    _global_keybindings = manager
