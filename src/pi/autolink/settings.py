"""Auto-link settings with JSON persistence, and the per-mode policy.

Settings are stored as camelCase keys in a single JSON file. The manager
tracks which fields were modified in this session and writes back only
those, so edits made to the file by other processes survive.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Literal, get_args

CONFIG_DIR_NAME = ".pi"
SETTINGS_FILE_NAME = "autolink.json"

AutoLinkMode = Literal["autonomous", "semiAutonomous", "suggestions", "custom"]

ScopeMode = Literal["global", "folder", "custom"]

AUTOLINK_MODES: tuple[str, ...] = get_args(AutoLinkMode)

# Sentinel in customFolders that matches every path
ROOT_FOLDER_SENTINEL = "/"


# --- Settings schema ---


@dataclass(frozen=True)
class AutoLinkSettings:
    """Snapshot of the recognized options."""

    mode: AutoLinkMode = "autonomous"
    min_word_length: int = 3
    case_sensitive: bool = False
    include_aliases: bool = True
    custom_folders: tuple[str, ...] = ()
    debounce_ms: int = 300
    max_suggestions: int = 10
    custom_allow_enter_accept: bool = True
    custom_auto_insert_single_match: bool = True

    def with_changes(self, **changes: Any) -> AutoLinkSettings:
        return replace(self, **changes)


def _settings_defaults() -> dict[str, Any]:
    """Default settings values, keyed as they are persisted."""
    return {
        "mode": "autonomous",
        "minWordLength": 3,
        "caseSensitive": False,
        "includeAliases": True,
        "customFolders": [],
        "debounceMs": 300,
        "maxSuggestions": 10,
        "customAllowEnterAccept": True,
        "customAutoInsertSingleMatch": True,
    }


def _clamp(value: Any, low: int, high: int, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return max(low, min(high, number))


def _flag(value: Any, default: bool) -> bool:
    # Hand-edited "false" strings must not read as True
    return value if isinstance(value, bool) else default


def normalize_folder(folder: str) -> str:
    """Normalize a user-entered vault folder.

    Backslashes become ``/``, repeated and surrounding slashes are
    dropped; the root folder stays as the ``/`` sentinel.
    """
    cleaned = folder.strip().replace("\\", "/")
    if not cleaned:
        return ""
    if cleaned.strip("/") == "":
        return ROOT_FOLDER_SENTINEL
    parts = [p for p in cleaned.split("/") if p and p != "."]
    return "/".join(parts)


def normalize_folders(folders: str | list[str] | tuple[str, ...]) -> list[str]:
    """Normalize a folder list, or a comma-separated string of folders."""
    raw = folders.split(",") if isinstance(folders, str) else list(folders)
    result: list[str] = []
    for folder in raw:
        if not isinstance(folder, str):
            continue
        normalized = normalize_folder(folder)
        if normalized and normalized not in result:
            result.append(normalized)
    return result


# --- Mode policy ---


@dataclass(frozen=True)
class ModePolicy:
    """What a mode decides automatically and what it leaves to the user.

    Built once from settings; the engine dispatches on it per event instead
    of re-checking the mode string.
    """

    mode: AutoLinkMode
    scope: ScopeMode
    link_on_completion: bool
    insert_single_match: bool
    open_suggestions: bool
    enter_accepts: bool
    custom_folders: tuple[str, ...] = field(default=())

    @classmethod
    def for_settings(cls, settings: AutoLinkSettings) -> ModePolicy:
        mode = settings.mode
        if mode == "semiAutonomous":
            return cls(
                mode=mode,
                scope="folder",
                link_on_completion=True,
                insert_single_match=False,
                open_suggestions=False,
                enter_accepts=False,
            )
        if mode == "suggestions":
            return cls(
                mode=mode,
                scope="global",
                link_on_completion=False,
                insert_single_match=False,
                open_suggestions=True,
                enter_accepts=True,
            )
        if mode == "custom":
            return cls(
                mode=mode,
                scope="custom" if settings.custom_folders else "global",
                link_on_completion=False,
                insert_single_match=settings.custom_auto_insert_single_match,
                open_suggestions=True,
                enter_accepts=settings.custom_allow_enter_accept,
                custom_folders=settings.custom_folders,
            )
        return cls(
            mode="autonomous",
            scope="global",
            link_on_completion=True,
            insert_single_match=False,
            open_suggestions=False,
            enter_accepts=False,
        )


# --- SettingsManager ---


class SettingsManager:
    """Manages auto-link settings with JSON file persistence.

    Use factory methods (create, in_memory) instead of calling constructor directly.
    """

    def __init__(
        self,
        *,
        settings_path: str | None,
        initial_settings: dict[str, Any],
        persist: bool = True,
        load_error: Exception | None = None,
    ) -> None:
        self._settings_path = settings_path
        self._stored = dict(initial_settings)
        self._persist = persist
        self._load_error = load_error
        self._modified_fields: set[str] = set()

    # --- Factory methods ---

    @classmethod
    def create(cls, config_dir: str | None = None) -> SettingsManager:
        """Create a settings manager with file persistence."""
        cdir = config_dir or _default_config_dir()
        settings_path = os.path.join(cdir, SETTINGS_FILE_NAME)
        settings, error = _load_from_file(settings_path)
        return cls(
            settings_path=settings_path,
            initial_settings=settings,
            persist=True,
            load_error=error,
        )

    @classmethod
    def in_memory(cls, settings: dict[str, Any] | None = None) -> SettingsManager:
        """Create an in-memory settings manager for testing."""
        return cls(
            settings_path=None,
            initial_settings=settings or {},
            persist=False,
        )

    # --- Core operations ---

    def reload(self) -> None:
        """Reload settings from disk, dropping unsaved modification tracking."""
        if self._settings_path:
            self._stored, self._load_error = _load_from_file(self._settings_path)
        self._modified_fields.clear()

    @property
    def load_error(self) -> Exception | None:
        return self._load_error

    @property
    def raw(self) -> dict[str, Any]:
        """Stored settings merged over defaults."""
        merged = _settings_defaults()
        merged.update({k: v for k, v in self._stored.items() if v is not None})
        return merged

    def snapshot(self) -> AutoLinkSettings:
        """Validated, immutable view of the current settings."""
        raw = self.raw
        defaults = AutoLinkSettings()
        mode = raw.get("mode")
        folders = raw.get("customFolders")
        return AutoLinkSettings(
            mode=mode if mode in AUTOLINK_MODES else defaults.mode,
            min_word_length=_clamp(raw.get("minWordLength"), 1, 10, defaults.min_word_length),
            case_sensitive=_flag(raw.get("caseSensitive"), defaults.case_sensitive),
            include_aliases=_flag(raw.get("includeAliases"), defaults.include_aliases),
            custom_folders=tuple(
                normalize_folders(folders) if isinstance(folders, (list, str)) else ()
            ),
            debounce_ms=_clamp(raw.get("debounceMs"), 50, 1000, defaults.debounce_ms),
            max_suggestions=_clamp(raw.get("maxSuggestions"), 1, 20, defaults.max_suggestions),
            custom_allow_enter_accept=_flag(
                raw.get("customAllowEnterAccept"), defaults.custom_allow_enter_accept
            ),
            custom_auto_insert_single_match=_flag(
                raw.get("customAutoInsertSingleMatch"), defaults.custom_auto_insert_single_match
            ),
        )

    # --- Persistence ---

    def _set(self, field_name: str, value: Any) -> None:
        self._stored[field_name] = value
        self._modified_fields.add(field_name)
        self._save()

    def _save(self) -> None:
        """Write only modified fields, preserving external changes."""
        if not (self._persist and self._settings_path):
            return
        # Don't overwrite corrupted files
        if self._load_error:
            return

        current_file, _ = _load_from_file(self._settings_path)
        merged: dict[str, Any] = dict(current_file)
        for field_name in self._modified_fields:
            merged[field_name] = self._stored.get(field_name)
        merged = {k: v for k, v in merged.items() if v is not None}

        os.makedirs(os.path.dirname(self._settings_path), exist_ok=True)
        Path(self._settings_path).write_text(
            json.dumps(merged, indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )

    # --- Getters ---

    def get_mode(self) -> AutoLinkMode:
        return self.snapshot().mode

    def get_min_word_length(self) -> int:
        return self.snapshot().min_word_length

    def get_case_sensitive(self) -> bool:
        return self.snapshot().case_sensitive

    def get_include_aliases(self) -> bool:
        return self.snapshot().include_aliases

    def get_custom_folders(self) -> list[str]:
        return list(self.snapshot().custom_folders)

    def get_debounce_ms(self) -> int:
        return self.snapshot().debounce_ms

    def get_max_suggestions(self) -> int:
        return self.snapshot().max_suggestions

    # --- Setters ---

    def set_mode(self, mode: AutoLinkMode) -> None:
        if mode not in AUTOLINK_MODES:
            raise ValueError(f"Unknown mode: {mode!r}")
        self._set("mode", mode)

    def set_min_word_length(self, length: int) -> None:
        self._set("minWordLength", max(1, min(10, int(length))))

    def set_case_sensitive(self, enabled: bool) -> None:
        self._set("caseSensitive", bool(enabled))

    def set_include_aliases(self, enabled: bool) -> None:
        self._set("includeAliases", bool(enabled))

    def set_custom_folders(self, folders: str | list[str]) -> None:
        self._set("customFolders", normalize_folders(folders))

    def set_debounce_ms(self, delay: int) -> None:
        self._set("debounceMs", max(50, min(1000, int(delay))))

    def set_max_suggestions(self, count: int) -> None:
        self._set("maxSuggestions", max(1, min(20, int(count))))

    def set_custom_allow_enter_accept(self, enabled: bool) -> None:
        self._set("customAllowEnterAccept", bool(enabled))

    def set_custom_auto_insert_single_match(self, enabled: bool) -> None:
        self._set("customAutoInsertSingleMatch", bool(enabled))


# --- File helpers ---


def _load_from_file(path: str) -> tuple[dict[str, Any], Exception | None]:
    """Load settings from a JSON file. Returns (settings, error)."""
    if not os.path.exists(path):
        return {}, None
    try:
        content = Path(path).read_text(encoding="utf-8")
        settings = json.loads(content)
    except (OSError, json.JSONDecodeError) as e:
        return {}, e
    if not isinstance(settings, dict):
        return {}, ValueError(f"Settings file {path} does not contain an object")
    return settings, None


def _default_config_dir() -> str:
    """Default configuration directory (~/.pi)."""
    return os.path.join(os.path.expanduser("~"), CONFIG_DIR_NAME)
