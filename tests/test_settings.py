"""Tests for pi.autolink.settings -- persisted options and mode policies."""

from __future__ import annotations

import json

import pytest

from pi.autolink.settings import (
    AutoLinkSettings,
    ModePolicy,
    SettingsManager,
    normalize_folder,
    normalize_folders,
)


class TestDefaults:
    def test_in_memory_defaults(self) -> None:
        settings = SettingsManager.in_memory().snapshot()
        assert settings == AutoLinkSettings()
        assert settings.mode == "autonomous"
        assert settings.min_word_length == 3
        assert settings.case_sensitive is False
        assert settings.include_aliases is True
        assert settings.custom_folders == ()
        assert settings.debounce_ms == 300
        assert settings.max_suggestions == 10
        assert settings.custom_allow_enter_accept is True
        assert settings.custom_auto_insert_single_match is True


class TestSnapshotValidation:
    def test_unknown_mode_falls_back(self) -> None:
        assert SettingsManager.in_memory({"mode": "turbo"}).get_mode() == "autonomous"

    def test_ranges_clamped(self) -> None:
        manager = SettingsManager.in_memory(
            {"minWordLength": 50, "debounceMs": 5, "maxSuggestions": 0}
        )
        settings = manager.snapshot()
        assert settings.min_word_length == 10
        assert settings.debounce_ms == 50
        assert settings.max_suggestions == 1

    def test_non_numeric_uses_default(self) -> None:
        assert SettingsManager.in_memory({"debounceMs": "soon"}).get_debounce_ms() == 300

    def test_non_boolean_flags_use_default(self) -> None:
        settings = SettingsManager.in_memory(
            {
                "caseSensitive": "false",
                "includeAliases": "no",
                "customAllowEnterAccept": 0,
                "customAutoInsertSingleMatch": "false",
            }
        ).snapshot()
        assert settings.case_sensitive is False
        assert settings.include_aliases is True
        assert settings.custom_allow_enter_accept is True
        assert settings.custom_auto_insert_single_match is True

    def test_boolean_flags_kept(self) -> None:
        settings = SettingsManager.in_memory(
            {"caseSensitive": True, "includeAliases": False}
        ).snapshot()
        assert settings.case_sensitive is True
        assert settings.include_aliases is False

    def test_comma_separated_folders(self) -> None:
        manager = SettingsManager.in_memory({"customFolders": "Projects, Archive/2024/"})
        assert manager.get_custom_folders() == ["Projects", "Archive/2024"]


class TestSetters:
    def test_setters_clamp(self) -> None:
        manager = SettingsManager.in_memory()
        manager.set_min_word_length(0)
        manager.set_debounce_ms(5000)
        manager.set_max_suggestions(25)
        assert manager.get_min_word_length() == 1
        assert manager.get_debounce_ms() == 1000
        assert manager.get_max_suggestions() == 20

    def test_set_mode_rejects_unknown(self) -> None:
        with pytest.raises(ValueError):
            SettingsManager.in_memory().set_mode("turbo")  # type: ignore[arg-type]

    def test_set_mode(self) -> None:
        manager = SettingsManager.in_memory()
        manager.set_mode("suggestions")
        assert manager.get_mode() == "suggestions"


class TestPersistence:
    def test_writes_camel_case_json(self, tmp_path) -> None:
        manager = SettingsManager.create(str(tmp_path))
        manager.set_mode("custom")
        manager.set_custom_folders(["Projects/"])
        data = json.loads((tmp_path / "autolink.json").read_text())
        assert data == {"mode": "custom", "customFolders": ["Projects"]}

    def test_only_modified_fields_written(self, tmp_path) -> None:
        path = tmp_path / "autolink.json"
        path.write_text(json.dumps({"debounceMs": 500}))
        manager = SettingsManager.create(str(tmp_path))
        # Another process edits the file meanwhile
        path.write_text(json.dumps({"debounceMs": 700}))
        manager.set_case_sensitive(True)
        data = json.loads(path.read_text())
        assert data == {"debounceMs": 700, "caseSensitive": True}

    def test_loads_existing_file(self, tmp_path) -> None:
        (tmp_path / "autolink.json").write_text(json.dumps({"mode": "semiAutonomous"}))
        assert SettingsManager.create(str(tmp_path)).get_mode() == "semiAutonomous"

    def test_corrupted_file_not_overwritten(self, tmp_path) -> None:
        path = tmp_path / "autolink.json"
        path.write_text("{not json")
        manager = SettingsManager.create(str(tmp_path))
        assert manager.load_error is not None
        manager.set_mode("suggestions")
        assert path.read_text() == "{not json"
        assert manager.get_mode() == "suggestions"

    def test_non_object_file_is_an_error(self, tmp_path) -> None:
        (tmp_path / "autolink.json").write_text("[1, 2]")
        manager = SettingsManager.create(str(tmp_path))
        assert manager.load_error is not None
        assert manager.snapshot() == AutoLinkSettings()

    def test_reload(self, tmp_path) -> None:
        path = tmp_path / "autolink.json"
        manager = SettingsManager.create(str(tmp_path))
        path.write_text(json.dumps({"maxSuggestions": 4}))
        manager.reload()
        assert manager.get_max_suggestions() == 4


class TestNormalizeFolder:
    def test_cleanup(self) -> None:
        assert normalize_folder("  Projects/ ") == "Projects"
        assert normalize_folder("a\\b//c/") == "a/b/c"

    def test_root_sentinel(self) -> None:
        assert normalize_folder("/") == "/"
        assert normalize_folder("//") == "/"

    def test_blank(self) -> None:
        assert normalize_folder("   ") == ""

    def test_list_drops_blanks_and_duplicates(self) -> None:
        assert normalize_folders(["Projects", "Projects/", "", "/"]) == ["Projects", "/"]


class TestModePolicy:
    def test_autonomous(self) -> None:
        policy = ModePolicy.for_settings(AutoLinkSettings())
        assert policy.scope == "global"
        assert policy.link_on_completion
        assert not policy.open_suggestions

    def test_semi_autonomous_uses_folder_scope(self) -> None:
        policy = ModePolicy.for_settings(AutoLinkSettings(mode="semiAutonomous"))
        assert policy.scope == "folder"
        assert policy.link_on_completion

    def test_suggestions(self) -> None:
        policy = ModePolicy.for_settings(AutoLinkSettings(mode="suggestions"))
        assert policy.open_suggestions
        assert policy.enter_accepts
        assert not policy.link_on_completion
        assert not policy.insert_single_match

    def test_custom_follows_settings(self) -> None:
        settings = AutoLinkSettings(
            mode="custom",
            custom_folders=("Projects",),
            custom_allow_enter_accept=False,
            custom_auto_insert_single_match=False,
        )
        policy = ModePolicy.for_settings(settings)
        assert policy.scope == "custom"
        assert policy.custom_folders == ("Projects",)
        assert not policy.enter_accepts
        assert not policy.insert_single_match
        assert policy.open_suggestions

    def test_custom_without_folders_is_global(self) -> None:
        assert ModePolicy.for_settings(AutoLinkSettings(mode="custom")).scope == "global"
