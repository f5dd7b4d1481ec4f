"""Tests for pi.autolink.cli -- click commands over a folder vault."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from pi.autolink.cli import main


@pytest.fixture
def vault(tmp_path):
    root = tmp_path / "vault"
    (root / "Projects").mkdir(parents=True)
    (root / "Note.md").write_text("plain\n", encoding="utf-8")
    (root / "Note with Space.md").write_text("plain\n", encoding="utf-8")
    (root / "Deep Work.md").write_text("---\naliases: [Focus]\n---\n", encoding="utf-8")
    (root / "Projects" / "Alpha.md").write_text("alpha\n", encoding="utf-8")
    return root


def _invoke(tmp_path, *args: str):
    config_dir = tmp_path / "config"
    return CliRunner().invoke(main, ["--config-dir", str(config_dir), *args])


class TestTitles:
    def test_lists_titles_and_aliases(self, tmp_path, vault) -> None:
        result = _invoke(tmp_path, "titles", str(vault))
        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert "Alpha\tProjects/Alpha.md" in lines
        assert "Focus\talias of Deep Work" in lines

    def test_missing_vault(self, tmp_path) -> None:
        result = _invoke(tmp_path, "titles", str(tmp_path / "missing"))
        assert result.exit_code != 0


class TestMatch:
    def test_prints_candidates(self, tmp_path, vault) -> None:
        result = _invoke(tmp_path, "match", str(vault), "note")
        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert len(lines) == 2
        assert lines[0].startswith("→ 1. Note with Space")
        assert lines[0].endswith("Note with Space.md")
        assert lines[1].startswith("  2. Note ")
        assert lines[1].endswith("Note.md")

    def test_alias_candidate(self, tmp_path, vault) -> None:
        result = _invoke(tmp_path, "match", str(vault), "foc")
        lines = result.output.splitlines()
        assert lines[0].startswith("→ 1. Focus")
        assert lines[0].endswith("alias of Deep Work")

    def test_narrow_width(self, tmp_path, vault) -> None:
        result = _invoke(tmp_path, "match", str(vault), "note", "--width", "20")
        assert result.exit_code == 0, result.output
        assert all(len(line) <= 20 for line in result.output.splitlines())
        assert "Note with Space.md" not in result.output

    def test_no_matches(self, tmp_path, vault) -> None:
        result = _invoke(tmp_path, "match", str(vault), "zzz")
        assert result.output.strip() == "No matches"

    def test_case_sensitive_flag(self, tmp_path, vault) -> None:
        result = _invoke(tmp_path, "--case-sensitive", "match", str(vault), "note")
        assert result.output.strip() == "No matches"


class TestType:
    def test_links_unique_words(self, tmp_path, vault) -> None:
        result = _invoke(tmp_path, "type", str(vault), "Alpha Focus ")
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "[[Alpha]] [[Deep Work|Focus]]"

    def test_ambiguous_word_left_alone(self, tmp_path, vault) -> None:
        result = _invoke(tmp_path, "type", str(vault), "Note ")
        assert result.output.rstrip("\n") == "Note "

    def test_semi_autonomous_mode(self, tmp_path, vault) -> None:
        result = _invoke(
            tmp_path, "--mode", "semiAutonomous", "type", str(vault), "Alpha ",
            "--document", "Note.md",
        )
        assert result.output.rstrip("\n") == "Alpha "

    def test_stored_settings_apply(self, tmp_path, vault) -> None:
        config_dir = tmp_path / "config"
        config_dir.mkdir()
        (config_dir / "autolink.json").write_text(json.dumps({"caseSensitive": True}))
        result = _invoke(tmp_path, "type", str(vault), "alpha ")
        assert result.output.rstrip("\n") == "alpha "


class TestGroup:
    def test_help_without_command(self, tmp_path) -> None:
        result = _invoke(tmp_path)
        assert result.exit_code == 0
        assert "titles" in result.output
