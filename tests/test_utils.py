"""Tests for pi.autolink.utils -- width helpers and character classes."""

from __future__ import annotations

import pytest

from pi.autolink.utils import common_prefix, is_delimiter_char, truncate_to_width, visible_width


class TestVisibleWidth:
    def test_ascii(self) -> None:
        assert visible_width("hello") == 5

    def test_empty(self) -> None:
        assert visible_width("") == 0

    def test_ansi_codes_ignored(self) -> None:
        assert visible_width("\x1b[31mred\x1b[0m") == 3

    def test_wide_characters(self) -> None:
        assert visible_width("日本") == 4


class TestTruncateToWidth:
    def test_short_text_unchanged(self) -> None:
        assert truncate_to_width("abc", 10) == "abc"

    def test_truncates_with_ellipsis(self) -> None:
        assert truncate_to_width("abcdefghij", 6) == "abc..."

    def test_custom_ellipsis(self) -> None:
        assert truncate_to_width("abcdefghij", 4, "") == "abcd"

    def test_pad(self) -> None:
        assert truncate_to_width("ab", 5, pad=True) == "ab   "

    def test_wide_characters_not_split(self) -> None:
        assert truncate_to_width("日本語", 5, "") == "日本"

    def test_non_positive_width(self) -> None:
        assert truncate_to_width("abc", 0) == ""


class TestIsDelimiterChar:
    @pytest.mark.parametrize("char", [" ", "\t", ".", ",", "!", "?", ";", ":", ")", "]", "-", "'", '"'])
    def test_delimiters(self, char: str) -> None:
        assert is_delimiter_char(char)

    @pytest.mark.parametrize("char", ["a", "Z", "5", "_", ""])
    def test_word_characters(self, char: str) -> None:
        assert not is_delimiter_char(char)


class TestCommonPrefix:
    def test_shared_prefix(self) -> None:
        assert common_prefix(["Note", "Note with Space", "Notebook"]) == "Note"

    def test_no_shared_prefix(self) -> None:
        assert common_prefix(["Alpha", "Beta"]) == ""

    def test_single_and_empty(self) -> None:
        assert common_prefix(["Only"]) == "Only"
        assert common_prefix([]) == ""
