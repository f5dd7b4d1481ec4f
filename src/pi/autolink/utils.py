"""Terminal text utilities: width measurement and truncation.

Used to lay out suggestion lists for terminal hosts. Widths are measured
per grapheme cluster so that emoji and CJK titles do not break columns.
"""

from __future__ import annotations

import re
import unicodedata

import grapheme
import wcwidth as _wcwidth

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*[mGKHJ]")

# Characters that end a word while typing
_DELIMITER_RE = re.compile(r"[\s.,!?;:()\[\]{}|\\/<>@#$%^&*+=~`\"'-]")

# ---------------------------------------------------------------------------
# Width cache (capped at 512 entries)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


def _grapheme_width(g: str) -> int:
    """Return the terminal display width of a single grapheme cluster."""
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        # VS16, ZWJ, skin tones and regional indicators render as emoji
        if cp in (0xFE0F, 0x200D) or 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2

    first = g[0]
    if ord(first) >= 0x1F000:
        return 2
    if unicodedata.category(first).startswith("M"):
        return 0
    return max(_wcwidth.wcwidth(first), 0)


def visible_width(text: str) -> int:
    """Calculate the visible terminal width of *text* (ANSI codes ignored)."""
    if not text:
        return 0

    stripped = _ANSI_RE.sub("", text).replace("\t", "   ")
    if not stripped:
        return 0

    if all(0x20 <= ord(ch) <= 0x7E for ch in stripped):
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = sum(_grapheme_width(g) for g in grapheme.graphemes(stripped))
    return _cache_width(stripped, total)


def truncate_to_width(
    text: str,
    max_width: int,
    ellipsis: str = "...",
    pad: bool = False,
) -> str:
    """Truncate *text* to fit within *max_width* visible columns.

    The text is cut at grapheme boundaries and *ellipsis* (which counts
    towards the width) is appended when anything was removed. With
    ``pad=True`` the result is right-padded to exactly *max_width*.
    """
    if max_width <= 0:
        return ""

    text_width = visible_width(text)
    if text_width <= max_width:
        if pad:
            return text + " " * (max_width - text_width)
        return text

    target_width = max_width - visible_width(ellipsis)
    if target_width <= 0:
        return _take_columns(ellipsis, max_width)

    result = _take_columns(text, target_width) + ellipsis
    if pad:
        result += " " * max(0, max_width - visible_width(result))
    return result


def _take_columns(text: str, max_cols: int) -> str:
    result: list[str] = []
    cols = 0
    for g in grapheme.graphemes(text):
        w = _grapheme_width(g)
        if cols + w > max_cols:
            break
        result.append(g)
        cols += w
    return "".join(result)


# ---------------------------------------------------------------------------
# Character classification
# ---------------------------------------------------------------------------


def is_delimiter_char(char: str) -> bool:
    """Return ``True`` if *char* completes a word (whitespace or punctuation)."""
    return bool(char) and bool(_DELIMITER_RE.fullmatch(char))


def common_prefix(strings: list[str]) -> str:
    """Longest prefix shared by every string in *strings*."""
    if not strings:
        return ""
    first = strings[0]
    for i, char in enumerate(first):
        if any(i >= len(s) or s[i] != char for s in strings[1:]):
            return first[:i]
    return first
