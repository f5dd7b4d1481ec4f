"""Wait-and-see decisions for the word being typed.

Typing ``Note`` when both ``Note`` and ``Note with Space`` exist must not
link ``Note`` straight away. A word is linked automatically only when a
delimiter completes it and, at that instant, exactly one candidate
matches it. While a word is still ambiguous nothing is forced.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Literal

from pi.autolink.resolver import Candidate, MatchResolver
from pi.autolink.settings import ModePolicy
from pi.autolink.utils import is_delimiter_char

logger = logging.getLogger(__name__)

# Word, space, hyphen and underscore characters immediately before the cursor
_FRAGMENT_RE = re.compile(r"[\w\s\-_]+$")

DisambiguationState = Literal["typing", "ambiguous", "resolved"]


@dataclass(frozen=True)
class Fragment:
    """Typed text before the cursor, trimmed, with its [start, end) span."""

    text: str
    start: int
    end: int


def extract_fragment(line: str, column: int) -> Fragment | None:
    """The word-like run ending at *column*, or None if there is none.

    Surrounding whitespace is trimmed from the text and excluded from the
    span; an all-whitespace run yields an empty fragment.
    """
    match = _FRAGMENT_RE.search(line[:column])
    if match is None:
        return None
    raw = match.group(0)
    leading = len(raw) - len(raw.lstrip())
    text = raw.strip()
    start = match.start() + leading
    return Fragment(text=text, start=start, end=start + len(text))


# ============================================================================
# Decisions
# ============================================================================


@dataclass(frozen=True)
class Close:
    """Nothing to match: close any session and forget pending state."""

    reason: str


@dataclass(frozen=True)
class Wait:
    """Keep typing; no popup, no link."""

    fragment: Fragment
    candidates: list[Candidate] = field(default_factory=list)


@dataclass(frozen=True)
class AutoApply:
    """Link *fragment* to *candidate* without asking."""

    fragment: Fragment
    candidate: Candidate


@dataclass(frozen=True)
class Offer:
    """Let the user choose among *candidates* for *fragment*."""

    fragment: Fragment
    candidates: list[Candidate]


Decision = Close | Wait | AutoApply | Offer


# ============================================================================
# Disambiguator
# ============================================================================


class Disambiguator:
    """Turns each text change into a decision, remembering candidates per prefix.

    The pending cache maps each typed prefix to the candidates it had when
    it was typed. It is cleared when a link is applied or the fragment is
    abandoned.
    """

    def __init__(self, resolver: MatchResolver, min_word_length: int = 3) -> None:
        self._resolver = resolver
        self.min_word_length = min_word_length
        self._pending: dict[str, list[Candidate]] = {}
        self._state: DisambiguationState = "typing"

    @property
    def state(self) -> DisambiguationState:
        return self._state

    @property
    def pending(self) -> dict[str, list[Candidate]]:
        return dict(self._pending)

    def reset(self) -> None:
        self._pending.clear()
        self._state = "typing"

    def evaluate(
        self,
        line: str,
        column: int,
        policy: ModePolicy,
        exclude_title: str = "",
    ) -> Decision:
        """Decide what to do for the cursor at *column* in *line*.

        The caller has already checked that the cursor is not inside a link.
        """
        fragment = extract_fragment(line, column)
        if fragment is None:
            self.reset()
            return Close("no fragment")
        if len(fragment.text) < self.min_word_length:
            self.reset()
            return Close("fragment too short")

        matches = self._resolver.find_matches(fragment.text, exclude_title)
        self._pending[fragment.text] = matches
        self._state = self._state_for(matches)

        just_typed = line[column - 1] if column > 0 else ""
        if policy.link_on_completion and is_delimiter_char(just_typed):
            completed = extract_fragment(line, column - 1)
            if completed is not None and len(completed.text) >= self.min_word_length:
                completed_matches = self._resolver.find_matches(completed.text, exclude_title)
                if len(completed_matches) == 1:
                    logger.debug("Completed word %r resolves uniquely", completed.text)
                    self.reset()
                    return AutoApply(completed, completed_matches[0])

        if not matches:
            self.reset()
            return Close("no candidates")
        if not policy.open_suggestions:
            return Wait(fragment, matches)
        if policy.insert_single_match and len(matches) == 1:
            self.reset()
            return AutoApply(fragment, matches[0])
        return Offer(fragment, matches)

    @staticmethod
    def _state_for(matches: list[Candidate]) -> DisambiguationState:
        if len(matches) > 1:
            return "ambiguous"
        if len(matches) == 1:
            return "resolved"
        return "typing"
