"""Fuzzy matching of a search pattern against a list of strings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

FIRST_CHAR_MATCH_BONUS = 10
MATCH_FOLLOWING_SEPARATOR_BONUS = 20
CAMEL_CASE_MATCH_BONUS = 20
ADJACENT_MATCH_BONUS = 5
UNMATCHED_LEADING_CHAR_PENALTY = -5
MAX_UNMATCHED_LEADING_CHAR_PENALTY = -15

SEPARATORS = frozenset("/-_ .\\")


@dataclass
class Match:
    """A string that matched, where in the input it came from, and how well."""

    text: str
    index: int
    matched_indexes: list[int] = field(default_factory=list)
    score: int = 0


def _same(a: str, b: str) -> bool:
    return a.casefold() == b.casefold()


def _match(pattern: str, text: str, index: int) -> Match | None:
    matched: list[int] = []
    total = 0
    pattern_index = 0
    best = -1
    matched_index = -1
    adjacent_bonus = 0
    last = ""
    last_index = 0

    for position, candidate in enumerate(text):
        if pattern_index >= len(pattern):
            break
        if _same(candidate, pattern[pattern_index]):
            score = 0
            if position == 0:
                score += FIRST_CHAR_MATCH_BONUS
            if last.islower() and candidate.isupper():
                score += CAMEL_CASE_MATCH_BONUS
            if position != 0 and last in SEPARATORS:
                score += MATCH_FOLLOWING_SEPARATOR_BONUS
            if matched:
                # Runs of adjacent matches earn a growing bonus.
                bonus = adjacent_bonus * 2 + ADJACENT_MATCH_BONUS if matched[-1] == last_index else 0
                score += bonus
                adjacent_bonus += bonus
            if score > best:
                best = score
                matched_index = position

        next_pattern = pattern[pattern_index + 1] if pattern_index < len(pattern) - 1 else ""
        next_char = text[position + 1] if position + 1 < len(text) else ""
        # Commit the best candidate only once the next pattern character is
        # about to appear, so later and better placed matches are preferred.
        if (_same(next_pattern, next_char) or not next_char) and matched_index > -1:
            if not matched:
                best += max(matched_index * UNMATCHED_LEADING_CHAR_PENALTY, MAX_UNMATCHED_LEADING_CHAR_PENALTY)
            total += best
            matched.append(matched_index)
            best = -1
            matched_index = -1
            pattern_index += 1

        last_index = position
        last = candidate

    total += len(matched) - len(text)
    if len(matched) != len(pattern):
        return None
    return Match(text=text, index=index, matched_indexes=matched, score=total)


def find(pattern: str, items: Iterable[str]) -> list[Match]:
    """Items containing the characters of ``pattern`` in order, best first.

    Matching ignores case. An empty pattern matches nothing.
    """
    if not pattern:
        return []
    matches = [m for i, item in enumerate(items) if (m := _match(pattern, item, i)) is not None]
    matches.sort(key=lambda m: m.score, reverse=True)
    return matches