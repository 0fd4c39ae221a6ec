"""Fuzzy matching utilities.

Matches if all query characters appear in order (not necessarily consecutive),
ignoring case. Higher score = better match.

Scoring rewards matched characters that sit on a word boundary (start of the
text, or right after a separator such as ``-``, space or ``_``), runs of
consecutive matches, and short texts; gaps between matches are penalised.
Within a consecutive run every character inherits the strongest bonus seen
in that run, so an exact match of the whole text is the best score a query
can get.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from apekey.model import Keybind, MatchResult

SCORE_MATCH = 16
BONUS_BOUNDARY = 10
BONUS_CAMEL = 7
BONUS_CONSECUTIVE = 4
PENALTY_GAP_START = 3
PENALTY_GAP_EXTENSION = 1
PENALTY_LENGTH = 0.1

_SEPARATORS = frozenset(" \t-_/.:,+|<>()[]")
_NEG = float("-inf")


@dataclass
class FuzzyMatch:
    matches: bool
    score: float
    positions: list[int] = field(default_factory=list)


def _bonus_at(text: str, i: int) -> int:
    if i == 0:
        return BONUS_BOUNDARY
    prev = text[i - 1]
    ch = text[i]
    if prev in _SEPARATORS:
        return BONUS_BOUNDARY
    if prev.islower() and ch.isupper():
        return BONUS_CAMEL
    return 0


def _fold(ch: str) -> str:
    # one code point per character, so indices stay those of the original
    # text ("\u0130".lower() is two code points)
    return ch.lower()[:1] or ch


def _is_subsequence(query: list[str], text: list[str]) -> bool:
    it = iter(text)
    return all(ch in it for ch in query)


def fuzzy_match(query: str, text: str) -> FuzzyMatch:
    """Score the best alignment of *query* inside *text*."""
    query_lower = [_fold(ch) for ch in query]
    text_lower = [_fold(ch) for ch in text]

    if len(query_lower) == 0:
        return FuzzyMatch(matches=True, score=0)

    if len(query_lower) > len(text_lower) or not _is_subsequence(
        query_lower, text_lower
    ):
        return FuzzyMatch(matches=False, score=0)

    n = len(text_lower)
    m = len(query_lower)
    bonuses = [_bonus_at(text, i) for i in range(n)]

    # scores[j][i]: best score with query[: j + 1] matched and query[j] at i
    scores = [[_NEG] * n for _ in range(m)]
    run_bonus = [[0] * n for _ in range(m)]
    back = [[-1] * n for _ in range(m)]

    for i in range(n):
        if text_lower[i] == query_lower[0]:
            scores[0][i] = SCORE_MATCH + bonuses[i]
            run_bonus[0][i] = bonuses[i]

    for j in range(1, m):
        prev = scores[j - 1]
        prev_run = run_bonus[j - 1]
        # best predecessor at least two columns back, normalised so the
        # affine gap penalty can be applied once per cell
        best_gap = _NEG
        best_gap_at = -1

        for i in range(1, n):
            k = i - 2
            if k >= 0 and prev[k] != _NEG:
                candidate = prev[k] + PENALTY_GAP_EXTENSION * k
                if candidate > best_gap:
                    best_gap = candidate
                    best_gap_at = k

            if text_lower[i] != query_lower[j]:
                continue

            best = _NEG
            pred = -1
            bonus = bonuses[i]

            if best_gap != _NEG:
                best = (
                    best_gap
                    - PENALTY_GAP_START
                    - PENALTY_GAP_EXTENSION * (i - 2)
                    + SCORE_MATCH
                    + bonuses[i]
                )
                pred = best_gap_at

            if prev[i - 1] != _NEG:
                run = max(prev_run[i - 1], bonuses[i])
                candidate = prev[i - 1] + SCORE_MATCH + max(run, BONUS_CONSECUTIVE)
                if candidate >= best:
                    best = candidate
                    pred = i - 1
                    bonus = run

            if pred >= 0:
                scores[j][i] = best
                back[j][i] = pred
                run_bonus[j][i] = bonus

    last = scores[m - 1]
    end = max(range(n), key=lambda i: (last[i], -i))
    if last[end] == _NEG:
        return FuzzyMatch(matches=False, score=0)

    positions = [end]
    for j in range(m - 1, 0, -1):
        positions.append(back[j][positions[-1]])
    positions.reverse()

    score = last[end] - PENALTY_LENGTH * (n - m)
    return FuzzyMatch(matches=True, score=score, positions=positions)


def search(query: str, keybinds: Sequence[Keybind]) -> list[MatchResult]:
    """Filter and rank *keybinds* against *query* (best matches first).

    A keybind is kept when the query matches its keys, its description, or
    both; its score is the better of the two. Ties keep their original order.
    An empty query keeps everything, unranked.
    """
    query = query.strip()
    if not query:
        return [MatchResult(keybind=k) for k in keybinds]

    results: list[MatchResult] = []
    for keybind in keybinds:
        keys_match = fuzzy_match(query, keybind.keys)
        desc_match = fuzzy_match(query, keybind.description)
        if not keys_match.matches and not desc_match.matches:
            continue

        field_scores = [
            match.score for match in (keys_match, desc_match) if match.matches
        ]
        results.append(
            MatchResult(
                keybind=keybind,
                score=max(field_scores),
                key_positions=tuple(keys_match.positions) if keys_match.matches else None,
                description_positions=(
                    tuple(desc_match.positions) if desc_match.matches else None
                ),
            )
        )

    # list.sort is stable, so equal scores keep source order
    results.sort(key=lambda r: r.score, reverse=True)
    return results
