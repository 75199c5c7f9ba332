"""
Score parser for set-based results.

Supports formats like:
  "6-4 6-3"          → 2 sets
  "6-4, 3-6, 7-5"    → comma-separated variant
  [{"a": 6, "b": 4}, {"a": 6, "b": 3}]   → structured sets
  {"sets": [...]} / {"display": "6-4 6-3"} → wrapped forms

"a" is always player_a's games, "b" player_b's.
Returns None on parse failure (non-fatal); callers decide how to report it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from league.models.outcome import SetScore


@dataclass
class ParsedScore:
    sets: List[SetScore]
    a_sets_won: int
    b_sets_won: int
    a_games: int
    b_games: int


def parse_score(raw: Any) -> Optional[ParsedScore]:
    """Parse a score string, a list of set dicts, or a wrapping dict.

    Returns None if the score cannot be parsed.
    """
    if not raw:
        return None

    if isinstance(raw, str):
        return _parse_score_string(raw.strip())
    if isinstance(raw, (list, tuple)):
        return _parse_structured_sets(raw)
    if isinstance(raw, dict):
        if isinstance(raw.get("sets"), list):
            return _parse_structured_sets(raw["sets"])
        text = str(raw.get("display") or raw.get("score") or "")
        if text.strip():
            return _parse_score_string(text.strip())
    return None


def summarize_sets(sets: Sequence[SetScore]) -> ParsedScore:
    return ParsedScore(
        sets=list(sets),
        a_sets_won=sum(1 for s in sets if s.a_games > s.b_games),
        b_sets_won=sum(1 for s in sets if s.b_games > s.a_games),
        a_games=sum(s.a_games for s in sets),
        b_games=sum(s.b_games for s in sets),
    )


def format_score(sets: Sequence[SetScore]) -> str:
    """'6-4 6-3' style display string from player_a's perspective."""
    return " ".join(f"{s.a_games}-{s.b_games}" for s in sets)


def _game_count(value: Any) -> Optional[int]:
    # bool is an int subclass; a set needs real game counts
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _parse_structured_sets(sets_list: Sequence[Any]) -> Optional[ParsedScore]:
    sets: List[SetScore] = []
    for s in sets_list:
        if isinstance(s, SetScore):
            sets.append(s)
            continue
        if not isinstance(s, dict):
            return None
        a = _game_count(s.get("a"))
        b = _game_count(s.get("b"))
        if a is None or b is None:
            return None
        sets.append(SetScore(a_games=a, b_games=b))
    if not sets:
        return None
    return summarize_sets(sets)


def _parse_score_string(raw: str) -> Optional[ParsedScore]:
    """Parse strings like '6-4', '6-4 6-3', '6-4, 3-6, 7-5'."""
    # Normalize: replace commas with spaces, collapse whitespace
    normalized = raw.replace(",", " ").strip()
    parts = normalized.split()

    sets: List[SetScore] = []
    for part in parts:
        pair = part.split("-")
        if len(pair) != 2:
            return None
        try:
            a = int(pair[0])
            b = int(pair[1])
        except ValueError:
            return None
        sets.append(SetScore(a_games=a, b_games=b))

    if not sets:
        return None

    return summarize_sets(sets)
