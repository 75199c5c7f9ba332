"""
Match outcome variants.

A match is in exactly one of four states. Storage columns on Match are only
ever written from one of these values (Match.set_outcome), so combinations
such as "winner without sets" cannot be persisted.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union


class OutcomeKind(str, Enum):
    undecided = "undecided"
    decisive = "decisive"
    walkover = "walkover"
    unreported = "unreported"


@dataclass(frozen=True)
class SetScore:
    a_games: int  # games won by player_a
    b_games: int  # games won by player_b

    @property
    def winner_side(self) -> Optional[str]:
        """'a', 'b' or None for a tied set."""
        if self.a_games > self.b_games:
            return "a"
        if self.b_games > self.a_games:
            return "b"
        return None

    def to_json(self) -> Dict[str, int]:
        return {"a": self.a_games, "b": self.b_games}

    @classmethod
    def from_json(cls, raw: Dict[str, Any]) -> "SetScore":
        return cls(a_games=int(raw.get("a", 0)), b_games=int(raw.get("b", 0)))


@dataclass(frozen=True)
class Undecided:
    kind = OutcomeKind.undecided


@dataclass(frozen=True)
class Decisive:
    winner_id: int
    sets: Tuple[SetScore, ...] = field(default_factory=tuple)
    kind = OutcomeKind.decisive


@dataclass(frozen=True)
class Walkover:
    winner_id: int
    reason: Optional[str] = None
    kind = OutcomeKind.walkover


@dataclass(frozen=True)
class Unreported:
    kind = OutcomeKind.unreported


Outcome = Union[Undecided, Decisive, Walkover, Unreported]


def has_winner(outcome: Outcome) -> bool:
    return isinstance(outcome, (Decisive, Walkover))


def sets_to_json(sets: Sequence[SetScore]) -> List[Dict[str, int]]:
    return [s.to_json() for s in sets]
