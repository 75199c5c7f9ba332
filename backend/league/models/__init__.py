from league.models.category import Category
from league.models.match import Match
from league.models.outcome import (
    Decisive,
    Outcome,
    OutcomeKind,
    SetScore,
    Undecided,
    Unreported,
    Walkover,
)
from league.models.player import Player, PlayerStatus
from league.models.round import Round, RoundStatus
from league.models.standing import Standing

__all__ = [
    "Category",
    "Player",
    "PlayerStatus",
    "Round",
    "RoundStatus",
    "Match",
    "Standing",
    "Outcome",
    "OutcomeKind",
    "SetScore",
    "Undecided",
    "Decisive",
    "Walkover",
    "Unreported",
]
