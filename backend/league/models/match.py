from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import JSON, CheckConstraint, String
from sqlmodel import Column, Field, Relationship, SQLModel

from league.models.outcome import (
    Decisive,
    Outcome,
    OutcomeKind,
    SetScore,
    Undecided,
    Unreported,
    Walkover,
    sets_to_json,
)

if TYPE_CHECKING:
    from league.models.round import Round


class Match(SQLModel, table=True):
    __table_args__ = (CheckConstraint("player_a_id <> player_b_id", name="ck_match_distinct_players"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    category_id: int = Field(foreign_key="category.id", index=True)
    round_id: int = Field(foreign_key="round.id", index=True)
    sequence_in_round: int = Field(default=1)

    player_a_id: int = Field(foreign_key="player.id", index=True)
    player_b_id: int = Field(foreign_key="player.id", index=True)

    # Outcome encoding (written only through set_outcome)
    outcome_kind: str = Field(default=OutcomeKind.undecided.value, sa_column=Column(String, nullable=False))
    winner_id: Optional[int] = Field(default=None, foreign_key="player.id")
    sets_json: Optional[List[Dict[str, Any]]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    walkover_reason: Optional[str] = Field(default=None)
    result_loaded_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    round: "Round" = Relationship(back_populates="matches")

    @property
    def outcome(self) -> Outcome:
        kind = OutcomeKind(self.outcome_kind or OutcomeKind.undecided.value)
        if kind == OutcomeKind.decisive:
            sets = tuple(SetScore.from_json(s) for s in (self.sets_json or []))
            return Decisive(winner_id=self.winner_id, sets=sets)
        if kind == OutcomeKind.walkover:
            return Walkover(winner_id=self.winner_id, reason=self.walkover_reason)
        if kind == OutcomeKind.unreported:
            return Unreported()
        return Undecided()

    def set_outcome(self, outcome: Outcome, loaded_at: Optional[datetime] = None) -> None:
        """Overwrite the stored outcome with a single variant."""
        self.outcome_kind = outcome.kind.value
        self.winner_id = None
        self.sets_json = None
        self.walkover_reason = None

        if isinstance(outcome, Decisive):
            self.winner_id = outcome.winner_id
            self.sets_json = sets_to_json(outcome.sets)
        elif isinstance(outcome, Walkover):
            self.winner_id = outcome.winner_id
            self.walkover_reason = outcome.reason

        if isinstance(outcome, Undecided):
            self.result_loaded_at = None
        else:
            self.result_loaded_at = loaded_at or datetime.utcnow()

    def involves(self, player_id: int) -> bool:
        return player_id in (self.player_a_id, self.player_b_id)

    def opponent_of(self, player_id: int) -> int:
        return self.player_b_id if player_id == self.player_a_id else self.player_a_id
