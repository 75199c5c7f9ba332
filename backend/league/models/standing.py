from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from league.models.category import Category


class Standing(SQLModel, table=True):
    """Derived standings row. Rebuilt from matches on round close, never patched."""

    __table_args__ = (SAUniqueConstraint("category_id", "player_id", name="uq_category_player_standing"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    category_id: int = Field(foreign_key="category.id", index=True)
    player_id: int = Field(foreign_key="player.id")

    matches_played: int = Field(default=0)
    matches_won: int = Field(default=0)
    matches_lost: int = Field(default=0)
    matches_won_by_wo: int = Field(default=0)
    matches_lost_by_wo: int = Field(default=0)
    matches_not_reported: int = Field(default=0)
    points: int = Field(default=0)
    sets_won: int = Field(default=0)
    sets_lost: int = Field(default=0)
    games_won: int = Field(default=0)
    games_lost: int = Field(default=0)
    position: Optional[int] = Field(default=None)  # 1-based rank

    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    category: "Category" = Relationship(back_populates="standings")
