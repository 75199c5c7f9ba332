from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from league.models.round import Round
    from league.models.standing import Standing


class Category(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    season_year: int
    display_order: int = Field(default=0)  # Ordering within a season (ascending)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    rounds: List["Round"] = Relationship(back_populates="category")
    standings: List["Standing"] = Relationship(back_populates="category")
