from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import String
from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from league.models.category import Category
    from league.models.match import Match


class RoundStatus(str, Enum):
    pending = "pending"  # Created, not yet open for submissions
    active = "active"  # Open, players may submit results
    completed = "completed"  # Closed by an administrator
    expired = "expired"  # Closed automatically after the play window elapsed


CLOSED_STATUSES = frozenset({RoundStatus.completed, RoundStatus.expired})


class Round(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("category_id", "round_number", name="uq_category_round_number"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    category_id: int = Field(foreign_key="category.id", index=True)
    round_number: int  # 1-based, contiguous within the category
    period_start: date
    period_end: date  # Inclusive
    status: RoundStatus = Field(default=RoundStatus.pending, sa_column=Column(String, nullable=False))
    closed_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    category: "Category" = Relationship(back_populates="rounds")
    matches: List["Match"] = Relationship(
        back_populates="round", sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )
