from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import String
from sqlmodel import Column, Field, SQLModel


class PlayerStatus(str, Enum):
    active = "active"
    inactive = "inactive"


class Player(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    notes: Optional[str] = None
    status: PlayerStatus = Field(default=PlayerStatus.active, sa_column=Column(String, nullable=False))

    # Category the player joined with, and the one they currently play in
    initial_category_id: Optional[int] = Field(default=None, foreign_key="category.id")
    current_category_id: Optional[int] = Field(default=None, foreign_key="category.id", index=True)

    deactivated_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
