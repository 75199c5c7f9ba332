from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, field_validator
from sqlmodel import Session, or_, select

from league.database import get_session
from league.exceptions import LeagueError, PlayerInUseError, PlayerNotFoundError
from league.models.category import Category
from league.models.match import Match
from league.models.player import Player, PlayerStatus
from league.models.standing import Standing
from league.utils.http_errors import http_error

router = APIRouter()


class PlayerCreate(BaseModel):
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    notes: Optional[str] = None
    category_id: Optional[int] = None

    @field_validator("first_name", "last_name", "email")
    @classmethod
    def validate_required(cls, v):
        if not v or not v.strip():
            raise ValueError("field is required")
        return v.strip()


class PlayerUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None
    current_category_id: Optional[int] = None


class PlayerResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone: Optional[str]
    notes: Optional[str]
    status: str
    initial_category_id: Optional[int]
    current_category_id: Optional[int]
    deactivated_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


def _get_player(session: Session, player_id: int) -> Player:
    player = session.get(Player, player_id)
    if not player:
        raise PlayerNotFoundError(player_id)
    return player


def _require_category(session: Session, category_id: Optional[int]) -> None:
    if category_id is not None and not session.get(Category, category_id):
        raise HTTPException(status_code=404, detail="Category not found")


@router.get("/players", response_model=List[PlayerResponse])
def list_players(
    category_id: Optional[int] = None,
    status: Optional[PlayerStatus] = None,
    session: Session = Depends(get_session),
):
    """List players in alphabetical order, optionally filtered by current category and status"""
    stmt = select(Player)
    if category_id is not None:
        stmt = stmt.where(Player.current_category_id == category_id)
    if status is not None:
        stmt = stmt.where(Player.status == status.value)
    return session.exec(stmt.order_by(Player.last_name, Player.first_name, Player.id)).all()


@router.post("/players", response_model=PlayerResponse, status_code=201)
def create_player(player_data: PlayerCreate, session: Session = Depends(get_session)):
    _require_category(session, player_data.category_id)
    data = player_data.model_dump(exclude={"category_id"})
    player = Player(
        **data,
        status=PlayerStatus.active.value,
        initial_category_id=player_data.category_id,
        current_category_id=player_data.category_id,
    )
    session.add(player)
    session.commit()
    session.refresh(player)
    return player


@router.get("/players/{player_id}", response_model=PlayerResponse)
def get_player(player_id: int, session: Session = Depends(get_session)):
    try:
        return _get_player(session, player_id)
    except LeagueError as e:
        raise http_error(e)


@router.put("/players/{player_id}", response_model=PlayerResponse)
def update_player(player_id: int, player_data: PlayerUpdate, session: Session = Depends(get_session)):
    """Update contact data or move the player to another category"""
    try:
        player = _get_player(session, player_id)
    except LeagueError as e:
        raise http_error(e)

    updates = player_data.model_dump(exclude_unset=True)
    if "current_category_id" in updates:
        _require_category(session, updates["current_category_id"])

    for key, value in updates.items():
        if isinstance(value, str):
            value = value.strip() or None
        if key in ("first_name", "last_name", "email") and not value:
            raise HTTPException(status_code=422, detail=f"{key} cannot be empty")
        setattr(player, key, value)
    player.updated_at = datetime.utcnow()
    session.add(player)
    session.commit()
    session.refresh(player)
    return player


@router.delete("/players/{player_id}", status_code=204)
def delete_player(player_id: int, session: Session = Depends(get_session)):
    """Delete a player with no matches or standings; otherwise deactivate instead"""
    try:
        player = _get_player(session, player_id)
        in_use = session.exec(
            select(Match.id).where(or_(Match.player_a_id == player_id, Match.player_b_id == player_id)).limit(1)
        ).first()
        if in_use is None:
            in_use = session.exec(select(Standing.id).where(Standing.player_id == player_id).limit(1)).first()
        if in_use is not None:
            raise PlayerInUseError(player_id)
    except LeagueError as e:
        raise http_error(e)

    session.delete(player)
    session.commit()
    return Response(status_code=204)


@router.post("/players/{player_id}/deactivate", response_model=PlayerResponse)
def deactivate_player(player_id: int, session: Session = Depends(get_session)):
    """Exclude the player from future fixtures. Existing matches and standings are kept."""
    try:
        player = _get_player(session, player_id)
    except LeagueError as e:
        raise http_error(e)

    if player.status != PlayerStatus.inactive.value:
        player.status = PlayerStatus.inactive.value
        player.deactivated_at = datetime.utcnow()
        session.add(player)
        session.commit()
        session.refresh(player)
    return player


@router.post("/players/{player_id}/reactivate", response_model=PlayerResponse)
def reactivate_player(player_id: int, session: Session = Depends(get_session)):
    try:
        player = _get_player(session, player_id)
    except LeagueError as e:
        raise http_error(e)

    if player.status != PlayerStatus.active.value:
        player.status = PlayerStatus.active.value
        player.deactivated_at = None
        session.add(player)
        session.commit()
        session.refresh(player)
    return player
