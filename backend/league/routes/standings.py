from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session, select

from league.database import get_session
from league.exceptions import LeagueError
from league.models.player import Player
from league.services.standings_service import get_standings
from league.utils.http_errors import http_error

router = APIRouter()


class StandingRow(BaseModel):
    position: Optional[int]
    player_id: int
    player_name: str
    matches_played: int
    matches_won: int
    matches_lost: int
    matches_won_by_wo: int
    matches_lost_by_wo: int
    matches_not_reported: int
    points: int
    sets_won: int
    sets_lost: int
    set_difference: int
    games_won: int
    games_lost: int
    game_difference: int
    updated_at: datetime


@router.get("/categories/{category_id}/standings", response_model=List[StandingRow])
def read_standings(category_id: int, session: Session = Depends(get_session)):
    """Standings as of the last round close"""
    try:
        rows = get_standings(session, category_id)
    except LeagueError as e:
        raise http_error(e)

    player_ids = [r.player_id for r in rows]
    players = {p.id: p for p in session.exec(select(Player).where(Player.id.in_(player_ids))).all()} if rows else {}

    return [
        StandingRow(
            position=r.position,
            player_id=r.player_id,
            player_name=players[r.player_id].display_name if r.player_id in players else f"Player {r.player_id}",
            matches_played=r.matches_played,
            matches_won=r.matches_won,
            matches_lost=r.matches_lost,
            matches_won_by_wo=r.matches_won_by_wo,
            matches_lost_by_wo=r.matches_lost_by_wo,
            matches_not_reported=r.matches_not_reported,
            points=r.points,
            sets_won=r.sets_won,
            sets_lost=r.sets_lost,
            set_difference=r.sets_won - r.sets_lost,
            games_won=r.games_won,
            games_lost=r.games_lost,
            game_difference=r.games_won - r.games_lost,
            updated_at=r.updated_at,
        )
        for r in rows
    ]
