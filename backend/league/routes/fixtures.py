from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlmodel import Session

from league.config import LeagueSettings, get_settings
from league.database import get_session
from league.exceptions import LeagueError
from league.routes.matches import MatchResponse, match_to_response
from league.services.schedule_generator import delete_fixture, generate_fixture, get_fixture
from league.utils.http_errors import http_error

router = APIRouter()


class FixtureGenerateRequest(BaseModel):
    start_date: date
    round_length_days: Optional[int] = Field(default=None, ge=1)


class FixtureGenerateResponse(BaseModel):
    category_id: int
    rounds_created: int
    matches_created: int
    standings_created: int
    byes: List[Optional[int]]


class FixtureDeleteResponse(BaseModel):
    category_id: int
    rounds_deleted: int
    matches_deleted: int
    standings_deleted: int


class FixtureRound(BaseModel):
    id: int
    round_number: int
    period_start: date
    period_end: date
    status: str
    matches: List[MatchResponse]


@router.post("/categories/{category_id}/fixture", response_model=FixtureGenerateResponse, status_code=201)
def create_fixture(
    category_id: int,
    request: FixtureGenerateRequest,
    session: Session = Depends(get_session),
    settings: LeagueSettings = Depends(get_settings),
):
    """Generate the full round-robin fixture and the initial standings of a category"""
    try:
        return generate_fixture(
            session,
            category_id,
            start_date=request.start_date,
            round_length_days=request.round_length_days,
            settings=settings,
        )
    except LeagueError as e:
        raise http_error(e)


@router.delete("/categories/{category_id}/fixture", response_model=FixtureDeleteResponse)
def remove_fixture(category_id: int, session: Session = Depends(get_session)):
    """Delete the fixture of a category. Refused once any result was loaded."""
    try:
        return delete_fixture(session, category_id)
    except LeagueError as e:
        raise http_error(e)


@router.get("/categories/{category_id}/fixture", response_model=List[FixtureRound])
def read_fixture(category_id: int, session: Session = Depends(get_session)):
    try:
        rounds = get_fixture(session, category_id)
    except LeagueError as e:
        raise http_error(e)

    return [
        FixtureRound(
            id=r.id,
            round_number=r.round_number,
            period_start=r.period_start,
            period_end=r.period_end,
            status=r.status,
            matches=[match_to_response(m) for m in sorted(r.matches, key=lambda m: m.sequence_in_round)],
        )
        for r in rounds
    ]
