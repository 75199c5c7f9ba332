from dataclasses import asdict
from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, model_validator
from sqlmodel import Session

from league.config import LeagueSettings, get_settings
from league.database import get_session
from league.exceptions import LeagueError
from league.services import round_lifecycle
from league.services.auto_expiry import local_today
from league.services.schedule_generator import update_round_dates
from league.utils.http_errors import http_error

router = APIRouter()


class RoundResponse(BaseModel):
    id: int
    category_id: int
    round_number: int
    period_start: date
    period_end: date
    status: str
    closed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RoundDatesUpdate(BaseModel):
    period_start: date
    period_end: date

    @model_validator(mode="after")
    def validate_date_range(self):
        if self.period_end < self.period_start:
            raise ValueError("period_end must be >= period_start")
        return self


class RoundExpireResponse(BaseModel):
    round_id: int
    category_id: int
    round_number: int
    unreported_marked: int
    next_round_activated: Optional[int] = None


@router.post("/rounds/{round_id}/activate", response_model=RoundResponse)
def activate_round(round_id: int, session: Session = Depends(get_session)):
    try:
        return round_lifecycle.activate(session, round_id)
    except LeagueError as e:
        raise http_error(e)


@router.post("/rounds/{round_id}/close", response_model=RoundResponse)
def close_round(
    round_id: int,
    session: Session = Depends(get_session),
    settings: LeagueSettings = Depends(get_settings),
):
    """Close the round and rebuild standings. 409 with unresolved_count if matches are missing results."""
    try:
        return round_lifecycle.close(session, round_id, settings=settings)
    except LeagueError as e:
        raise http_error(e)


@router.post("/rounds/{round_id}/reopen", response_model=RoundResponse)
def reopen_round(round_id: int, session: Session = Depends(get_session)):
    try:
        return round_lifecycle.reopen(session, round_id)
    except LeagueError as e:
        raise http_error(e)


@router.post("/rounds/{round_id}/expire", response_model=RoundExpireResponse)
def expire_round(
    round_id: int,
    session: Session = Depends(get_session),
    settings: LeagueSettings = Depends(get_settings),
):
    """Expire an elapsed active round now instead of waiting for the periodic trigger"""
    try:
        result = round_lifecycle.auto_expire(
            session, round_id, today=local_today(settings.timezone), settings=settings
        )
    except LeagueError as e:
        raise http_error(e)
    return RoundExpireResponse(**asdict(result))


@router.patch("/rounds/{round_id}/dates", response_model=RoundResponse)
def change_round_dates(round_id: int, payload: RoundDatesUpdate, session: Session = Depends(get_session)):
    try:
        return update_round_dates(session, round_id, payload.period_start, payload.period_end)
    except LeagueError as e:
        raise http_error(e)
