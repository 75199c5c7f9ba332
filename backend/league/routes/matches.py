"""
Match results.

Admin endpoints overwrite a match's outcome at any time while its round is
open (pending/active). Participants submit through /submit, identified by
the X-Player-Id header set by the upstream auth layer. None of these touch
standings; the table is rebuilt when the round closes.
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import BaseModel, StrictInt
from sqlmodel import Session

from league.config import LeagueSettings, get_settings
from league.database import get_session
from league.exceptions import LeagueError, MalformedScoreError, MatchNotFoundError
from league.models.match import Match
from league.models.outcome import Decisive, Outcome, Walkover
from league.services.match_outcomes import (
    mark_unreported,
    record_decisive,
    record_walkover,
    submit_as_participant,
)
from league.services.score_parser import format_score, parse_score
from league.utils.http_errors import http_error

router = APIRouter()


class SetPayload(BaseModel):
    a: StrictInt  # player_a games
    b: StrictInt


class MatchResultUpdate(BaseModel):
    kind: Literal["decisive", "walkover"] = "decisive"
    winner_id: int
    score: Optional[str] = None  # "6-4 6-3", player_a first
    sets: Optional[List[SetPayload]] = None
    reason: Optional[str] = None  # walkover only


class MatchResponse(BaseModel):
    id: int
    category_id: int
    round_id: int
    sequence_in_round: int
    player_a_id: int
    player_b_id: int
    outcome_kind: str
    winner_id: Optional[int] = None
    sets: Optional[List[Dict[str, Any]]] = None
    score: Optional[str] = None
    walkover_reason: Optional[str] = None
    result_loaded_at: Optional[datetime] = None

    class Config:
        from_attributes = True


def match_to_response(m: Match) -> MatchResponse:
    outcome = m.outcome
    return MatchResponse(
        id=m.id,
        category_id=m.category_id,
        round_id=m.round_id,
        sequence_in_round=m.sequence_in_round,
        player_a_id=m.player_a_id,
        player_b_id=m.player_b_id,
        outcome_kind=m.outcome_kind,
        winner_id=m.winner_id,
        sets=m.sets_json,
        score=format_score(outcome.sets) if isinstance(outcome, Decisive) else None,
        walkover_reason=m.walkover_reason,
        result_loaded_at=m.result_loaded_at,
    )


def _outcome_from_payload(payload: MatchResultUpdate) -> Outcome:
    if payload.kind == "walkover":
        return Walkover(winner_id=payload.winner_id, reason=payload.reason)

    parsed = parse_score([s.model_dump() for s in payload.sets] if payload.sets else payload.score)
    if parsed is None:
        raise MalformedScoreError("Provide the result as 'score' (e.g. '6-4 6-3') or as 'sets'")
    return Decisive(winner_id=payload.winner_id, sets=tuple(parsed.sets))


@router.get("/matches/{match_id}", response_model=MatchResponse)
def get_match(match_id: int, session: Session = Depends(get_session)):
    match = session.get(Match, match_id)
    if not match:
        raise http_error(MatchNotFoundError(match_id))
    return match_to_response(match)


@router.put("/matches/{match_id}/result", response_model=MatchResponse)
def set_match_result(
    match_id: int,
    payload: MatchResultUpdate,
    session: Session = Depends(get_session),
    settings: LeagueSettings = Depends(get_settings),
):
    """Admin: record a played result or a walkover, replacing any previous outcome"""
    try:
        outcome = _outcome_from_payload(payload)
        if isinstance(outcome, Walkover):
            match = record_walkover(session, match_id, outcome.winner_id, outcome.reason)
        else:
            match = record_decisive(session, match_id, outcome.winner_id, outcome.sets, settings)
    except LeagueError as e:
        raise http_error(e)
    return match_to_response(match)


@router.post("/matches/{match_id}/not-reported", response_model=MatchResponse)
def set_match_not_reported(match_id: int, session: Session = Depends(get_session)):
    """Admin: flag the match as not reported (both players are penalized on close)"""
    try:
        match = mark_unreported(session, match_id)
    except LeagueError as e:
        raise http_error(e)
    return match_to_response(match)


@router.post("/matches/{match_id}/submit", response_model=MatchResponse)
def submit_match_result(
    match_id: int,
    payload: MatchResultUpdate,
    x_player_id: Optional[int] = Header(default=None, alias="X-Player-Id"),
    session: Session = Depends(get_session),
    settings: LeagueSettings = Depends(get_settings),
):
    """Participant: submit the result of one of their own matches in the active round"""
    if x_player_id is None:
        raise HTTPException(status_code=401, detail="X-Player-Id header is required")
    try:
        outcome = _outcome_from_payload(payload)
        match = submit_as_participant(session, match_id, x_player_id, outcome, settings)
    except LeagueError as e:
        raise http_error(e)
    return match_to_response(match)
