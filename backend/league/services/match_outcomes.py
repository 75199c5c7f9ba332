"""
Match result entry.

Every operation overwrites the match's outcome (no append semantics) and
never touches standings; the table is only rebuilt when a round closes.
Results of a closed (completed/expired) round are frozen until the round is
reopened. Writes hold the same per-round lock as close/expire.
"""
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional, Sequence, Tuple

from sqlmodel import Session, select

from league.config import LeagueSettings, get_settings
from league.exceptions import (
    AlreadyDecidedError,
    LeagueValidationError,
    MalformedScoreError,
    MatchNotFoundError,
    NotParticipantError,
    RoundClosedError,
    RoundNotActiveError,
)
from league.models.match import Match
from league.models.outcome import Decisive, Outcome, SetScore, Unreported, Walkover, has_winner
from league.models.round import CLOSED_STATUSES, Round, RoundStatus
from league.utils.round_locks import round_lock

logger = logging.getLogger(__name__)

MIN_SETS = 2
MAX_SETS = 3


def validate_sets(
    match: Match,
    winner_id: int,
    sets: Sequence[SetScore],
    max_games_per_set: int,
) -> Tuple[SetScore, ...]:
    """
    Check a decisive result and return it as a tuple of sets.

    Rules: 2 or 3 sets, each game count within 0..max_games_per_set, no tied
    set, one side wins the majority of sets and that side is winner_id.
    """
    if not match.involves(winner_id):
        raise NotParticipantError(match.id, winner_id)

    sets = tuple(sets)
    if not MIN_SETS <= len(sets) <= MAX_SETS:
        raise MalformedScoreError(f"A result needs {MIN_SETS} or {MAX_SETS} sets, got {len(sets)}")

    for number, s in enumerate(sets, start=1):
        for games in (s.a_games, s.b_games):
            if games < 0 or games > max_games_per_set:
                raise MalformedScoreError(f"Set {number}: game counts must be between 0 and {max_games_per_set}")
        if s.winner_side is None:
            raise MalformedScoreError(f"Set {number} is tied ({s.a_games}-{s.b_games})")

    a_sets = sum(1 for s in sets if s.winner_side == "a")
    b_sets = len(sets) - a_sets
    if a_sets == b_sets:
        raise MalformedScoreError("No player won the majority of sets")

    majority_winner = match.player_a_id if a_sets > b_sets else match.player_b_id
    if majority_winner != winner_id:
        raise MalformedScoreError(f"Player {winner_id} did not win the majority of sets")

    return sets


def _get_match_or_raise(session: Session, match_id: int) -> Match:
    match = session.get(Match, match_id)
    if not match:
        raise MatchNotFoundError(match_id)
    return match


def _lock_round(session: Session, match: Match) -> Round:
    """Re-read the match's round under a row lock; call with round_lock held."""
    stmt = select(Round).where(Round.id == match.round_id).with_for_update()
    round_ = session.exec(stmt.execution_options(populate_existing=True)).one()
    session.refresh(match)
    return round_


def _require_editable_round(session: Session, match: Match) -> Round:
    round_ = _lock_round(session, match)
    status = RoundStatus(round_.status)
    if status in CLOSED_STATUSES:
        raise RoundClosedError(round_.id, status.value)
    return round_


def _store(session: Session, match: Match, outcome: Outcome) -> Match:
    match.set_outcome(outcome, loaded_at=datetime.utcnow())
    session.add(match)
    session.commit()
    session.refresh(match)
    logger.info(f"Match {match.id} outcome set to {outcome.kind.value}")
    return match


@contextmanager
def _round_guard(session: Session, match: Match) -> Iterator[None]:
    """
    Hold the round's lock from the status check until the write commits, so a
    concurrent close either sees this result or this call sees the closed round.
    """
    with round_lock(match.round_id):
        try:
            yield
        except Exception:
            session.rollback()
            raise


def record_decisive(
    session: Session,
    match_id: int,
    winner_id: int,
    sets: Sequence[SetScore],
    settings: Optional[LeagueSettings] = None,
) -> Match:
    """
    Record a played result, replacing any previous outcome.

    Raises:
        MatchNotFoundError, RoundClosedError, NotParticipantError, MalformedScoreError
    """
    settings = settings or get_settings()
    match = _get_match_or_raise(session, match_id)
    with _round_guard(session, match):
        _require_editable_round(session, match)
        checked = validate_sets(match, winner_id, sets, settings.max_games_per_set)
        return _store(session, match, Decisive(winner_id=winner_id, sets=checked))


def record_walkover(session: Session, match_id: int, winner_id: int, reason: Optional[str] = None) -> Match:
    """
    Record a walkover, replacing any previous outcome. No set data is kept.

    Raises:
        MatchNotFoundError, RoundClosedError, NotParticipantError
    """
    match = _get_match_or_raise(session, match_id)
    with _round_guard(session, match):
        _require_editable_round(session, match)
        if not match.involves(winner_id):
            raise NotParticipantError(match.id, winner_id)
        reason = reason.strip() if reason and reason.strip() else None
        return _store(session, match, Walkover(winner_id=winner_id, reason=reason))


def mark_unreported(session: Session, match_id: int) -> Match:
    """
    Clear any winner and flag the match as not reported.

    Raises:
        MatchNotFoundError, RoundClosedError
    """
    match = _get_match_or_raise(session, match_id)
    with _round_guard(session, match):
        _require_editable_round(session, match)
        return _store(session, match, Unreported())


def submit_as_participant(
    session: Session,
    match_id: int,
    acting_player_id: int,
    outcome: Outcome,
    settings: Optional[LeagueSettings] = None,
) -> Match:
    """
    Player-submitted result.

    On top of the admin rules: the acting player must be in the match, the
    round must be active and the match must not already have a winner.

    Raises:
        MatchNotFoundError, NotParticipantError, RoundNotActiveError,
        AlreadyDecidedError, MalformedScoreError, LeagueValidationError
    """
    settings = settings or get_settings()
    match = _get_match_or_raise(session, match_id)

    if not match.involves(acting_player_id):
        raise NotParticipantError(match.id, acting_player_id)

    with _round_guard(session, match):
        round_ = _lock_round(session, match)
        if RoundStatus(round_.status) != RoundStatus.active:
            raise RoundNotActiveError(round_.id, RoundStatus(round_.status).value)

        if has_winner(match.outcome):
            raise AlreadyDecidedError(match.id)

        if isinstance(outcome, Decisive):
            checked = validate_sets(match, outcome.winner_id, outcome.sets, settings.max_games_per_set)
            outcome = Decisive(winner_id=outcome.winner_id, sets=checked)
        elif isinstance(outcome, Walkover):
            if not match.involves(outcome.winner_id):
                raise NotParticipantError(match.id, outcome.winner_id)
        else:
            raise LeagueValidationError("Players can only submit a played result or a walkover")

        logger.info(f"Player {acting_player_id} submitted result for match {match.id}")
        return _store(session, match, outcome)
