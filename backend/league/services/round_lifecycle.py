"""
Round lifecycle.

    pending ──activate──> active ──close──> completed
                             └──auto_expire──> expired
    completed / expired ──reopen──> pending

Closing (manual or automatic) is the only place standings are rebuilt. The
guard check, any match updates, the status change and the recompute run in a
single transaction; if anything fails the transaction is rolled back and the
round keeps its previous status. Close/expire of the same round are
serialized (per-round lock + row lock).

At most one round per category is active at a time.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from sqlmodel import Session, func, select

from league.config import LeagueSettings
from league.exceptions import (
    ActiveRoundExistsError,
    InvalidTransitionError,
    LeagueError,
    RoundNotElapsedError,
    RoundNotFoundError,
    UnresolvedMatchesError,
)
from league.models.match import Match
from league.models.outcome import OutcomeKind, Unreported
from league.models.round import Round, RoundStatus
from league.services.standings_service import recompute
from league.utils.round_locks import round_lock
from league.utils.sql import scalar_int

logger = logging.getLogger(__name__)


@dataclass
class ExpiredRound:
    round_id: int
    category_id: int
    round_number: int
    unreported_marked: int
    next_round_activated: Optional[int] = None


def _get_round(session: Session, round_id: int, for_update: bool = False) -> Round:
    stmt = select(Round).where(Round.id == round_id)
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    round_ = session.exec(stmt).first()
    if not round_:
        raise RoundNotFoundError(round_id)
    return round_


def _other_active_round(session: Session, category_id: int, round_id: int) -> Optional[Round]:
    return session.exec(
        select(Round).where(
            Round.category_id == category_id,
            Round.status == RoundStatus.active.value,
            Round.id != round_id,
        )
    ).first()


def count_unresolved(session: Session, round_id: int) -> int:
    """Matches with neither a result nor the not-reported flag."""
    return scalar_int(
        session.exec(
            select(func.count(Match.id)).where(
                Match.round_id == round_id,
                Match.outcome_kind == OutcomeKind.undecided.value,
            )
        ).one()
    )


def _close_and_recompute(
    session: Session,
    round_: Round,
    target: RoundStatus,
    now: Optional[datetime],
    settings: Optional[LeagueSettings],
) -> None:
    round_.status = target.value
    round_.closed_at = now or datetime.utcnow()
    session.add(round_)
    session.flush()
    recompute(session, round_.category_id, settings)


def activate(session: Session, round_id: int) -> Round:
    """
    Open a pending round for submissions.

    Raises:
        RoundNotFoundError, InvalidTransitionError, ActiveRoundExistsError
    """
    round_ = _get_round(session, round_id)
    current = RoundStatus(round_.status)
    if current != RoundStatus.pending:
        raise InvalidTransitionError(round_id, current.value, RoundStatus.active.value)

    other = _other_active_round(session, round_.category_id, round_id)
    if other:
        raise ActiveRoundExistsError(round_.category_id, other.id)

    round_.status = RoundStatus.active.value
    session.add(round_)
    session.commit()
    session.refresh(round_)
    logger.info(f"Activated round {round_id} (category {round_.category_id}, round {round_.round_number})")
    return round_


def close(
    session: Session,
    round_id: int,
    now: Optional[datetime] = None,
    settings: Optional[LeagueSettings] = None,
) -> Round:
    """
    Close a round manually and rebuild its category's standings.

    Raises:
        RoundNotFoundError
        InvalidTransitionError: round already completed/expired
        UnresolvedMatchesError: some matches have no result and are not marked unreported
    """
    with round_lock(round_id):
        try:
            round_ = _get_round(session, round_id, for_update=True)
            current = RoundStatus(round_.status)
            if current not in (RoundStatus.pending, RoundStatus.active):
                raise InvalidTransitionError(round_id, current.value, RoundStatus.completed.value)

            unresolved = count_unresolved(session, round_id)
            if unresolved:
                raise UnresolvedMatchesError(round_id, unresolved)

            _close_and_recompute(session, round_, RoundStatus.completed, now, settings)
            session.commit()
        except LeagueError:
            session.rollback()
            raise
        except Exception:
            session.rollback()
            logger.exception(f"Closing round {round_id} failed, transaction rolled back")
            raise

    session.refresh(round_)
    logger.info(f"Closed round {round_id} (category {round_.category_id}, round {round_.round_number})")
    return round_


def reopen(session: Session, round_id: int) -> Round:
    """
    Send a completed/expired round back to pending so results can be edited.
    Standings are not touched; the next close rebuilds them.

    Raises:
        RoundNotFoundError, InvalidTransitionError
    """
    round_ = _get_round(session, round_id)
    current = RoundStatus(round_.status)
    if current not in (RoundStatus.completed, RoundStatus.expired):
        raise InvalidTransitionError(round_id, current.value, RoundStatus.pending.value)

    round_.status = RoundStatus.pending.value
    round_.closed_at = None
    session.add(round_)
    session.commit()
    session.refresh(round_)
    logger.info(f"Reopened round {round_id} (was {current.value})")
    return round_


def auto_expire(
    session: Session,
    round_id: int,
    today: date,
    now: Optional[datetime] = None,
    settings: Optional[LeagueSettings] = None,
) -> ExpiredRound:
    """
    Expire an active round whose play window ended before `today`.

    Undecided matches are marked unreported (both players penalized), the
    round lands in 'expired' with standings rebuilt, and the next round is
    activated if it is still pending.

    Raises:
        RoundNotFoundError
        InvalidTransitionError: round is not active
        RoundNotElapsedError: period_end is today or later
    """
    now = now or datetime.utcnow()
    with round_lock(round_id):
        try:
            round_ = _get_round(session, round_id, for_update=True)
            current = RoundStatus(round_.status)
            if current != RoundStatus.active:
                raise InvalidTransitionError(round_id, current.value, RoundStatus.expired.value)
            if round_.period_end >= today:
                raise RoundNotElapsedError(round_id, round_.period_end)

            undecided = session.exec(
                select(Match).where(
                    Match.round_id == round_id,
                    Match.outcome_kind == OutcomeKind.undecided.value,
                )
            ).all()
            for match in undecided:
                match.set_outcome(Unreported(), loaded_at=now)
                session.add(match)
                logger.info(f"Marked match {match.id} as unreported")

            _close_and_recompute(session, round_, RoundStatus.expired, now, settings)

            result = ExpiredRound(
                round_id=round_.id,
                category_id=round_.category_id,
                round_number=round_.round_number,
                unreported_marked=len(undecided),
            )

            next_round = session.exec(
                select(Round).where(
                    Round.category_id == round_.category_id,
                    Round.round_number == round_.round_number + 1,
                )
            ).first()
            if next_round and RoundStatus(next_round.status) == RoundStatus.pending:
                other = _other_active_round(session, round_.category_id, next_round.id)
                if other:
                    logger.warning(
                        f"Not activating round {next_round.id}: round {other.id} of category "
                        f"{round_.category_id} is already active"
                    )
                else:
                    next_round.status = RoundStatus.active.value
                    session.add(next_round)
                    result.next_round_activated = next_round.id

            session.commit()
        except LeagueError:
            session.rollback()
            raise
        except Exception:
            session.rollback()
            logger.exception(f"Expiring round {round_id} failed, transaction rolled back")
            raise

    logger.info(
        f"Expired round {result.round_id} (category {result.category_id}, round {result.round_number}); "
        f"{result.unreported_marked} unreported, next activated: {result.next_round_activated}"
    )
    return result
