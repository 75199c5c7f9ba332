"""
Fixture generation: round-robin pairings, round windows and the initial
standings table for a category.

Pairing (circle method):
- Odd player count: a BYE slot is appended; whoever meets it sits out.
- N effective participants → N-1 rounds of N/2 pairings.
- Participant 0 stays fixed and meets whoever is rotated into the current
  round's slot; the others pair up symmetrically around that slot.
- Every pair of participants meets exactly once.
"""
import logging
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from sqlmodel import Session, select

from league.config import LeagueSettings, get_settings
from league.exceptions import (
    CategoryNotFoundError,
    DuplicateScheduleError,
    FixtureHasResultsError,
    InsufficientPlayersError,
    InvalidRoundDatesError,
    LeagueError,
    RoundNotFoundError,
)
from league.models.category import Category
from league.models.match import Match
from league.models.outcome import OutcomeKind
from league.models.player import Player, PlayerStatus
from league.models.round import Round, RoundStatus
from league.models.standing import Standing
from league.services.standings_service import StatLine, rank_statistics
from league.utils.round_dates import build_round_windows

logger = logging.getLogger(__name__)


def rr_round_count(participant_count: int) -> int:
    """
    Return number of RR rounds for n participants.
    Even n: n-1 rounds. Odd n: n rounds (with BYE).
    """
    if participant_count < 2:
        return 0
    if participant_count % 2 == 0:
        return participant_count - 1
    return participant_count


def rr_pairings_by_round(participant_count: int) -> List[Tuple[int, int, int, int]]:
    """
    Round-robin pairings. Returns list of (round_index, sequence_in_round, idx_a, idx_b).
    round_index and sequence_in_round are 1-based; idx_a, idx_b are 0-based participant positions.

    Pairings involving the BYE slot (odd counts) are dropped.
    """
    if participant_count < 2:
        return []

    n = participant_count
    n2 = n + 1 if n % 2 == 1 else n  # Add BYE for odd n
    half = n2 // 2
    ring = n2 - 1  # positions 1..n2-1 rotate, position 0 is fixed
    bye_idx = n if n % 2 == 1 else -1  # BYE at index n when we have n+1 positions

    result: List[Tuple[int, int, int, int]] = []
    for round_offset in range(ring):
        seq = 0
        for slot in range(half):
            if slot == 0:
                a, b = 0, round_offset + 1
            else:
                a = (round_offset - slot) % ring + 1
                b = (round_offset + slot) % ring + 1
            if a == bye_idx or b == bye_idx:
                continue
            seq += 1
            result.append((round_offset + 1, seq, a, b))

    return result


def generate_round_robin(player_ids: Sequence[int]) -> List[List[Tuple[int, int]]]:
    """
    Map round-robin pairings onto player ids.

    Args:
        player_ids: Ordered, unique player ids (at least 2)

    Returns:
        One list of (player_a_id, player_b_id) pairs per round, in round order
    """
    ids = list(player_ids)
    if len(set(ids)) != len(ids):
        raise ValueError("player_ids must be unique")
    if len(ids) < 2:
        raise ValueError(f"At least 2 players are required, got {len(ids)}")

    rounds: List[List[Tuple[int, int]]] = [[] for _ in range(rr_round_count(len(ids)))]
    for round_index, _seq, idx_a, idx_b in rr_pairings_by_round(len(ids)):
        rounds[round_index - 1].append((ids[idx_a], ids[idx_b]))
    return rounds


def byes_by_round(player_ids: Sequence[int], rounds: Sequence[Sequence[Tuple[int, int]]]) -> List[Optional[int]]:
    """Player sitting out each round (None when everyone plays)."""
    result: List[Optional[int]] = []
    for pairings in rounds:
        playing = {pid for pair in pairings for pid in pair}
        idle = [pid for pid in player_ids if pid not in playing]
        result.append(idle[0] if idle else None)
    return result


def _active_players(session: Session, category_id: int) -> List[Player]:
    return list(
        session.exec(
            select(Player)
            .where(
                Player.current_category_id == category_id,
                Player.status == PlayerStatus.active.value,
            )
            .order_by(Player.id)
        ).all()
    )


def generate_fixture(
    session: Session,
    category_id: int,
    start_date: date,
    round_length_days: Optional[int] = None,
    settings: Optional[LeagueSettings] = None,
) -> Dict:
    """
    Create every round, match and initial standings row for a category.

    All records are written in one commit; on any failure the transaction is
    rolled back and nothing is left behind.

    Returns:
        Dict with category_id, rounds_created, matches_created, standings_created, byes

    Raises:
        CategoryNotFoundError: category does not exist
        DuplicateScheduleError: category already has rounds
        InsufficientPlayersError: fewer than settings.min_players active players
        InvalidRoundDatesError: round length below 1 day
    """
    settings = settings or get_settings()
    length = settings.default_round_length_days if round_length_days is None else round_length_days

    try:
        category = session.get(Category, category_id)
        if not category:
            raise CategoryNotFoundError(category_id)

        if length < 1:
            raise InvalidRoundDatesError(f"round_length_days must be >= 1, got {length}")

        existing = session.exec(select(Round.id).where(Round.category_id == category_id).limit(1)).first()
        if existing is not None:
            raise DuplicateScheduleError(category_id)

        players = _active_players(session, category_id)
        if len(players) < settings.min_players:
            raise InsufficientPlayersError(found=len(players), required=settings.min_players)

        player_ids = [p.id for p in players]
        rounds = generate_round_robin(player_ids)
        windows = build_round_windows(start_date, len(rounds), length)

        matches_created = 0
        for round_index, (pairings, (period_start, period_end)) in enumerate(zip(rounds, windows), start=1):
            round_ = Round(
                category_id=category_id,
                round_number=round_index,
                period_start=period_start,
                period_end=period_end,
                status=RoundStatus.pending.value,
            )
            session.add(round_)
            session.flush()  # need round_.id for matches

            for seq, (player_a_id, player_b_id) in enumerate(pairings, start=1):
                session.add(
                    Match(
                        category_id=category_id,
                        round_id=round_.id,
                        sequence_in_round=seq,
                        player_a_id=player_a_id,
                        player_b_id=player_b_id,
                        outcome_kind=OutcomeKind.undecided.value,
                    )
                )
                matches_created += 1

        # Zeroed table; with no results the ranking is alphabetical
        zero = {pid: StatLine() for pid in player_ids}
        positions = dict(rank_statistics({p.id: p for p in players}, zero))
        existing_rows = {
            s.player_id: s for s in session.exec(select(Standing).where(Standing.category_id == category_id)).all()
        }
        for player in players:
            row = existing_rows.get(player.id) or Standing(category_id=category_id, player_id=player.id)
            for name, value in StatLine().as_dict().items():
                setattr(row, name, value)
            row.position = positions[player.id]
            session.add(row)

        session.commit()
    except LeagueError:
        session.rollback()
        raise
    except Exception:
        session.rollback()
        logger.exception(f"Fixture generation failed for category {category_id}, transaction rolled back")
        raise

    logger.info(
        f"Generated fixture for category {category_id}: {len(rounds)} rounds, "
        f"{matches_created} matches, {len(players)} players"
    )
    return {
        "category_id": category_id,
        "rounds_created": len(rounds),
        "matches_created": matches_created,
        "standings_created": len(players),
        "byes": byes_by_round(player_ids, rounds),
    }


def delete_fixture(session: Session, category_id: int) -> Dict:
    """
    Remove all rounds, matches and standings of a category.

    Raises:
        CategoryNotFoundError: category does not exist
        FixtureHasResultsError: some match already has a decisive or walkover result
    """
    category = session.get(Category, category_id)
    if not category:
        raise CategoryNotFoundError(category_id)

    decided = session.exec(
        select(Match.id)
        .where(
            Match.category_id == category_id,
            Match.outcome_kind.in_([OutcomeKind.decisive.value, OutcomeKind.walkover.value]),
        )
        .limit(1)
    ).first()
    if decided is not None:
        raise FixtureHasResultsError(category_id)

    try:
        matches = session.exec(select(Match).where(Match.category_id == category_id)).all()
        standings = session.exec(select(Standing).where(Standing.category_id == category_id)).all()
        rounds = session.exec(select(Round).where(Round.category_id == category_id)).all()
        for record in [*matches, *standings]:
            session.delete(record)
        session.flush()
        for round_ in rounds:
            session.delete(round_)
        session.commit()
    except Exception:
        session.rollback()
        logger.exception(f"Deleting fixture of category {category_id} failed, transaction rolled back")
        raise

    logger.info(f"Deleted fixture of category {category_id}: {len(rounds)} rounds, {len(matches)} matches")
    return {
        "category_id": category_id,
        "rounds_deleted": len(rounds),
        "matches_deleted": len(matches),
        "standings_deleted": len(standings),
    }


def get_fixture(session: Session, category_id: int) -> List[Round]:
    """Rounds of a category in round_number order (matches via relationship)."""
    category = session.get(Category, category_id)
    if not category:
        raise CategoryNotFoundError(category_id)

    return list(
        session.exec(select(Round).where(Round.category_id == category_id).order_by(Round.round_number)).all()
    )


def update_round_dates(session: Session, round_id: int, period_start: date, period_end: date) -> Round:
    """
    Move a round's play window.

    Raises:
        RoundNotFoundError: round does not exist
        InvalidRoundDatesError: period_end before period_start
    """
    round_ = session.get(Round, round_id)
    if not round_:
        raise RoundNotFoundError(round_id)
    if period_end < period_start:
        raise InvalidRoundDatesError("period_end must be on or after period_start")

    round_.period_start = period_start
    round_.period_end = period_end
    session.add(round_)
    session.commit()
    session.refresh(round_)
    return round_
