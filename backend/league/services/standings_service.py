"""
Standings aggregation.

The table is rebuilt from scratch every time: a fresh accumulator is created
for the players currently assigned to the category, each match contributes a
per-player delta, and the deltas are summed. Match order does not matter.

Ranking criteria, in order:
1. points (desc)
2. set difference (desc)
3. game difference (desc)
4. last name, then first name (asc, case-insensitive)
5. player id (asc) so no two rows ever compare equal

Only round closing/expiry calls recompute(); result entry never does.
"""
import logging
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from sqlmodel import Session, select

from league.config import LeagueSettings, get_settings
from league.exceptions import CategoryNotFoundError
from league.models.category import Category
from league.models.match import Match
from league.models.outcome import Decisive, Unreported, Walkover
from league.models.player import Player
from league.models.standing import Standing

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatLine:
    """Cumulative statistics of one player. Immutable; combine with +."""

    matches_played: int = 0
    matches_won: int = 0
    matches_lost: int = 0
    matches_won_by_wo: int = 0
    matches_lost_by_wo: int = 0
    matches_not_reported: int = 0
    points: int = 0
    sets_won: int = 0
    sets_lost: int = 0
    games_won: int = 0
    games_lost: int = 0

    def __add__(self, other: "StatLine") -> "StatLine":
        return StatLine(**{f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(StatLine)})

    @property
    def set_difference(self) -> int:
        return self.sets_won - self.sets_lost

    @property
    def game_difference(self) -> int:
        return self.games_won - self.games_lost

    def as_dict(self) -> Dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(StatLine)}


def match_contributions(match: Match, points_per_win: int) -> Dict[int, StatLine]:
    """
    Per-player deltas produced by one match.

    Undecided matches contribute nothing. Unreported matches count as played
    (and not reported) for both sides with no points, sets or games.
    """
    outcome = match.outcome
    a, b = match.player_a_id, match.player_b_id

    if isinstance(outcome, Unreported):
        penalty = StatLine(matches_played=1, matches_not_reported=1)
        return {a: penalty, b: penalty}

    if isinstance(outcome, Walkover):
        winner, loser = outcome.winner_id, match.opponent_of(outcome.winner_id)
        return {
            winner: StatLine(matches_played=1, matches_won=1, matches_won_by_wo=1, points=points_per_win),
            loser: StatLine(matches_played=1, matches_lost=1, matches_lost_by_wo=1),
        }

    if isinstance(outcome, Decisive):
        a_sets = sum(1 for s in outcome.sets if s.a_games > s.b_games)
        b_sets = sum(1 for s in outcome.sets if s.b_games > s.a_games)
        a_games = sum(s.a_games for s in outcome.sets)
        b_games = sum(s.b_games for s in outcome.sets)
        a_won = outcome.winner_id == a
        return {
            a: StatLine(
                matches_played=1,
                matches_won=1 if a_won else 0,
                matches_lost=0 if a_won else 1,
                points=points_per_win if a_won else 0,
                sets_won=a_sets,
                sets_lost=b_sets,
                games_won=a_games,
                games_lost=b_games,
            ),
            b: StatLine(
                matches_played=1,
                matches_won=0 if a_won else 1,
                matches_lost=1 if a_won else 0,
                points=0 if a_won else points_per_win,
                sets_won=b_sets,
                sets_lost=a_sets,
                games_won=b_games,
                games_lost=a_games,
            ),
        }

    return {}


def _integrity_problem(match: Match, totals: Mapping[int, StatLine]) -> Optional[str]:
    if match.player_a_id not in totals or match.player_b_id not in totals:
        return "references a player not assigned to the category"
    outcome = match.outcome
    if isinstance(outcome, (Decisive, Walkover)) and not match.involves(outcome.winner_id):
        return f"winner {outcome.winner_id} is not one of its players"
    return None


def aggregate_statistics(
    player_ids: Iterable[int],
    matches: Iterable[Match],
    points_per_win: int,
) -> Dict[int, StatLine]:
    """
    Fold matches into per-player statistics.

    Matches that reference players outside `player_ids` (or whose winner is
    not a participant) are logged and skipped.
    """
    totals: Dict[int, StatLine] = {pid: StatLine() for pid in player_ids}

    for match in matches:
        problem = _integrity_problem(match, totals)
        if problem:
            logger.warning(
                "Skipping match %s in category %s during standings aggregation: %s",
                match.id,
                match.category_id,
                problem,
            )
            continue
        for player_id, delta in match_contributions(match, points_per_win).items():
            totals[player_id] = totals[player_id] + delta

    return totals


def ranking_key(player: Player, stats: StatLine) -> Tuple:
    return (
        -stats.points,
        -stats.set_difference,
        -stats.game_difference,
        (player.last_name or "").casefold(),
        (player.first_name or "").casefold(),
        player.id,
    )


def rank_statistics(players: Mapping[int, Player], totals: Mapping[int, StatLine]) -> List[Tuple[int, int]]:
    """Return (player_id, position) pairs, position 1-based, best first."""
    ordered = sorted(totals, key=lambda pid: ranking_key(players[pid], totals[pid]))
    return [(pid, index) for index, pid in enumerate(ordered, start=1)]


def recompute(session: Session, category_id: int, settings: Optional[LeagueSettings] = None) -> List[Standing]:
    """
    Rebuild the standings table of a category from all of its matches.

    Flushes but does not commit: callers (round close/expire) own the
    transaction so the lifecycle change and the table land together.

    Returns:
        Standing rows ordered by position

    Raises:
        CategoryNotFoundError: category does not exist
    """
    settings = settings or get_settings()

    category = session.get(Category, category_id)
    if not category:
        raise CategoryNotFoundError(category_id)

    players = {
        p.id: p for p in session.exec(select(Player).where(Player.current_category_id == category_id)).all()
    }
    matches = session.exec(select(Match).where(Match.category_id == category_id).order_by(Match.id)).all()

    totals = aggregate_statistics(players.keys(), matches, settings.points_per_win)
    positions = dict(rank_statistics(players, totals))

    existing = {s.player_id: s for s in session.exec(select(Standing).where(Standing.category_id == category_id)).all()}

    now = datetime.utcnow()
    rows: List[Standing] = []
    for player_id, stats in totals.items():
        row = existing.pop(player_id, None)
        if row is None:
            row = Standing(category_id=category_id, player_id=player_id)
        for name, value in stats.as_dict().items():
            setattr(row, name, value)
        row.position = positions[player_id]
        row.updated_at = now
        session.add(row)
        rows.append(row)

    # Rows of players who left the category
    for stale in existing.values():
        logger.info(f"Removing standing of player {stale.player_id} no longer in category {category_id}")
        session.delete(stale)

    session.flush()

    rows.sort(key=lambda r: r.position)
    logger.info(f"Recomputed standings for category {category_id}: {len(rows)} players, {len(matches)} matches")
    return rows


def get_standings(session: Session, category_id: int) -> List[Standing]:
    """Current standings of a category ordered by position (unranked rows last)."""
    category = session.get(Category, category_id)
    if not category:
        raise CategoryNotFoundError(category_id)

    rows = session.exec(select(Standing).where(Standing.category_id == category_id)).all()
    return sorted(rows, key=lambda r: (r.position is None, r.position or 0, r.id))
