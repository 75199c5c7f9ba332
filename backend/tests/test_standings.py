"""
Standings aggregation: per-match contributions, ranking and recompute.
"""
import logging
import random
from types import SimpleNamespace

import pytest
from sqlmodel import Session, select

from league.config import LeagueSettings
from league.exceptions import CategoryNotFoundError
from league.models.match import Match
from league.models.outcome import Decisive, SetScore, Unreported, Walkover
from league.models.round import Round
from league.models.standing import Standing
from league.services.match_outcomes import mark_unreported, record_decisive, record_walkover
from league.services.standings_service import (
    StatLine,
    aggregate_statistics,
    get_standings,
    match_contributions,
    rank_statistics,
    recompute,
)


def _match(match_id, a, b, outcome=None, category_id=1):
    match = Match(id=match_id, category_id=category_id, round_id=1, player_a_id=a, player_b_id=b)
    if outcome is not None:
        match.set_outcome(outcome)
    return match


def _player(pid, first, last):
    return SimpleNamespace(id=pid, first_name=first, last_name=last)


# ========== Pure aggregation ==========


def test_decisive_contribution_scenario():
    """A beats B 6-4 6-3."""
    match = _match(1, 10, 20, Decisive(winner_id=10, sets=(SetScore(6, 4), SetScore(6, 3))))
    deltas = match_contributions(match, points_per_win=3)

    a, b = deltas[10], deltas[20]
    assert a.matches_played == 1 and b.matches_played == 1
    assert a.matches_won == 1 and b.matches_lost == 1
    assert a.points == 3 and b.points == 0
    assert a.sets_won == 2 and a.sets_lost == 0
    assert b.sets_won == 0 and b.sets_lost == 2
    assert a.games_won == 12 and a.games_lost == 7
    assert b.games_won == 7 and b.games_lost == 12


def test_walkover_contribution_has_no_sets_or_games():
    deltas = match_contributions(_match(1, 10, 20, Walkover(winner_id=20)), points_per_win=1)
    assert deltas[20] == StatLine(matches_played=1, matches_won=1, matches_won_by_wo=1, points=1)
    assert deltas[10] == StatLine(matches_played=1, matches_lost=1, matches_lost_by_wo=1)


def test_unreported_penalizes_both_players():
    deltas = match_contributions(_match(1, 10, 20, Unreported()), points_per_win=1)
    for pid in (10, 20):
        assert deltas[pid] == StatLine(matches_played=1, matches_not_reported=1)


def test_undecided_contributes_nothing():
    assert match_contributions(_match(1, 10, 20), points_per_win=1) == {}


def _random_matches(player_ids, count, seed):
    rng = random.Random(seed)
    matches = []
    for match_id in range(1, count + 1):
        a, b = rng.sample(player_ids, 2)
        kind = rng.choice(["decisive", "walkover", "unreported", "undecided"])
        if kind == "decisive":
            winner = rng.choice([a, b])
            win_set = SetScore(6, rng.randint(0, 4))
            if winner == b:
                win_set = SetScore(win_set.b_games, win_set.a_games)
            outcome = Decisive(winner_id=winner, sets=(win_set, win_set))
        elif kind == "walkover":
            outcome = Walkover(winner_id=rng.choice([a, b]))
        elif kind == "unreported":
            outcome = Unreported()
        else:
            outcome = None
        matches.append(_match(match_id, a, b, outcome))
    return matches


@pytest.mark.parametrize("seed", [1, 2, 3])
def test_aggregate_invariants(seed):
    player_ids = [1, 2, 3, 4, 5, 6]
    matches = _random_matches(player_ids, 40, seed)
    totals = aggregate_statistics(player_ids, matches, points_per_win=2)

    winners = sum(1 for m in matches if m.winner_id is not None)
    assert sum(t.matches_won for t in totals.values()) == winners
    assert sum(t.matches_lost for t in totals.values()) == winners
    for t in totals.values():
        assert t.matches_played == t.matches_won + t.matches_lost + t.matches_not_reported
        assert t.points == 2 * t.matches_won
    assert sum(t.sets_won for t in totals.values()) == sum(t.sets_lost for t in totals.values())
    assert sum(t.games_won for t in totals.values()) == sum(t.games_lost for t in totals.values())


def test_aggregate_is_order_independent():
    player_ids = [1, 2, 3, 4, 5]
    matches = _random_matches(player_ids, 30, seed=7)
    shuffled = list(matches)
    random.Random(99).shuffle(shuffled)
    assert aggregate_statistics(player_ids, matches, 1) == aggregate_statistics(player_ids, shuffled, 1)


def test_integrity_problem_is_logged_and_skipped(caplog):
    matches = [
        _match(1, 1, 2, Walkover(winner_id=1)),
        _match(2, 1, 99, Walkover(winner_id=1)),  # 99 not in the category
    ]
    with caplog.at_level(logging.WARNING, logger="league.services.standings_service"):
        totals = aggregate_statistics([1, 2], matches, 1)

    assert totals[1].matches_won == 1
    assert 99 not in totals
    assert any("Skipping match 2" in r.getMessage() for r in caplog.records)


def test_ranking_tie_breaks():
    players = {
        1: _player(1, "Ana", "Zapata"),
        2: _player(2, "Bea", "Mendez"),
        3: _player(3, "Carla", "Mendez"),
        4: _player(4, "Dora", "Lopez"),
        5: _player(5, "Eva", "Ibarra"),
    }
    totals = {
        1: StatLine(points=3, sets_won=6, sets_lost=2),  # most points
        2: StatLine(points=2, sets_won=4, sets_lost=2, games_won=30, games_lost=25),
        3: StatLine(points=2, sets_won=4, sets_lost=2, games_won=30, games_lost=25),  # same as 2, first name later
        4: StatLine(points=2, sets_won=4, sets_lost=2, games_won=31, games_lost=25),  # better game diff
        5: StatLine(points=2, sets_won=5, sets_lost=2),  # better set diff
    }
    assert rank_statistics(players, totals) == [(1, 1), (5, 2), (4, 3), (2, 4), (3, 5)]


def test_name_tie_break_is_case_insensitive():
    players = {1: _player(1, "Ana", "zapata"), 2: _player(2, "Bea", "Alvarez")}
    assert rank_statistics(players, {1: StatLine(), 2: StatLine()}) == [(2, 1), (1, 2)]


# ========== Recompute against the database ==========


def _round_matches(session: Session, category_id: int, number: int):
    round_ = session.exec(
        select(Round).where(Round.category_id == category_id, Round.round_number == number)
    ).one()
    return list(
        session.exec(select(Match).where(Match.round_id == round_.id).order_by(Match.sequence_in_round)).all()
    )


def test_recompute_scenario_and_idempotency(session: Session, league_with_fixture, settings):
    category = league_with_fixture["category"]
    alvarez, benitez, castro, diaz = league_with_fixture["players"]
    m1, m2 = _round_matches(session, category.id, 1)
    assert (m1.player_a_id, m1.player_b_id) == (alvarez.id, benitez.id)

    record_decisive(session, m1.id, alvarez.id, [SetScore(6, 4), SetScore(6, 3)], settings)
    record_walkover(session, m2.id, castro.id)

    first = [(r.player_id, r.position, r.points) for r in recompute(session, category.id, settings)]
    session.commit()
    second = [(r.player_id, r.position, r.points) for r in recompute(session, category.id, settings)]
    session.commit()
    assert first == second

    rows = {r.player_id: r for r in get_standings(session, category.id)}
    assert rows[benitez.id].sets_lost == 2
    assert rows[benitez.id].games_lost == 12
    assert rows[alvarez.id].points == settings.points_per_win
    assert rows[alvarez.id].matches_played == 1
    assert rows[benitez.id].matches_played == 1
    assert rows[castro.id].matches_won_by_wo == 1
    assert rows[diaz.id].matches_lost_by_wo == 1

    # Alvarez and Castro both have 1 point; Alvarez has the better set diff
    assert [r.player_id for r in get_standings(session, category.id)] == [
        alvarez.id,
        castro.id,
        diaz.id,
        benitez.id,
    ]


def test_points_per_win_is_configurable(session: Session, league_with_fixture):
    category = league_with_fixture["category"]
    m1, _m2 = _round_matches(session, category.id, 1)
    record_walkover(session, m1.id, m1.player_a_id)

    rows = recompute(session, category.id, LeagueSettings(points_per_win=3))
    assert rows[0].player_id == m1.player_a_id
    assert rows[0].points == 3


def test_unreported_match_in_recompute(session: Session, league_with_fixture, settings):
    category = league_with_fixture["category"]
    m1, _m2 = _round_matches(session, category.id, 1)
    mark_unreported(session, m1.id)

    rows = {r.player_id: r for r in recompute(session, category.id, settings)}
    for pid in (m1.player_a_id, m1.player_b_id):
        assert rows[pid].matches_played == 1
        assert rows[pid].matches_not_reported == 1
        assert rows[pid].points == 0
        assert rows[pid].matches_won == 0
        assert rows[pid].matches_lost == 0


def test_player_moved_out_loses_standing_row(session: Session, league_with_fixture, make_category, settings):
    category = league_with_fixture["category"]
    moved = league_with_fixture["players"][3]
    other = make_category(name="Segunda")

    moved.current_category_id = other.id
    session.add(moved)
    session.commit()

    rows = recompute(session, category.id, settings)
    session.commit()
    assert moved.id not in {r.player_id for r in rows}
    assert session.exec(
        select(Standing).where(Standing.category_id == category.id, Standing.player_id == moved.id)
    ).first() is None
    assert [r.position for r in rows] == [1, 2, 3]


def test_recompute_missing_category(session: Session, settings):
    with pytest.raises(CategoryNotFoundError):
        recompute(session, 12345, settings)
