"""Fixture generation against the database."""
from datetime import date

import pytest
from sqlmodel import Session, select

from league.exceptions import (
    CategoryNotFoundError,
    DuplicateScheduleError,
    FixtureHasResultsError,
    InsufficientPlayersError,
    InvalidRoundDatesError,
    RoundNotFoundError,
)
from league.models.match import Match
from league.models.outcome import OutcomeKind, SetScore
from league.models.player import PlayerStatus
from league.models.round import Round, RoundStatus
from league.models.standing import Standing
from league.services.match_outcomes import mark_unreported, record_decisive
from league.services.schedule_generator import (
    delete_fixture,
    generate_fixture,
    get_fixture,
    update_round_dates,
)


def test_generate_fixture_creates_rounds_matches_and_standings(session: Session, league_with_fixture):
    category = league_with_fixture["category"]
    summary = league_with_fixture["summary"]

    assert summary["rounds_created"] == 3
    assert summary["matches_created"] == 6
    assert summary["standings_created"] == 4
    assert summary["byes"] == [None, None, None]

    rounds = get_fixture(session, category.id)
    assert [r.round_number for r in rounds] == [1, 2, 3]
    assert all(r.status == RoundStatus.pending.value for r in rounds)
    assert [(r.period_start, r.period_end) for r in rounds] == [
        (date(2025, 3, 1), date(2025, 3, 15)),
        (date(2025, 3, 16), date(2025, 3, 31)),
        (date(2025, 4, 1), date(2025, 4, 15)),
    ]

    matches = session.exec(select(Match).where(Match.category_id == category.id)).all()
    assert len(matches) == 6
    assert all(m.outcome_kind == OutcomeKind.undecided.value for m in matches)


def test_initial_standings_are_zeroed_and_alphabetical(session: Session, make_category, make_players, settings):
    category = make_category()
    # Created out of alphabetical order on purpose
    players = make_players(category.id, [("Zoe", "Zapata"), ("Ana", "alvarez"), ("Mia", "Mendez")])
    generate_fixture(session, category.id, date(2025, 3, 1), settings=settings)

    rows = session.exec(select(Standing).where(Standing.category_id == category.id)).all()
    by_player = {r.player_id: r for r in rows}
    zapata, alvarez, mendez = players

    assert by_player[alvarez.id].position == 1
    assert by_player[mendez.id].position == 2
    assert by_player[zapata.id].position == 3
    for row in rows:
        assert row.matches_played == 0
        assert row.points == 0
        assert row.games_won == 0


def test_five_players_get_five_rounds_with_one_bye_each(session: Session, make_category, make_players, settings):
    category = make_category()
    players = make_players(
        category.id,
        [("Ana", "Alvarez"), ("Bruno", "Benitez"), ("Carla", "Castro"), ("Diego", "Diaz"), ("Eva", "Espinoza")],
    )
    summary = generate_fixture(session, category.id, date(2025, 3, 1), settings=settings)

    assert summary["rounds_created"] == 5
    assert summary["matches_created"] == 10
    assert sorted(summary["byes"]) == sorted(p.id for p in players)

    for round_ in get_fixture(session, category.id):
        assert len(round_.matches) == 2


def test_default_round_length_comes_from_settings(session: Session, make_category, make_players, settings):
    category = make_category()
    make_players(category.id, [("Ana", "Alvarez"), ("Bruno", "Benitez")])
    generate_fixture(session, category.id, date(2025, 6, 1), settings=settings)

    (round_,) = get_fixture(session, category.id)
    assert (round_.period_end - round_.period_start).days + 1 == settings.default_round_length_days


def test_inactive_players_are_left_out(session: Session, make_category, make_players, settings):
    category = make_category()
    active = make_players(category.id, [("Ana", "Alvarez"), ("Bruno", "Benitez"), ("Carla", "Castro")])
    inactive = make_players(category.id, [("Diego", "Diaz")], status=PlayerStatus.inactive)

    summary = generate_fixture(session, category.id, date(2025, 3, 1), settings=settings)
    assert summary["standings_created"] == 3

    matches = session.exec(select(Match).where(Match.category_id == category.id)).all()
    involved = {pid for m in matches for pid in (m.player_a_id, m.player_b_id)}
    assert involved == {p.id for p in active}
    assert inactive[0].id not in involved


def test_duplicate_schedule_rejected_and_nothing_added(session: Session, league_with_fixture, settings):
    category = league_with_fixture["category"]

    with pytest.raises(DuplicateScheduleError):
        generate_fixture(session, category.id, date(2025, 9, 1), settings=settings)

    assert len(session.exec(select(Round).where(Round.category_id == category.id)).all()) == 3


def test_failed_generation_leaves_nothing_behind(session: Session, make_category, make_players, settings, monkeypatch):
    from league.services import schedule_generator

    category = make_category()
    make_players(category.id, [("Ana", "Alvarez"), ("Bruno", "Benitez"), ("Carla", "Castro")])

    def broken_ranking(*args, **kwargs):
        raise RuntimeError("ranking failed")

    monkeypatch.setattr(schedule_generator, "rank_statistics", broken_ranking)
    with pytest.raises(RuntimeError):
        generate_fixture(session, category.id, date(2025, 3, 1), settings=settings)

    assert session.exec(select(Round).where(Round.category_id == category.id)).all() == []
    assert session.exec(select(Match).where(Match.category_id == category.id)).all() == []
    assert session.exec(select(Standing).where(Standing.category_id == category.id)).all() == []


def test_insufficient_players(session: Session, make_category, make_players, settings):
    category = make_category()
    make_players(category.id, [("Ana", "Alvarez")])

    with pytest.raises(InsufficientPlayersError) as exc_info:
        generate_fixture(session, category.id, date(2025, 3, 1), settings=settings)
    assert exc_info.value.found == 1
    assert exc_info.value.required == 2
    assert session.exec(select(Round)).all() == []


def test_missing_category_and_bad_length(session: Session, make_category, make_players, settings):
    with pytest.raises(CategoryNotFoundError):
        generate_fixture(session, 999, date(2025, 3, 1), settings=settings)

    category = make_category()
    make_players(category.id, [("Ana", "Alvarez"), ("Bruno", "Benitez")])
    with pytest.raises(InvalidRoundDatesError):
        generate_fixture(session, category.id, date(2025, 3, 1), round_length_days=0, settings=settings)


def test_delete_fixture_without_results(session: Session, league_with_fixture):
    category = league_with_fixture["category"]
    first_match = session.exec(select(Match).where(Match.category_id == category.id)).first()
    mark_unreported(session, first_match.id)

    result = delete_fixture(session, category.id)
    assert result == {
        "category_id": category.id,
        "rounds_deleted": 3,
        "matches_deleted": 6,
        "standings_deleted": 4,
    }
    assert session.exec(select(Round)).all() == []
    assert session.exec(select(Match)).all() == []
    assert session.exec(select(Standing)).all() == []


def test_delete_fixture_refused_once_results_exist(session: Session, league_with_fixture, settings):
    category = league_with_fixture["category"]
    match = session.exec(select(Match).where(Match.category_id == category.id)).first()
    record_decisive(session, match.id, match.player_a_id, [SetScore(6, 1), SetScore(6, 2)], settings)

    with pytest.raises(FixtureHasResultsError):
        delete_fixture(session, category.id)
    assert len(session.exec(select(Match)).all()) == 6


def test_update_round_dates(session: Session, league_with_fixture):
    round_ = get_fixture(session, league_with_fixture["category"].id)[0]

    updated = update_round_dates(session, round_.id, date(2025, 3, 2), date(2025, 3, 20))
    assert updated.period_start == date(2025, 3, 2)
    assert updated.period_end == date(2025, 3, 20)

    with pytest.raises(InvalidRoundDatesError):
        update_round_dates(session, round_.id, date(2025, 3, 20), date(2025, 3, 2))
    with pytest.raises(RoundNotFoundError):
        update_round_dates(session, 999, date(2025, 3, 2), date(2025, 3, 20))
