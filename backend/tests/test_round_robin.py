"""
Round-robin pairing properties (pure functions, no database).
"""
from itertools import combinations

import pytest

from league.services.schedule_generator import (
    byes_by_round,
    generate_round_robin,
    rr_pairings_by_round,
    rr_round_count,
)


@pytest.mark.parametrize("n", range(2, 13))
def test_every_pair_meets_exactly_once(n):
    ids = list(range(101, 101 + n))
    rounds = generate_round_robin(ids)

    met = [frozenset(pair) for pairings in rounds for pair in pairings]
    assert len(met) == n * (n - 1) // 2
    assert set(met) == {frozenset(p) for p in combinations(ids, 2)}


@pytest.mark.parametrize("n", range(2, 13))
def test_round_and_match_counts(n):
    rounds = generate_round_robin(list(range(1, n + 1)))
    if n % 2 == 0:
        assert len(rounds) == n - 1
        assert all(len(pairings) == n // 2 for pairings in rounds)
    else:
        assert len(rounds) == n
        assert all(len(pairings) == (n - 1) // 2 for pairings in rounds)
    assert rr_round_count(n) == len(rounds)


@pytest.mark.parametrize("n", range(2, 13))
def test_nobody_plays_twice_in_a_round(n):
    for pairings in generate_round_robin(list(range(1, n + 1))):
        playing = [pid for pair in pairings for pid in pair]
        assert len(playing) == len(set(playing))
        assert all(a != b for a, b in pairings)


def test_five_players_each_sit_out_once():
    ids = [10, 20, 30, 40, 50]
    rounds = generate_round_robin(ids)

    assert len(rounds) == 5
    assert all(len(pairings) == 2 for pairings in rounds)

    byes = byes_by_round(ids, rounds)
    assert sorted(byes) == sorted(ids)


def test_even_count_has_no_byes():
    ids = [1, 2, 3, 4]
    rounds = generate_round_robin(ids)
    assert byes_by_round(ids, rounds) == [None, None, None]


def test_four_player_rotation_order():
    """Index 0 is fixed; the others rotate around it."""
    assert generate_round_robin([1, 2, 3, 4]) == [
        [(1, 2), (4, 3)],
        [(1, 3), (2, 4)],
        [(1, 4), (3, 2)],
    ]


def test_two_players_single_match():
    assert generate_round_robin([7, 9]) == [[(7, 9)]]


def test_pairings_sequence_is_contiguous_per_round():
    pairings = rr_pairings_by_round(7)
    by_round = {}
    for round_index, seq, _a, _b in pairings:
        by_round.setdefault(round_index, []).append(seq)
    for seqs in by_round.values():
        assert seqs == list(range(1, len(seqs) + 1))


def test_rejects_too_few_players():
    with pytest.raises(ValueError):
        generate_round_robin([1])
    with pytest.raises(ValueError):
        generate_round_robin([])


def test_rejects_duplicate_ids():
    with pytest.raises(ValueError):
        generate_round_robin([1, 2, 2, 3])


def test_round_count_below_two():
    assert rr_round_count(0) == 0
    assert rr_round_count(1) == 0
    assert rr_pairings_by_round(1) == []
