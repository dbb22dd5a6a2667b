"""
Tests for the Ranking Engine and qualification rule.
"""

import random
from decimal import Decimal

import pytest

from league.services.ranking_engine import rank, ranking_key, ranking_to_dict
from league.services.ranking_rules import qualified_count
from league.services.results_aggregator import EntrantTotals, ResultRow, TournamentPresence, aggregate


def make_totals(licence: str, match_points: int, moyenne: str = "0", serie: int = 0) -> EntrantTotals:
    return EntrantTotals(
        licence=licence,
        player_name=f"Player {licence}",
        total_match_points=match_points,
        avg_moyenne=Decimal(moyenne),
        best_serie=serie,
        total_points=0,
        total_reprises=0,
        per_tournament_points=(match_points, TournamentPresence.NOT_HELD, TournamentPresence.NOT_HELD),
    )


class TestQualifiedCount:
    @pytest.mark.parametrize("n,expected", [(0, 4), (1, 4), (8, 4), (9, 6), (10, 6), (20, 6)])
    def test_step_function(self, n, expected):
        assert qualified_count(n) == expected


class TestRank:
    def test_empty_input(self):
        assert rank([]) == []

    def test_match_points_first(self):
        ranked = rank([make_totals("A", 4, "9.0", 50), make_totals("B", 6, "1.0", 1)])
        assert [e.licence for e in ranked] == ["B", "A"]

    def test_moyenne_breaks_match_point_tie(self):
        ranked = rank([make_totals("A", 6, "1.200", 9), make_totals("B", 6, "1.250", 2)])
        assert [e.licence for e in ranked] == ["B", "A"]

    def test_serie_breaks_moyenne_tie(self):
        ranked = rank([make_totals("A", 6, "1.2", 9), make_totals("B", 6, "1.2", 11)])
        assert [e.licence for e in ranked] == ["B", "A"]

    def test_full_tie_broken_by_licence(self):
        ranked = rank([make_totals("Z9", 6, "1.2", 9), make_totals("A1", 6, "1.2", 9)])
        assert [(e.licence, e.rank_position) for e in ranked] == [("A1", 1), ("Z9", 2)]

    def test_positions_are_dense_and_distinct(self):
        totals = [make_totals(f"L{i}", 6, "1.0", 3) for i in range(5)]
        assert [e.rank_position for e in rank(totals)] == [1, 2, 3, 4, 5]

    def test_ordering_holds_for_shuffled_input(self):
        rng = random.Random(7)
        totals = [
            make_totals(f"L{i:02d}", rng.randint(0, 6), f"{rng.randint(0, 3)}.{rng.randint(0, 9)}", rng.randint(0, 5))
            for i in range(30)
        ]
        ranked = rank(totals)

        triples = [(e.total_match_points, e.avg_moyenne, e.best_serie) for e in ranked]
        for better, worse in zip(triples, triples[1:]):
            assert better >= worse

        shuffled = list(totals)
        rng.shuffle(shuffled)
        assert rank(shuffled) == ranked

    def test_qualified_flags_small_field(self):
        ranked = rank([make_totals(f"L{i}", 10 - i) for i in range(8)])
        assert [e.qualified for e in ranked] == [True] * 4 + [False] * 4

    def test_qualified_flags_large_field(self):
        ranked = rank([make_totals(f"L{i}", 10 - i) for i in range(9)])
        assert sum(e.qualified for e in ranked) == 6
        assert all(e.qualified for e in ranked[:6])

    def test_missing_from_directory_flagged_but_ranked(self):
        ranked = rank(
            [make_totals("KNOWN", 6), make_totals("GHOST", 8)],
            known_licences={"KNOWN"},
        )
        assert [(e.licence, e.missing_from_directory) for e in ranked] == [("GHOST", True), ("KNOWN", False)]
        assert ranked[0].player_name == "Player GHOST"

    def test_no_directory_means_no_flags(self):
        assert not any(e.missing_from_directory for e in rank([make_totals("A", 1)]))

    def test_ranking_key_lower_is_better(self):
        assert ranking_key(make_totals("A", 6)) < ranking_key(make_totals("B", 4))


def test_aggregate_then_rank_is_idempotent():
    rows = [
        ResultRow(1, "L1", "A", 6, Decimal("1.5"), 7, 45, 30),
        ResultRow(1, "L2", "B", 6, Decimal("1.5"), 7, 45, 30),
        ResultRow(2, "L2", "B", 2, Decimal("1.0"), 4, 20, 20),
        ResultRow(1, "L3", "C", 4, Decimal("2.0"), 9, 60, 30),
    ]
    first = rank(aggregate(rows, {1, 2}))
    second = rank(aggregate(list(reversed(rows)), {1, 2}))

    assert first == second
    assert [ranking_to_dict(e) for e in first] == [ranking_to_dict(e) for e in second]


def test_ranking_to_dict_uses_string_sentinels():
    (entrant,) = rank([make_totals("A", 3, "1.23456")])
    data = ranking_to_dict(entrant)

    assert data["per_tournament_points"] == [3, "not_held", "not_held"]
    assert data["avg_moyenne"] == 1.235
    assert data["rank_position"] == 1
    assert data["qualified"] is True
