"""
Ranking service tests against the database session (no HTTP layer).
"""

import threading
from datetime import timezone

from sqlmodel import Session, select

from league.models.category import Category
from league.models.player import Player
from league.models.ranking import Ranking
from league.models.registration import Registration
from league.models.tournament import Tournament
from league.models.tournament_result import TournamentResult
from league.services.ranking_service import (
    delete_tournament_with_results,
    load_rankings,
    recalculate_all_rankings,
    recalculate_rankings,
    recalculation_lock,
    replace_tournament_results,
)

SEASON = "2025-2026"


def make_category(session: Session) -> Category:
    category = Category(game_type="LIBRE", level="R1", display_name="Libre R1")
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


def make_tournament(session: Session, category_id: int, number: int, results=(), season: str = SEASON) -> Tournament:
    tournament = Tournament(category_id=category_id, season=season, tournament_number=number)
    session.add(tournament)
    session.commit()
    session.refresh(tournament)
    for licence, match_points, points, reprises, serie in results:
        session.add(
            TournamentResult(
                tournament_id=tournament.id,
                licence=licence,
                player_name=f"Player {licence}",
                match_points=match_points,
                moyenne=points / reprises if reprises else 0.0,
                serie=serie,
                points=points,
                reprises=reprises,
            )
        )
    session.commit()
    return tournament


def snapshot(session: Session, category_id: int):
    return [
        (r.rank_position, r.licence, r.total_match_points, r.avg_moyenne, r.best_serie, r.qualified)
        for r in load_rankings(session, category_id, SEASON)
    ]


def test_recalculate_persists_ordered_ranking(session: Session):
    category = make_category(session)
    make_tournament(session, category.id, 1, [("A", 4, 30, 20, 6), ("B", 4, 40, 20, 3), ("C", 6, 10, 20, 1)])

    ranked = recalculate_rankings(session, category.id, SEASON)

    assert [e.licence for e in ranked] == ["C", "B", "A"]
    assert snapshot(session, category.id) == [
        (1, "C", 6, 0.5, 1, True),
        (2, "B", 4, 2.0, 3, True),
        (3, "A", 4, 1.5, 6, True),
    ]


def test_moyenne_weighted_by_reprises(session: Session):
    category = make_category(session)
    make_tournament(session, category.id, 1, [("A", 2, 30, 10, 4)])
    make_tournament(session, category.id, 2, [("A", 2, 10, 30, 7)])

    recalculate_rankings(session, category.id, SEASON)

    (row,) = load_rankings(session, category.id, SEASON)
    assert row.avg_moyenne == 1.0  # 40 points / 40 reprises
    assert row.total_points == 40
    assert row.total_reprises == 40
    assert row.best_serie == 7


def test_recalculate_is_idempotent(session: Session):
    category = make_category(session)
    make_tournament(session, category.id, 1, [("A", 4, 30, 20, 6), ("B", 2, 40, 20, 3)])

    recalculate_rankings(session, category.id, SEASON)
    first = snapshot(session, category.id)
    ids = [r.id for r in load_rankings(session, category.id, SEASON)]

    recalculate_rankings(session, category.id, SEASON)

    assert snapshot(session, category.id) == first
    assert [r.id for r in load_rankings(session, category.id, SEASON)] == ids


def test_presence_statuses(session: Session):
    category = make_category(session)
    make_tournament(session, category.id, 1, [("A", 4, 30, 20, 6)])
    make_tournament(session, category.id, 2, [("B", 2, 20, 20, 3)])
    # scheduled but no results yet
    make_tournament(session, category.id, 3)

    recalculate_rankings(session, category.id, SEASON)

    rows = {r.licence: r for r in load_rankings(session, category.id, SEASON)}
    assert (rows["A"].tournament_1_status, rows["A"].tournament_1_points) == ("played", 4)
    assert (rows["A"].tournament_2_status, rows["A"].tournament_2_points) == ("absent", None)
    assert rows["A"].tournament_3_status == "not_held"
    assert rows["B"].tournament_1_status == "absent"
    assert rows["B"].tournament_2_points == 2


def test_missing_from_directory(session: Session):
    category = make_category(session)
    session.add(Player(licence="A", first_name="Ann", last_name="ALPHA"))
    session.commit()
    make_tournament(session, category.id, 1, [("A", 4, 30, 20, 6), ("GHOST", 2, 20, 20, 3)])

    recalculate_rankings(session, category.id, SEASON)

    rows = {r.licence: r for r in load_rankings(session, category.id, SEASON)}
    assert rows["A"].missing_from_directory is False
    assert rows["GHOST"].missing_from_directory is True
    assert rows["GHOST"].player_name == "Player GHOST"


def test_stale_entrants_removed(session: Session):
    category = make_category(session)
    make_tournament(session, category.id, 1, [("A", 4, 30, 20, 6), ("B", 2, 20, 20, 3)])
    recalculate_rankings(session, category.id, SEASON)

    for result in session.exec(select(TournamentResult).where(TournamentResult.licence == "B")).all():
        session.delete(result)
    session.commit()
    recalculate_rankings(session, category.id, SEASON)

    assert [r.licence for r in load_rankings(session, category.id, SEASON)] == ["A"]


def test_finale_results_ignored(session: Session):
    category = make_category(session)
    make_tournament(session, category.id, 1, [("A", 2, 30, 20, 6)])
    make_tournament(session, category.id, 4, [("A", 10, 90, 20, 30), ("Z", 8, 30, 20, 6)])

    recalculate_rankings(session, category.id, SEASON)

    assert snapshot(session, category.id) == [(1, "A", 2, 1.5, 6, True)]


def test_other_season_untouched(session: Session):
    category = make_category(session)
    make_tournament(session, category.id, 1, [("A", 2, 30, 20, 6)])
    make_tournament(session, category.id, 1, [("B", 2, 30, 20, 6)], season="2024-2025")

    recalculate_rankings(session, category.id, SEASON)

    assert session.exec(select(Ranking).where(Ranking.season == "2024-2025")).all() == []


def test_recalculate_all(session: Session):
    category = make_category(session)
    make_tournament(session, category.id, 1, [("A", 2, 30, 20, 6)])
    make_tournament(session, category.id, 1, [("B", 2, 30, 20, 6), ("C", 1, 30, 20, 6)], season="2024-2025")

    summary = recalculate_all_rankings(session)

    assert summary["failed"] == []
    assert summary["recalculated"] == [
        {"category_id": category.id, "season": "2024-2025", "entrants": 2},
        {"category_id": category.id, "season": SEASON, "entrants": 1},
    ]


def test_empty_category_season(session: Session):
    category = make_category(session)
    assert recalculate_rankings(session, category.id, SEASON) == []
    assert load_rankings(session, category.id, SEASON) == []


def test_lock_per_category_season():
    assert recalculation_lock(1, SEASON) is recalculation_lock(1, SEASON)
    assert recalculation_lock(1, SEASON) is not recalculation_lock(2, SEASON)
    assert recalculation_lock(1, SEASON) is not recalculation_lock(1, "2024-2025")


def sheet_row(licence: str, match_points: int) -> dict:
    return {
        "licence": licence,
        "player_name": f"Player {licence}",
        "match_points": match_points,
        "moyenne": 1.5,
        "serie": 4,
        "points": 30,
        "reprises": 20,
    }


def test_replace_results_recalculates(session: Session):
    category = make_category(session)
    tournament = make_tournament(session, category.id, 1, [("OLD", 2, 30, 20, 6)])

    ranked = replace_tournament_results(session, tournament, [sheet_row("A", 4), sheet_row("B", 6)])

    assert [e.licence for e in ranked] == ["B", "A"]
    assert [r.licence for r in load_rankings(session, category.id, SEASON)] == ["B", "A"]
    assert session.get(Tournament, tournament.id).import_date is not None


def test_replace_finale_results_skips_ranking(session: Session):
    category = make_category(session)
    finale = make_tournament(session, category.id, 4)

    assert replace_tournament_results(session, finale, [sheet_row("A", 4)]) is None
    assert load_rankings(session, category.id, SEASON) == []


def test_delete_tournament_with_results(session: Session):
    category = make_category(session)
    make_tournament(session, category.id, 1, [("A", 2, 30, 20, 6)])
    second = make_tournament(session, category.id, 2, [("B", 4, 30, 20, 6)])

    ranked = delete_tournament_with_results(session, second)

    assert [e.licence for e in ranked] == ["A"]
    assert session.exec(select(TournamentResult).where(TournamentResult.licence == "B")).all() == []


def test_result_write_waits_for_recalculation_lock(session: Session, engine):
    category = make_category(session)
    tournament_id = make_tournament(session, category.id, 1).id
    errors = []

    def write_sheet():
        try:
            with Session(engine) as other:
                replace_tournament_results(other, other.get(Tournament, tournament_id), [sheet_row("A", 4)])
        except Exception as exc:  # surfaced through the assertion below
            errors.append(exc)

    writer = threading.Thread(target=write_sheet)
    with recalculation_lock(category.id, SEASON):
        writer.start()
        writer.join(timeout=0.3)
        # blocked before deleting or inserting anything
        assert writer.is_alive()
        assert session.exec(select(TournamentResult)).all() == []

    writer.join(timeout=5)
    assert not writer.is_alive()
    assert errors == []
    assert [r.licence for r in load_rankings(session, category.id, SEASON)] == ["A"]


def test_recalculation_lock_is_reentrant():
    lock = recalculation_lock(3, SEASON)
    with lock:
        with recalculation_lock(3, SEASON):
            pass


def test_default_timestamps_are_utc_aware():
    stamps = [
        Player(licence="A", first_name="A", last_name="A").created_at,
        Tournament(category_id=1, season=SEASON, tournament_number=1).created_at,
        Registration(tournament_id=1, licence="A", player_name="A").registered_at,
        Ranking(
            category_id=1,
            season=SEASON,
            licence="A",
            player_name="A",
            rank_position=1,
            total_match_points=0,
            avg_moyenne=0.0,
            best_serie=0,
        ).updated_at,
    ]
    assert all(stamp.tzinfo is timezone.utc for stamp in stamps)
