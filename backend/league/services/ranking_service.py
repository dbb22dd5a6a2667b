"""
Ranking Service

Recomputes and persists the season ranking of a (category, season) pair.

Guarantees:
    - Serialized per (category, season): recomputations and result-sheet
      writes for the same pair run one after the other; different pairs run
      independently
    - Full rebuild from the stored result snapshot (aggregate -> rank)
    - Upsert keyed by (category, season, licence) in a single commit
    - Idempotent: unchanged results produce identical ranking rows
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlmodel import Session, select

from league.models.ranking import Ranking
from league.models.tournament import Tournament
from league.models.tournament_result import TournamentResult
from league.services.ranking_engine import RankedEntrant, rank
from league.services.ranking_rules import RANKED_TOURNAMENT_NUMBERS
from league.services.result_store import directory_licences, fetch_result_rows, held_tournament_numbers
from league.services.results_aggregator import TournamentPresence, aggregate

logger = logging.getLogger(__name__)

# One reentrant lock per (category, season) for the life of the process.
# Entries are never evicted: there is one per category and season on record.
_locks_guard = threading.Lock()
_locks: Dict[Tuple[int, str], threading.RLock] = {}


def recalculation_lock(category_id: int, season: str) -> threading.RLock:
    """
    Return the lock serializing writes and recomputation of one (category, season).

    Reentrant, so a caller holding it across a result write can run
    recalculate_rankings() inside the same critical section.
    """
    key = (category_id, season)
    with _locks_guard:
        lock = _locks.get(key)
        if lock is None:
            lock = threading.RLock()
            _locks[key] = lock
        return lock


def _apply_entrant(row: Ranking, entrant: RankedEntrant) -> None:
    row.player_name = entrant.player_name
    row.rank_position = entrant.rank_position
    row.total_match_points = entrant.total_match_points
    row.avg_moyenne = float(entrant.avg_moyenne)
    row.best_serie = entrant.best_serie
    row.total_points = entrant.totals.total_points
    row.total_reprises = entrant.totals.total_reprises
    row.qualified = entrant.qualified
    row.missing_from_directory = entrant.missing_from_directory

    for number, value in zip(RANKED_TOURNAMENT_NUMBERS, entrant.per_tournament_points):
        if isinstance(value, TournamentPresence):
            points, status = None, value.value
        else:
            points, status = value, "played"
        setattr(row, f"tournament_{number}_points", points)
        setattr(row, f"tournament_{number}_status", status)


def recalculate_rankings(session: Session, category_id: int, season: str) -> List[RankedEntrant]:
    """
    Rebuild the ranking of one category/season and persist it.

    Args:
        session: Database session (committed on success)
        category_id: Category ID
        season: Season label, e.g. "2025-2026"

    Returns:
        The ranked entrants, best first
    """
    with recalculation_lock(category_id, season):
        rows = fetch_result_rows(session, category_id, season)
        held = held_tournament_numbers(session, category_id, season)
        ranked = rank(aggregate(rows, held), known_licences=directory_licences(session))

        existing = {
            r.licence: r
            for r in session.exec(
                select(Ranking).where(Ranking.category_id == category_id, Ranking.season == season)
            ).all()
        }

        now = datetime.now(timezone.utc)
        for entrant in ranked:
            row = existing.pop(entrant.licence, None)
            if row is None:
                row = Ranking(category_id=category_id, season=season, licence=entrant.licence)
            _apply_entrant(row, entrant)
            row.updated_at = now
            session.add(row)

        # Licences with no remaining results drop out of the ranking
        for stale in existing.values():
            session.delete(stale)

        session.commit()

    flagged = sum(1 for e in ranked if e.missing_from_directory)
    logger.info(
        "Rankings recalculated: category=%d season=%s entrants=%d held=%s removed=%d missing_from_directory=%d",
        category_id,
        season,
        len(ranked),
        sorted(held),
        len(existing),
        flagged,
    )
    return ranked


def replace_tournament_results(
    session: Session, tournament: Tournament, rows: Sequence[Dict[str, Any]]
) -> Optional[List[RankedEntrant]]:
    """
    Replace the result sheet of a tournament and recalculate its ranking.

    The delete, insert, commit and recomputation all run under the
    (category, season) lock, so no recomputation of that pair can read a
    half-written sheet.

    Args:
        session: Database session (committed)
        tournament: Tournament whose results are replaced
        rows: TournamentResult field values, licences already normalized

    Returns:
        The ranked entrants, or None for a finale (never ranked)
    """
    tournament_id = tournament.id
    category_id, season = tournament.category_id, tournament.season
    tournament_number = tournament.tournament_number

    with recalculation_lock(category_id, season):
        for existing in session.exec(
            select(TournamentResult).where(TournamentResult.tournament_id == tournament_id)
        ).all():
            session.delete(existing)
        session.flush()

        for row in rows:
            session.add(TournamentResult(tournament_id=tournament_id, **row))

        tournament.import_date = datetime.now(timezone.utc)
        session.add(tournament)
        session.commit()
        logger.info("Results replaced: tournament=%d rows=%d", tournament_id, len(rows))

        if tournament_number not in RANKED_TOURNAMENT_NUMBERS:
            return None
        return recalculate_rankings(session, category_id, season)


def delete_tournament_with_results(session: Session, tournament: Tournament) -> List[RankedEntrant]:
    """Delete a tournament with its results and registrations, then recalculate its ranking."""
    category_id, season = tournament.category_id, tournament.season

    with recalculation_lock(category_id, season):
        session.delete(tournament)
        session.commit()
        return recalculate_rankings(session, category_id, season)


def recalculate_all_rankings(session: Session) -> Dict:
    """
    Recalculate every (category, season) pair that has tournaments.

    Returns:
        Dict with:
        - recalculated: list of {category_id, season, entrants}
        - failed: list of {category_id, season, error}
    """
    pairs = session.exec(
        select(Tournament.category_id, Tournament.season)
        .distinct()
        .order_by(Tournament.category_id, Tournament.season)
    ).all()

    recalculated = []
    failed = []
    for category_id, season in pairs:
        try:
            ranked = recalculate_rankings(session, category_id, season)
            recalculated.append({"category_id": category_id, "season": season, "entrants": len(ranked)})
        except Exception as exc:
            session.rollback()
            logger.exception("Failed to recalculate rankings for category %d season %s", category_id, season)
            failed.append({"category_id": category_id, "season": season, "error": str(exc)})

    return {"recalculated": recalculated, "failed": failed}


def load_rankings(session: Session, category_id: int, season: str) -> List[Ranking]:
    """Persisted ranking lines ordered by rank position."""
    return list(
        session.exec(
            select(Ranking)
            .where(Ranking.category_id == category_id, Ranking.season == season)
            .order_by(Ranking.rank_position)
        ).all()
    )
