"""
Draw Service

Turns the registrations of a tournament into seeded pools and their match
lists. Read-only: the draw is computed on demand and is not persisted here.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlmodel import Session, select

from league.models.registration import Registration
from league.models.tournament import Tournament
from league.services.match_scheduler import schedule, schedule_finale
from league.services.pool_allocator import InvalidPoolCountError, Newcomer, allocate, pool_sizes, pool_to_dict
from league.services.ranking_engine import RankedEntrant
from league.services.ranking_rules import (
    FINALE_TOURNAMENT_NUMBER,
    RANKED_TOURNAMENT_NUMBERS,
    describe_pool_sizes,
    recommended_pool_count,
)
from league.services.ranking_service import load_rankings
from league.services.results_aggregator import EntrantTotals, TournamentPresence
from league.utils.identity import normalize_licence

logger = logging.getLogger(__name__)


class DrawError(Exception):
    """Raised when a draw cannot be built for a tournament"""

    pass


def _ranked_from_row(row) -> RankedEntrant:
    """Rebuild the engine view of a persisted ranking line."""
    points = []
    for number in RANKED_TOURNAMENT_NUMBERS:
        status = getattr(row, f"tournament_{number}_status")
        if status == "played":
            points.append(getattr(row, f"tournament_{number}_points"))
        else:
            points.append(TournamentPresence(status))
    totals = EntrantTotals(
        licence=row.licence,
        player_name=row.player_name,
        total_match_points=row.total_match_points,
        avg_moyenne=Decimal(str(row.avg_moyenne)),
        best_serie=row.best_serie,
        total_points=row.total_points,
        total_reprises=row.total_reprises,
        per_tournament_points=tuple(points),
    )
    return RankedEntrant(
        totals=totals,
        rank_position=row.rank_position,
        qualified=row.qualified,
        missing_from_directory=row.missing_from_directory,
    )


def split_registrations(
    registrations: List[Registration],
    ranked_by_licence: Dict[str, RankedEntrant],
) -> Tuple[List[RankedEntrant], List[Newcomer]]:
    """
    Split registrations into ranked entrants and newcomers.

    Ranked: ordered by rank position.
    Newcomers: ordered by registered_at, then licence.
    """
    ranked: List[RankedEntrant] = []
    newcomers: List[Registration] = []
    for registration in registrations:
        entrant = ranked_by_licence.get(normalize_licence(registration.licence))
        if entrant is not None:
            ranked.append(entrant)
        else:
            newcomers.append(registration)

    ranked.sort(key=lambda e: e.rank_position)
    newcomers.sort(key=lambda r: (r.registered_at, normalize_licence(r.licence)))
    return ranked, [Newcomer(licence=normalize_licence(r.licence), player_name=r.player_name) for r in newcomers]


def build_draw(session: Session, tournament_id: int, pool_count: Optional[int] = None) -> Dict[str, Any]:
    """
    Build pools and matches for a tournament.

    Qualifiers: every active registration is drawn; pools default to
    recommended_pool_count(). Finale: only qualified ranked entrants are drawn,
    into a single pool playing the finale schedule; any pool_count other than
    1 is rejected.

    Raises:
        DrawError: If the tournament does not exist
        InvalidPoolCountError: If pool_count is out of range (also when given
            for a tournament with no entrants)
    """
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise DrawError(f"Tournament {tournament_id} not found")

    registrations = session.exec(
        select(Registration)
        .where(Registration.tournament_id == tournament_id, Registration.withdrawn == False)  # noqa: E712
        .order_by(Registration.id)
    ).all()

    ranked_by_licence = {
        row.licence: _ranked_from_row(row)
        for row in load_rankings(session, tournament.category_id, tournament.season)
    }
    ranked, newcomers = split_registrations(list(registrations), ranked_by_licence)

    is_finale = tournament.tournament_number == FINALE_TOURNAMENT_NUMBER
    if is_finale:
        if pool_count is not None and pool_count != 1:
            raise InvalidPoolCountError(f"A finale is drawn into a single pool, got pool_count={pool_count}")
        skipped = [e.licence for e in ranked if not e.qualified] + [n.licence for n in newcomers]
        if skipped:
            logger.warning("Finale %d: ignoring %d non-qualified registrations: %s", tournament_id, len(skipped), skipped)
        ranked = [e for e in ranked if e.qualified]
        newcomers = []

    entrant_count = len(ranked) + len(newcomers)
    requested = pool_count is not None
    if not requested:
        pool_count = 1 if is_finale else recommended_pool_count(entrant_count)

    # An explicit pool_count is always validated, even with nobody registered
    pools = allocate(ranked, pool_count, newcomers) if requested or entrant_count else []
    scheduler = schedule_finale if is_finale else schedule

    sizes = pool_sizes(pools)
    logger.info(
        "Draw built: tournament=%d finale=%s entrants=%d new=%d pools=%s",
        tournament_id,
        is_finale,
        entrant_count,
        len(newcomers),
        sizes,
    )
    return {
        "tournament_id": tournament_id,
        "is_finale": is_finale,
        "entrant_count": entrant_count,
        "pool_count": len(pools),
        "description": describe_pool_sizes(sizes),
        "pools": [pool_to_dict(pool, scheduler(pool.size)) for pool in pools],
    }
