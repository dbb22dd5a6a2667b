"""
Ranking Engine

Orders aggregated entrants by the fixed tie-break chain and assigns dense,
never-shared rank positions.

Order (best first):
    1. total_match_points DESC
    2. avg_moyenne DESC
    3. best_serie DESC
    4. licence ASC (final deterministic tie-break)
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Collection, Dict, List, Optional, Sequence, Tuple

from league.services.ranking_rules import qualified_count
from league.services.results_aggregator import EntrantTotals, TournamentPoints, TournamentPresence

logger = logging.getLogger(__name__)

# Decimal places used when a moyenne leaves the engine (display / JSON)
MOYENNE_DISPLAY_PLACES = Decimal("0.001")


@dataclass(frozen=True)
class RankedEntrant:
    """EntrantTotals plus its place in the season ranking."""

    totals: EntrantTotals
    rank_position: int
    qualified: bool = False
    missing_from_directory: bool = False

    @property
    def licence(self) -> str:
        return self.totals.licence

    @property
    def player_name(self) -> str:
        return self.totals.player_name

    @property
    def total_match_points(self) -> int:
        return self.totals.total_match_points

    @property
    def avg_moyenne(self) -> Decimal:
        return self.totals.avg_moyenne

    @property
    def best_serie(self) -> int:
        return self.totals.best_serie

    @property
    def per_tournament_points(self) -> Tuple[TournamentPoints, ...]:
        return self.totals.per_tournament_points


def ranking_key(totals: EntrantTotals) -> tuple:
    """Return sort key for the season ranking. Lower = better."""
    return (
        -totals.total_match_points,
        -totals.avg_moyenne,
        -totals.best_serie,
        totals.licence,
    )


def rank(
    totals: Sequence[EntrantTotals],
    known_licences: Optional[Collection[str]] = None,
) -> List[RankedEntrant]:
    """
    Rank entrants and flag the finale qualifiers.

    Args:
        totals: Aggregated entrants for one category/season
        known_licences: Normalized licences of the player directory. When given,
            entrants missing from it are flagged but still ranked.

    Returns:
        RankedEntrant list in rank order, positions 1..n
    """
    ordered = sorted(totals, key=ranking_key)
    cutoff = qualified_count(len(ordered))

    ranked: List[RankedEntrant] = []
    for index, entrant in enumerate(ordered):
        missing = known_licences is not None and entrant.licence not in known_licences
        if missing:
            logger.warning(
                "Licence %s (%s) not found in player directory; ranked from result row",
                entrant.licence,
                entrant.player_name,
            )
        ranked.append(
            RankedEntrant(
                totals=entrant,
                rank_position=index + 1,
                qualified=index < cutoff,
                missing_from_directory=missing,
            )
        )
    return ranked


def _points_value(value: TournamentPoints) -> Any:
    if isinstance(value, TournamentPresence):
        return value.value
    return value


def ranking_to_dict(entrant: RankedEntrant) -> Dict[str, Any]:
    """Serialize a ranked entrant for persistence callers and rendering."""
    return {
        "licence": entrant.licence,
        "player_name": entrant.player_name,
        "rank_position": entrant.rank_position,
        "total_match_points": entrant.total_match_points,
        "avg_moyenne": float(entrant.avg_moyenne.quantize(MOYENNE_DISPLAY_PLACES)),
        "best_serie": entrant.best_serie,
        "total_points": entrant.totals.total_points,
        "total_reprises": entrant.totals.total_reprises,
        "per_tournament_points": [_points_value(v) for v in entrant.per_tournament_points],
        "qualified": entrant.qualified,
        "missing_from_directory": entrant.missing_from_directory,
    }
