"""
Results Aggregator

Folds per-tournament result rows of one category/season into cumulative
per-entrant totals. Pure: rows and the set of held tournaments are handed in,
totals are handed back. Totals are always rebuilt from the full snapshot,
never patched incrementally.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Callable, Collection, Dict, Iterable, List, Tuple, Union

from league.services.ranking_rules import RANKED_TOURNAMENT_NUMBERS
from league.utils.identity import normalize_licence


class InvalidResultRowError(ValueError):
    """Raised when a result row fails boundary validation"""

    pass


class DuplicateResultError(ValueError):
    """Raised when two rows share (tournament_number, normalized licence)"""

    pass


class TournamentPresence(str, Enum):
    """Per-tournament marker when an entrant has no score for that tournament."""

    ABSENT = "absent"  # tournament held, entrant did not play
    NOT_HELD = "not_held"  # tournament not played yet


TournamentPoints = Union[int, TournamentPresence]


@dataclass(frozen=True)
class ResultRow:
    """One entrant's result in one qualifier tournament."""

    tournament_number: int
    licence: str
    player_name: str
    match_points: int
    moyenne: Decimal
    serie: int
    points: int
    reprises: int

    def __post_init__(self):
        if self.tournament_number not in RANKED_TOURNAMENT_NUMBERS:
            raise InvalidResultRowError(
                f"tournament_number must be one of {RANKED_TOURNAMENT_NUMBERS}, got {self.tournament_number}"
            )
        if not normalize_licence(self.licence):
            raise InvalidResultRowError("licence cannot be empty")
        if not isinstance(self.player_name, str) or not self.player_name.strip():
            raise InvalidResultRowError(f"player_name cannot be empty for licence {self.licence}")
        for name in ("match_points", "serie", "points", "reprises"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidResultRowError(f"{name} must be an integer, got {value!r}")
            if value < 0:
                raise InvalidResultRowError(f"{name} must be >= 0, got {value}")
        if Decimal(self.moyenne) < 0:
            raise InvalidResultRowError(f"moyenne must be >= 0, got {self.moyenne}")


@dataclass(frozen=True)
class EntrantTotals:
    """Cumulative season figures for one licence."""

    licence: str
    player_name: str
    total_match_points: int
    avg_moyenne: Decimal
    best_serie: int
    total_points: int
    total_reprises: int
    per_tournament_points: Tuple[TournamentPoints, ...]


def compute_moyenne(points: int, reprises: int) -> Decimal:
    """points / reprises, or 0 when no reprises were played."""
    if reprises <= 0:
        return Decimal(0)
    return Decimal(points) / Decimal(reprises)


def aggregate(
    rows: Iterable[ResultRow],
    held_tournaments: Collection[int],
    normalize: Callable[[str], str] = normalize_licence,
) -> List[EntrantTotals]:
    """
    Aggregate result rows into one EntrantTotals per licence.

    Args:
        rows: Result rows for a single category/season
        held_tournaments: Tournament numbers that have actually been played
        normalize: Licence normalizer (identity-resolution collaborator)

    Returns:
        EntrantTotals ordered by normalized licence

    Raises:
        DuplicateResultError: If a licence has two rows for the same tournament
    """
    by_licence: Dict[str, Dict[int, ResultRow]] = {}
    for row in rows:
        licence = normalize(row.licence)
        per_tournament = by_licence.setdefault(licence, {})
        if row.tournament_number in per_tournament:
            raise DuplicateResultError(
                f"Licence {licence} has more than one result for tournament {row.tournament_number}"
            )
        per_tournament[row.tournament_number] = row

    held = set(held_tournaments)
    totals: List[EntrantTotals] = []

    for licence in sorted(by_licence):
        per_tournament = by_licence[licence]
        entrant_rows = [per_tournament[n] for n in sorted(per_tournament)]

        # Moyenne only over rows where turns were actually played
        scored = [r for r in entrant_rows if r.reprises > 0]
        sum_points = sum(r.points for r in scored)
        sum_reprises = sum(r.reprises for r in scored)

        slots: List[TournamentPoints] = []
        for number in RANKED_TOURNAMENT_NUMBERS:
            if number in per_tournament:
                slots.append(per_tournament[number].match_points)
            elif number in held:
                slots.append(TournamentPresence.ABSENT)
            else:
                slots.append(TournamentPresence.NOT_HELD)

        totals.append(
            EntrantTotals(
                licence=licence,
                player_name=entrant_rows[0].player_name.strip(),
                total_match_points=sum(r.match_points for r in entrant_rows),
                avg_moyenne=compute_moyenne(sum_points, sum_reprises),
                best_serie=max(r.serie for r in entrant_rows),
                total_points=sum_points,
                total_reprises=sum_reprises,
                per_tournament_points=tuple(slots),
            )
        )

    return totals
