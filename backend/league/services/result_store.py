"""
Result Store

Narrow read interface between persisted tournaments/results and the ranking
engine. The engine receives typed ResultRow values and never builds queries.
"""

from decimal import Decimal
from typing import List, Set

from sqlmodel import Session, select

from league.models.player import Player
from league.models.tournament import Tournament
from league.models.tournament_result import TournamentResult
from league.services.ranking_rules import RANKED_TOURNAMENT_NUMBERS
from league.services.results_aggregator import ResultRow
from league.utils.identity import normalize_licence


def fetch_result_rows(session: Session, category_id: int, season: str) -> List[ResultRow]:
    """
    Load the qualifier results of one category/season as ResultRow values.

    Finale results are excluded: they never count toward the season ranking.
    Rows come back ordered by (tournament_number, licence).
    """
    query = (
        select(TournamentResult, Tournament.tournament_number)
        .join(Tournament, TournamentResult.tournament_id == Tournament.id)
        .where(
            Tournament.category_id == category_id,
            Tournament.season == season,
            Tournament.tournament_number.in_(RANKED_TOURNAMENT_NUMBERS),
        )
        .order_by(Tournament.tournament_number, TournamentResult.licence)
    )

    rows: List[ResultRow] = []
    for result, tournament_number in session.exec(query).all():
        rows.append(
            ResultRow(
                tournament_number=tournament_number,
                licence=result.licence,
                player_name=result.player_name,
                match_points=result.match_points,
                moyenne=Decimal(str(result.moyenne)),
                serie=result.serie,
                points=result.points,
                reprises=result.reprises,
            )
        )
    return rows


def held_tournament_numbers(session: Session, category_id: int, season: str) -> Set[int]:
    """
    Qualifier numbers that have been played for a category/season.

    A tournament counts as held once at least one result was imported for it;
    a scheduled tournament without results is not held yet.
    """
    query = (
        select(Tournament.tournament_number)
        .join(TournamentResult, TournamentResult.tournament_id == Tournament.id)
        .where(
            Tournament.category_id == category_id,
            Tournament.season == season,
            Tournament.tournament_number.in_(RANKED_TOURNAMENT_NUMBERS),
        )
        .distinct()
    )
    return set(session.exec(query).all())


def directory_licences(session: Session) -> Set[str]:
    """Normalized licences of every player in the directory."""
    return {normalize_licence(licence) for licence in session.exec(select(Player.licence)).all()}
