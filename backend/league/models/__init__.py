from league.models.category import Category
from league.models.player import Player
from league.models.ranking import Ranking
from league.models.registration import Registration
from league.models.tournament import Tournament
from league.models.tournament_result import TournamentResult

__all__ = [
    "Category",
    "Player",
    "Ranking",
    "Registration",
    "Tournament",
    "TournamentResult",
]
