# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from league.models.category import Category  # noqa: F401
from league.models.player import Player  # noqa: F401
from league.models.ranking import Ranking  # noqa: F401
from league.models.registration import Registration  # noqa: F401
from league.models.tournament import Tournament  # noqa: F401
from league.models.tournament_result import TournamentResult  # noqa: F401
