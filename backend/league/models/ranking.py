from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, SQLModel


class Ranking(SQLModel, table=True):
    """
    Persisted season ranking line. Rebuilt wholesale by the ranking service;
    upserted on (category_id, season, licence).
    """

    __table_args__ = (SAUniqueConstraint("category_id", "season", "licence", name="uq_ranking_licence"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    category_id: int = Field(foreign_key="category.id", index=True)
    season: str = Field(index=True)
    licence: str
    player_name: str
    rank_position: int
    total_match_points: int
    avg_moyenne: float
    best_serie: int
    total_points: int = Field(default=0)
    total_reprises: int = Field(default=0)

    # Per-qualifier match points; status is "played" | "absent" | "not_held"
    tournament_1_points: Optional[int] = Field(default=None)
    tournament_1_status: str = Field(default="not_held")
    tournament_2_points: Optional[int] = Field(default=None)
    tournament_2_status: str = Field(default="not_held")
    tournament_3_points: Optional[int] = Field(default=None)
    tournament_3_status: str = Field(default="not_held")

    qualified: bool = Field(default=False)
    missing_from_directory: bool = Field(default=False)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
