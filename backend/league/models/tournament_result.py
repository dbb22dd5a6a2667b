from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from league.models.tournament import Tournament


class TournamentResult(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("tournament_id", "licence", name="uq_tournament_result_licence"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    licence: str  # Normalized
    player_name: str  # Name as printed on the result sheet
    match_points: int = Field(default=0)
    moyenne: float = Field(default=0.0)
    serie: int = Field(default=0)
    points: int = Field(default=0)
    reprises: int = Field(default=0)

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="results")
