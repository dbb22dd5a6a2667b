from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from league.models.tournament import Tournament


class Registration(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("tournament_id", "licence", name="uq_registration_licence"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    licence: str  # Normalized
    player_name: str
    registered_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))  # Orders newcomers in the draw
    withdrawn: bool = Field(default=False)

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="registrations")
