from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from league.models.category import Category
    from league.models.registration import Registration
    from league.models.tournament_result import TournamentResult


class Tournament(SQLModel, table=True):
    __table_args__ = (
        SAUniqueConstraint("category_id", "tournament_number", "season", name="uq_category_tournament_season"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    category_id: int = Field(foreign_key="category.id", index=True)
    season: str  # "2025-2026"
    tournament_number: int  # 1..3 qualifiers, 4 = finale
    tournament_date: Optional[date] = None
    import_date: Optional[datetime] = Field(default=None)  # Last result import
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Relationships
    category: "Category" = Relationship(back_populates="tournaments")
    results: List["TournamentResult"] = Relationship(
        back_populates="tournament", sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )
    registrations: List["Registration"] = Relationship(
        back_populates="tournament", sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )
