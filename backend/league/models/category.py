from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from league.models.tournament import Tournament


class Category(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("game_type", "level", name="uq_category_game_level"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    game_type: str  # "LIBRE" | "CADRE" | "BANDE" | "3BANDES"
    level: str  # "R2", "N3", ...
    display_name: str

    # Relationships
    tournaments: List["Tournament"] = Relationship(back_populates="category")
