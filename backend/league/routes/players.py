"""
Player Directory API Routes

The directory is the reference list of licences. Ranking lines whose licence
is not found here are flagged missing_from_directory.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, field_validator
from sqlmodel import Session, select

from league.database import get_session
from league.models.player import Player
from league.utils.identity import club_key, normalize_licence, resolve_club_name

router = APIRouter()


class PlayerCreate(BaseModel):
    licence: str
    first_name: str
    last_name: str
    club: Optional[str] = None

    @field_validator("licence")
    @classmethod
    def validate_licence(cls, v):
        normalized = normalize_licence(v)
        if not normalized:
            raise ValueError("licence cannot be empty")
        return normalized


class PlayerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    licence: str
    first_name: str
    last_name: str
    club: Optional[str] = None
    is_active: bool


@router.get("/players", response_model=List[PlayerResponse])
def get_players(session: Session = Depends(get_session)):
    """Get all players ordered by last name"""
    return session.exec(select(Player).order_by(Player.last_name, Player.first_name)).all()


@router.post("/players", response_model=PlayerResponse, status_code=201)
def create_player(player_data: PlayerCreate, session: Session = Depends(get_session)):
    """Add a player to the directory"""
    existing = session.exec(select(Player).where(Player.licence == player_data.licence)).first()
    if existing:
        raise HTTPException(status_code=409, detail=f"Player with licence '{player_data.licence}' already exists")

    # Reuse the spelling already on file for the same club ("B.C. Saint-Denis" == "bc saint denis")
    clubs = session.exec(select(Player.club).where(Player.club != None).distinct()).all()  # noqa: E711
    known_clubs = {club_key(club): club for club in clubs}
    player_data.club = resolve_club_name(player_data.club, known_clubs)

    player = Player(**player_data.model_dump())
    session.add(player)
    session.commit()
    session.refresh(player)
    return player
