"""
Tournament API Routes

Tournaments, their result sheets and registrations. Replacing or deleting
results triggers a full recalculation of the category/season ranking.
"""

import logging
from datetime import date, datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlmodel import Session, select

from league.database import get_session
from league.models.category import Category
from league.models.registration import Registration
from league.models.tournament import Tournament
from league.models.tournament_result import TournamentResult
from league.services.draw_service import DrawError, build_draw
from league.services.pool_allocator import PoolAllocationError
from league.services.ranking_rules import FINALE_TOURNAMENT_NUMBER, RANKED_TOURNAMENT_NUMBERS, season_for_date
from league.services.ranking_service import delete_tournament_with_results, replace_tournament_results
from league.services.results_aggregator import DuplicateResultError
from league.utils.identity import normalize_licence

logger = logging.getLogger(__name__)

router = APIRouter()

VALID_TOURNAMENT_NUMBERS = RANKED_TOURNAMENT_NUMBERS + (FINALE_TOURNAMENT_NUMBER,)


# ============================================================================
# Request/Response Models
# ============================================================================


class TournamentCreate(BaseModel):
    category_id: int
    season: Optional[str] = None  # Derived from tournament_date (or today) when omitted
    tournament_number: int
    tournament_date: Optional[date] = None

    @field_validator("season")
    @classmethod
    def validate_season(cls, v):
        if v is None:
            return v
        parts = v.strip().split("-")
        if len(parts) != 2 or not all(p.isdigit() and len(p) == 4 for p in parts) or int(parts[1]) != int(parts[0]) + 1:
            raise ValueError("season must look like 'YYYY-YYYY' with consecutive years")
        return v.strip()

    @field_validator("tournament_number")
    @classmethod
    def validate_tournament_number(cls, v):
        if v not in VALID_TOURNAMENT_NUMBERS:
            raise ValueError(f"tournament_number must be one of {VALID_TOURNAMENT_NUMBERS}")
        return v


class TournamentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    category_id: int
    season: str
    tournament_number: int
    tournament_date: Optional[date] = None
    import_date: Optional[datetime] = None


class ResultRowIn(BaseModel):
    licence: str
    player_name: str
    match_points: int = Field(ge=0)
    moyenne: float = Field(default=0.0, ge=0)
    serie: int = Field(default=0, ge=0)
    points: int = Field(default=0, ge=0)
    reprises: int = Field(default=0, ge=0)

    @field_validator("licence")
    @classmethod
    def validate_licence(cls, v):
        normalized = normalize_licence(v)
        if not normalized:
            raise ValueError("licence cannot be empty")
        return normalized

    @field_validator("player_name")
    @classmethod
    def validate_player_name(cls, v):
        if not v or not v.strip():
            raise ValueError("player_name cannot be empty")
        return v.strip()


class ResultsReplaceRequest(BaseModel):
    results: List[ResultRowIn]


class ResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    licence: str
    player_name: str
    match_points: int
    moyenne: float
    serie: int
    points: int
    reprises: int


class RegistrationCreate(BaseModel):
    licence: str
    player_name: str
    registered_at: Optional[datetime] = None

    @field_validator("licence")
    @classmethod
    def validate_licence(cls, v):
        normalized = normalize_licence(v)
        if not normalized:
            raise ValueError("licence cannot be empty")
        return normalized

    @field_validator("registered_at")
    @classmethod
    def validate_registered_at(cls, v):
        # Timestamps without an offset are taken as UTC
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class RegistrationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tournament_id: int
    licence: str
    player_name: str
    registered_at: datetime
    withdrawn: bool


def _get_tournament_or_404(session: Session, tournament_id: int) -> Tournament:
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail="Tournament not found")
    return tournament


# ============================================================================
# Tournament Endpoints
# ============================================================================


@router.get("/tournaments", response_model=List[TournamentResponse])
def get_tournaments(season: Optional[str] = Query(None), session: Session = Depends(get_session)):
    """Get tournaments, optionally filtered by season"""
    query = select(Tournament)
    if season:
        query = query.where(Tournament.season == season)
    return session.exec(
        query.order_by(Tournament.season, Tournament.category_id, Tournament.tournament_number)
    ).all()


@router.post("/tournaments", response_model=TournamentResponse, status_code=201)
def create_tournament(tournament_data: TournamentCreate, session: Session = Depends(get_session)):
    """Create a tournament for a category/season"""
    if tournament_data.season is None:
        tournament_data.season = season_for_date(tournament_data.tournament_date or date.today())

    if not session.get(Category, tournament_data.category_id):
        raise HTTPException(status_code=404, detail="Category not found")

    existing = session.exec(
        select(Tournament).where(
            Tournament.category_id == tournament_data.category_id,
            Tournament.season == tournament_data.season,
            Tournament.tournament_number == tournament_data.tournament_number,
        )
    ).first()
    if existing:
        raise HTTPException(
            status_code=409,
            detail=f"Tournament {tournament_data.tournament_number} already exists for season {tournament_data.season}",
        )

    tournament = Tournament(**tournament_data.model_dump())
    session.add(tournament)
    session.commit()
    session.refresh(tournament)
    return tournament


@router.delete("/tournaments/{tournament_id}", status_code=204)
def delete_tournament(tournament_id: int, session: Session = Depends(get_session)):
    """Delete a tournament with its results and registrations, then recalculate rankings"""
    tournament = _get_tournament_or_404(session, tournament_id)
    delete_tournament_with_results(session, tournament)
    logger.info("Tournament %d deleted with its results and registrations", tournament_id)
    return None


# ============================================================================
# Result Endpoints
# ============================================================================


@router.get("/tournaments/{tournament_id}/results", response_model=List[ResultResponse])
def get_results(tournament_id: int, session: Session = Depends(get_session)):
    """Get results of a tournament ordered by match points"""
    _get_tournament_or_404(session, tournament_id)
    return session.exec(
        select(TournamentResult)
        .where(TournamentResult.tournament_id == tournament_id)
        .order_by(TournamentResult.match_points.desc(), TournamentResult.licence)
    ).all()


@router.put("/tournaments/{tournament_id}/results")
def replace_results(tournament_id: int, request: ResultsReplaceRequest, session: Session = Depends(get_session)):
    """
    Replace the full result sheet of a tournament.

    Existing rows are deleted and the new sheet inserted in one commit, then the
    category/season ranking is recalculated (qualifiers only), all under the
    category/season recalculation lock.
    """
    tournament = _get_tournament_or_404(session, tournament_id)

    seen = set()
    for row in request.results:
        if row.licence in seen:
            raise HTTPException(status_code=422, detail=f"Duplicate licence in result sheet: {row.licence}")
        seen.add(row.licence)

    try:
        ranked = replace_tournament_results(session, tournament, [row.model_dump() for row in request.results])
    except DuplicateResultError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return {
        "tournament_id": tournament_id,
        "imported": len(request.results),
        "ranking_entrants": None if ranked is None else len(ranked),
    }


# ============================================================================
# Registration & Draw Endpoints
# ============================================================================


@router.get("/tournaments/{tournament_id}/registrations", response_model=List[RegistrationResponse])
def get_registrations(tournament_id: int, session: Session = Depends(get_session)):
    """Get registrations of a tournament in registration order"""
    _get_tournament_or_404(session, tournament_id)
    return session.exec(
        select(Registration)
        .where(Registration.tournament_id == tournament_id)
        .order_by(Registration.registered_at, Registration.id)
    ).all()


@router.post("/tournaments/{tournament_id}/registrations", response_model=RegistrationResponse, status_code=201)
def create_registration(
    tournament_id: int, registration_data: RegistrationCreate, session: Session = Depends(get_session)
):
    """Register an entrant for a tournament"""
    _get_tournament_or_404(session, tournament_id)

    existing = session.exec(
        select(Registration).where(
            Registration.tournament_id == tournament_id, Registration.licence == registration_data.licence
        )
    ).first()
    if existing:
        raise HTTPException(status_code=409, detail=f"Licence '{registration_data.licence}' is already registered")

    data = registration_data.model_dump(exclude_none=True)
    registration = Registration(tournament_id=tournament_id, **data)
    session.add(registration)
    session.commit()
    session.refresh(registration)
    return registration


@router.get("/tournaments/{tournament_id}/draw")
def get_draw(
    tournament_id: int,
    pool_count: Optional[int] = Query(None),
    session: Session = Depends(get_session),
):
    """
    Compute pools and matches for a tournament (preview; nothing is saved).

    Pools are filled by serpentine seeding from the season ranking; entrants
    without a ranking are seeded last and flagged is_new.
    """
    try:
        return build_draw(session, tournament_id, pool_count=pool_count)
    except DrawError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PoolAllocationError as e:
        raise HTTPException(status_code=422, detail=str(e))
