from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict
from sqlmodel import Session, select

from league.database import get_session
from league.models.category import Category
from league.models.tournament import Tournament
from league.services.ranking_service import load_rankings, recalculate_all_rankings, recalculate_rankings
from league.services.results_aggregator import DuplicateResultError

router = APIRouter()


class RankingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    rank_position: int
    licence: str
    player_name: str
    total_match_points: int
    avg_moyenne: float
    best_serie: int
    total_points: int
    total_reprises: int
    tournament_1_points: Optional[int] = None
    tournament_1_status: str
    tournament_2_points: Optional[int] = None
    tournament_2_status: str
    tournament_3_points: Optional[int] = None
    tournament_3_status: str
    qualified: bool
    missing_from_directory: bool


class RecalculateRequest(BaseModel):
    category_id: int
    season: str


@router.get("/rankings", response_model=List[RankingResponse])
def get_rankings(
    category_id: int = Query(...),
    season: str = Query(...),
    session: Session = Depends(get_session),
):
    """Get the season ranking of a category ordered by rank position"""
    if not session.get(Category, category_id):
        raise HTTPException(status_code=404, detail="Category not found")
    return load_rankings(session, category_id, season)


@router.get("/rankings/seasons", response_model=List[str])
def get_seasons(session: Session = Depends(get_session)):
    """Get all seasons that have tournaments, most recent first"""
    return session.exec(select(Tournament.season).distinct().order_by(Tournament.season.desc())).all()


@router.post("/rankings/recalculate")
def recalculate(request: RecalculateRequest, session: Session = Depends(get_session)):
    """Recalculate the ranking of one category/season"""
    if not session.get(Category, request.category_id):
        raise HTTPException(status_code=404, detail="Category not found")
    try:
        ranked = recalculate_rankings(session, request.category_id, request.season)
    except DuplicateResultError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"category_id": request.category_id, "season": request.season, "entrants": len(ranked)}


@router.post("/rankings/recalculate-all")
def recalculate_all(session: Session = Depends(get_session)):
    """Recalculate rankings for every category/season with tournaments"""
    return recalculate_all_rankings(session)
