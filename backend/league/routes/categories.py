from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, field_validator
from sqlmodel import Session, select

from league.database import get_session
from league.models.category import Category

router = APIRouter()


class CategoryCreate(BaseModel):
    game_type: str
    level: str
    display_name: str

    @field_validator("game_type", "level")
    @classmethod
    def normalize_code(cls, v):
        if not v or not v.strip():
            raise ValueError("cannot be empty")
        return v.strip().upper()

    @field_validator("display_name")
    @classmethod
    def validate_display_name(cls, v):
        if not v or not v.strip():
            raise ValueError("display_name cannot be empty")
        return v.strip()


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    game_type: str
    level: str
    display_name: str


@router.get("/categories", response_model=List[CategoryResponse])
def get_categories(session: Session = Depends(get_session)):
    """Get all categories"""
    return session.exec(select(Category).order_by(Category.game_type, Category.level)).all()


@router.post("/categories", response_model=CategoryResponse, status_code=201)
def create_category(category_data: CategoryCreate, session: Session = Depends(get_session)):
    """Create a category"""
    existing = session.exec(
        select(Category).where(Category.game_type == category_data.game_type, Category.level == category_data.level)
    ).first()
    if existing:
        raise HTTPException(
            status_code=409,
            detail=f"Category '{category_data.game_type} {category_data.level}' already exists",
        )

    category = Category(**category_data.model_dump())
    session.add(category)
    session.commit()
    session.refresh(category)
    return category
