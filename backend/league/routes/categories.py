from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, field_validator
from sqlmodel import Session, func, select

from league.database import get_session
from league.models.category import Category
from league.models.player import Player
from league.models.round import Round
from league.utils.sql import scalar_int

router = APIRouter()


class CategoryCreate(BaseModel):
    name: str
    season_year: int
    display_order: Optional[int] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("name is required")
        return v.strip()


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    season_year: Optional[int] = None
    display_order: Optional[int] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError("name cannot be empty")
        return v.strip() if v else v


class CategoryResponse(BaseModel):
    id: int
    name: str
    season_year: int
    display_order: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


def _get_category_or_404(session: Session, category_id: int) -> Category:
    category = session.get(Category, category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


def _season_categories(session: Session, season_year: int) -> List[Category]:
    return list(
        session.exec(
            select(Category)
            .where(Category.season_year == season_year)
            .order_by(Category.display_order, Category.id)
        ).all()
    )


def _swap_with_neighbour(session: Session, category: Category, step: int) -> Category:
    """Swap display_order with the previous (step=-1) or next (step=1) category of the season."""
    ordered = _season_categories(session, category.season_year)
    index = next(i for i, c in enumerate(ordered) if c.id == category.id)
    target = index + step
    if target < 0 or target >= len(ordered):
        return category  # already first/last

    # Normalize first so duplicate display_order values still move
    for position, c in enumerate(ordered):
        c.display_order = position
    ordered[index].display_order, ordered[target].display_order = target, index
    for c in ordered:
        session.add(c)
    session.commit()
    session.refresh(category)
    return category


@router.get("/categories", response_model=List[CategoryResponse])
def list_categories(season_year: Optional[int] = None, session: Session = Depends(get_session)):
    """List categories, optionally for a single season"""
    stmt = select(Category)
    if season_year is not None:
        stmt = stmt.where(Category.season_year == season_year)
    return session.exec(stmt.order_by(Category.season_year, Category.display_order, Category.id)).all()


@router.post("/categories", response_model=CategoryResponse, status_code=201)
def create_category(category_data: CategoryCreate, session: Session = Depends(get_session)):
    """Create a category; appended at the end of its season unless display_order is given"""
    data = category_data.model_dump()
    if data["display_order"] is None:
        data["display_order"] = scalar_int(
            session.exec(
                select(func.count(Category.id)).where(Category.season_year == category_data.season_year)
            ).one()
        )
    category = Category(**data)
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


@router.get("/categories/{category_id}", response_model=CategoryResponse)
def get_category(category_id: int, session: Session = Depends(get_session)):
    return _get_category_or_404(session, category_id)


@router.put("/categories/{category_id}", response_model=CategoryResponse)
def update_category(category_id: int, category_data: CategoryUpdate, session: Session = Depends(get_session)):
    category = _get_category_or_404(session, category_id)
    for key, value in category_data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(category, key, value)
    category.updated_at = datetime.utcnow()
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


@router.delete("/categories/{category_id}", status_code=204)
def delete_category(category_id: int, session: Session = Depends(get_session)):
    """Delete a category that has no fixture and no players assigned"""
    category = _get_category_or_404(session, category_id)

    has_rounds = session.exec(select(Round.id).where(Round.category_id == category_id).limit(1)).first()
    if has_rounds is not None:
        raise HTTPException(status_code=409, detail="Category has a fixture; delete it first")

    has_players = session.exec(
        select(Player.id)
        .where((Player.current_category_id == category_id) | (Player.initial_category_id == category_id))
        .limit(1)
    ).first()
    if has_players is not None:
        raise HTTPException(status_code=409, detail="Category has players assigned")

    session.delete(category)
    session.commit()
    return Response(status_code=204)


@router.post("/categories/{category_id}/move-up", response_model=CategoryResponse)
def move_category_up(category_id: int, session: Session = Depends(get_session)):
    category = _get_category_or_404(session, category_id)
    return _swap_with_neighbour(session, category, -1)


@router.post("/categories/{category_id}/move-down", response_model=CategoryResponse)
def move_category_down(category_id: int, session: Session = Depends(get_session)):
    category = _get_category_or_404(session, category_id)
    return _swap_with_neighbour(session, category, 1)
