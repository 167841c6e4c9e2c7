from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field, model_validator
from sqlalchemy.orm import Session

from coffee_ops.core.database import get_db
from coffee_ops.routers.serializers import category_to_dict
from coffee_ops.services import categories as category_service

router = APIRouter(prefix="/api/categories", tags=["categories"])


class CategoryCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    display_order: Optional[int] = Field(None, ge=0)

    @model_validator(mode="after")
    def require_name(self):
        if not (self.name or "").strip():
            raise ValueError("Category name is required")
        return self


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    display_order: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class CategoryPosition(BaseModel):
    id: int
    display_order: int = Field(..., ge=0)


@router.get("")
def list_categories(
    include_inactive: bool = Query(False),
    db: Session = Depends(get_db),
):
    categories = category_service.list_categories(db, include_inactive=include_inactive)
    return [category_to_dict(category) for category in categories]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    category = category_service.create_category(
        db,
        name=payload.name,
        description=payload.description,
        display_order=payload.display_order,
    )
    return category_to_dict(category)


@router.put("/reorder")
def reorder_categories(payload: List[CategoryPosition], db: Session = Depends(get_db)):
    categories = category_service.reorder_categories(
        db, [(position.id, position.display_order) for position in payload]
    )
    return [category_to_dict(category) for category in categories]


@router.put("/{category_id}")
def update_category(category_id: int, payload: CategoryUpdate, db: Session = Depends(get_db)):
    category = category_service.update_category(db, category_id, payload.model_dump(exclude_unset=True))
    return category_to_dict(category)


@router.delete("/{category_id}")
def delete_category(
    category_id: int,
    hard: bool = Query(False),
    db: Session = Depends(get_db),
):
    category_service.delete_category(db, category_id, hard=hard)
    return {"success": True}
