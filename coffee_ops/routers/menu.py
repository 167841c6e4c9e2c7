from __future__ import annotations

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field, model_validator
from sqlalchemy.orm import Session

from coffee_ops.core.database import get_db
from coffee_ops.routers.serializers import menu_item_to_dict
from coffee_ops.services import menu as menu_service

router = APIRouter(prefix="/api/menu", tags=["menu"])


class MenuItemCreate(BaseModel):
    name: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    category: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_available: bool = True

    @model_validator(mode="after")
    def require_core_fields(self):
        if not (self.name or "").strip() or self.price is None or not (self.category or "").strip():
            raise ValueError("Name, price, and category are required")
        return self


class MenuItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    price: Optional[Decimal] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_available: Optional[bool] = None


@router.get("")
def list_menu_items(
    category: Optional[str] = Query(None),
    available: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
):
    items = menu_service.list_menu_items(db, category=category, available=available)
    return [menu_item_to_dict(item) for item in items]


@router.get("/categories")
def list_menu_categories(db: Session = Depends(get_db)):
    return menu_service.list_menu_categories(db)


@router.get("/{item_id}")
def get_menu_item(item_id: int, db: Session = Depends(get_db)):
    return menu_item_to_dict(menu_service.get_menu_item(db, item_id))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_menu_item(payload: MenuItemCreate, db: Session = Depends(get_db)):
    data = payload.model_dump()
    data["name"] = data["name"].strip()
    data["category"] = data["category"].strip()
    return menu_item_to_dict(menu_service.create_menu_item(db, data))


@router.put("/{item_id}")
def update_menu_item(item_id: int, payload: MenuItemUpdate, db: Session = Depends(get_db)):
    item = menu_service.update_menu_item(db, item_id, payload.model_dump(exclude_unset=True))
    return menu_item_to_dict(item)


@router.put("/{item_id}/toggle-availability")
def toggle_menu_item_availability(item_id: int, db: Session = Depends(get_db)):
    return menu_item_to_dict(menu_service.toggle_availability(db, item_id))


@router.delete("/{item_id}")
def delete_menu_item(item_id: int, db: Session = Depends(get_db)):
    menu_service.delete_menu_item(db, item_id)
    return {"success": True}
