from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import AliasChoices, BaseModel, Field, model_validator
from sqlalchemy.orm import Session

from coffee_ops.core.database import get_db
from coffee_ops.routers.serializers import menu_item_to_dict, wishlist_item_to_dict
from coffee_ops.services import wishlist as wishlist_service

router = APIRouter(prefix="/api/wishlist", tags=["wishlist"])

OWNER_REQUIRED_MESSAGE = "Menu item ID and user ID or guest ID are required"


class WishlistAdd(BaseModel):
    menu_item_id: Optional[int] = Field(None, validation_alias=AliasChoices("menuItemId", "menu_item_id"))
    user_id: Optional[str] = Field(None, validation_alias=AliasChoices("userId", "user_id"))
    guest_id: Optional[str] = Field(None, validation_alias=AliasChoices("guestId", "guest_id"))

    @model_validator(mode="after")
    def require_owner(self):
        if self.menu_item_id is None or not (self.user_id or self.guest_id):
            raise ValueError(OWNER_REQUIRED_MESSAGE)
        return self


def _require_owner(menu_item_id: Optional[int], user_id: Optional[str], guest_id: Optional[str]) -> None:
    if menu_item_id is None or not (user_id or guest_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=OWNER_REQUIRED_MESSAGE)


@router.get("")
def wishlist_counts(db: Session = Depends(get_db)):
    return [
        {"menu_item_id": menu_item_id, "count": count}
        for menu_item_id, count in wishlist_service.wishlist_counts(db)
    ]


@router.get("/top")
def top_wishlisted(limit: int = Query(10, ge=1, le=100), db: Session = Depends(get_db)):
    result = []
    for item, count in wishlist_service.top_wishlisted(db, limit=limit):
        payload = menu_item_to_dict(item)
        payload["wishlist_count"] = count
        result.append(payload)
    return result


@router.get("/check")
def check_wishlist(
    menu_item_id: Optional[int] = Query(None, alias="menuItemId"),
    user_id: Optional[str] = Query(None, alias="userId"),
    guest_id: Optional[str] = Query(None, alias="guestId"),
    db: Session = Depends(get_db),
):
    _require_owner(menu_item_id, user_id, guest_id)
    found = wishlist_service.is_in_wishlist(db, menu_item_id=menu_item_id, user_id=user_id, guest_id=guest_id)
    return {"isInWishlist": found}


@router.get("/user")
def user_wishlist(
    user_id: Optional[str] = Query(None, alias="userId"),
    guest_id: Optional[str] = Query(None, alias="guestId"),
    db: Session = Depends(get_db),
):
    entries = wishlist_service.user_wishlist(db, user_id=user_id, guest_id=guest_id)
    return [wishlist_item_to_dict(entry) for entry in entries]


@router.post("", status_code=status.HTTP_201_CREATED)
def add_to_wishlist(payload: WishlistAdd, db: Session = Depends(get_db)):
    entry = wishlist_service.add_to_wishlist(
        db,
        menu_item_id=payload.menu_item_id,
        user_id=payload.user_id,
        guest_id=payload.guest_id,
    )
    return wishlist_item_to_dict(entry)


@router.delete("")
def remove_from_wishlist(
    menu_item_id: Optional[int] = Query(None, alias="menuItemId"),
    user_id: Optional[str] = Query(None, alias="userId"),
    guest_id: Optional[str] = Query(None, alias="guestId"),
    db: Session = Depends(get_db),
):
    _require_owner(menu_item_id, user_id, guest_id)
    wishlist_service.remove_from_wishlist(db, menu_item_id=menu_item_id, user_id=user_id, guest_id=guest_id)
    return {"success": True}
