from __future__ import annotations

from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from coffee_ops.core.errors import BadRequestError, ConflictError, NotFoundError
from coffee_ops.models.menu_item import MenuItem
from coffee_ops.models.wishlist import WishlistItem


def _owner_filter(user_id: Optional[str], guest_id: Optional[str]):
    clauses = []
    if user_id:
        clauses.append(WishlistItem.user_id == user_id)
    if guest_id:
        clauses.append(WishlistItem.guest_id == guest_id)
    if not clauses:
        raise BadRequestError("User ID or guest ID is required")
    return or_(*clauses)


def _find_entry(db: Session, menu_item_id: int, user_id: Optional[str], guest_id: Optional[str]) -> Optional[WishlistItem]:
    return (
        db.query(WishlistItem)
        .filter(WishlistItem.menu_item_id == menu_item_id, _owner_filter(user_id, guest_id))
        .first()
    )


def add_to_wishlist(
    db: Session,
    *,
    menu_item_id: int,
    user_id: Optional[str] = None,
    guest_id: Optional[str] = None,
) -> WishlistItem:
    if not db.query(MenuItem.id).filter(MenuItem.id == menu_item_id).first():
        raise NotFoundError("Menu item not found")
    if _find_entry(db, menu_item_id, user_id, guest_id):
        raise ConflictError("Item already in wishlist")

    entry = WishlistItem(menu_item_id=menu_item_id, user_id=user_id, guest_id=guest_id)
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


def remove_from_wishlist(
    db: Session,
    *,
    menu_item_id: int,
    user_id: Optional[str] = None,
    guest_id: Optional[str] = None,
) -> None:
    entry = _find_entry(db, menu_item_id, user_id, guest_id)
    if not entry:
        raise NotFoundError("Item not found in wishlist")
    db.delete(entry)
    db.commit()


def is_in_wishlist(
    db: Session,
    *,
    menu_item_id: int,
    user_id: Optional[str] = None,
    guest_id: Optional[str] = None,
) -> bool:
    return _find_entry(db, menu_item_id, user_id, guest_id) is not None


def wishlist_counts(db: Session) -> list[tuple[int, int]]:
    count = func.count(WishlistItem.id)
    rows = (
        db.query(WishlistItem.menu_item_id, count)
        .group_by(WishlistItem.menu_item_id)
        .order_by(count.desc(), WishlistItem.menu_item_id.asc())
        .all()
    )
    return [(menu_item_id, int(total)) for menu_item_id, total in rows]


def top_wishlisted(db: Session, *, limit: int = 10) -> list[tuple[MenuItem, int]]:
    count = func.count(WishlistItem.id)
    rows = (
        db.query(MenuItem, count)
        .join(WishlistItem, WishlistItem.menu_item_id == MenuItem.id)
        .group_by(MenuItem.id)
        .order_by(count.desc(), MenuItem.name.asc(), MenuItem.id.asc())
        .limit(limit)
        .all()
    )
    return [(item, int(total)) for item, total in rows]


def user_wishlist(db: Session, *, user_id: Optional[str] = None, guest_id: Optional[str] = None) -> list[WishlistItem]:
    return (
        db.query(WishlistItem)
        .join(MenuItem, MenuItem.id == WishlistItem.menu_item_id)
        .filter(_owner_filter(user_id, guest_id))
        .order_by(WishlistItem.created_at.desc(), WishlistItem.id.desc())
        .all()
    )
