from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import not_
from sqlalchemy.orm import Session

from coffee_ops.core.database import with_transaction
from coffee_ops.core.errors import NotFoundError
from coffee_ops.models.menu_item import MenuItem
from coffee_ops.models.order_item import OrderItem
from coffee_ops.models.wishlist import WishlistItem
from coffee_ops.services.rules import ensure_required

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = ("name", "price", "category", "description", "image_url", "is_available")
_REQUIRED_FIELDS = ("name", "price", "category", "is_available")


def list_menu_items(
    db: Session,
    *,
    category: Optional[str] = None,
    available: Optional[bool] = None,
) -> list[MenuItem]:
    query = db.query(MenuItem)
    if category:
        query = query.filter(MenuItem.category == category)
    if available is not None:
        query = query.filter(MenuItem.is_available.is_(available))
    return query.order_by(MenuItem.category.asc(), MenuItem.name.asc(), MenuItem.id.asc()).all()


def list_menu_categories(db: Session) -> list[str]:
    rows = db.query(MenuItem.category).distinct().order_by(MenuItem.category.asc()).all()
    return [row[0] for row in rows]


def get_menu_item(db: Session, item_id: int) -> MenuItem:
    item = db.query(MenuItem).filter(MenuItem.id == item_id).first()
    if not item:
        raise NotFoundError("Menu item not found")
    return item


def create_menu_item(db: Session, data: dict) -> MenuItem:
    item = MenuItem(**{field: data[field] for field in _EDITABLE_FIELDS if data.get(field) is not None})
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


def update_menu_item(db: Session, item_id: int, changes: dict) -> MenuItem:
    ensure_required(changes, _REQUIRED_FIELDS)
    item = get_menu_item(db, item_id)
    for field, value in changes.items():
        if field in _EDITABLE_FIELDS:
            setattr(item, field, value)
    db.commit()
    db.refresh(item)
    return item


def toggle_availability(db: Session, item_id: int) -> MenuItem:
    updated = (
        db.query(MenuItem)
        .filter(MenuItem.id == item_id)
        .update({MenuItem.is_available: not_(MenuItem.is_available)}, synchronize_session=False)
    )
    if not updated:
        raise NotFoundError("Menu item not found")
    db.commit()
    item = get_menu_item(db, item_id)
    db.refresh(item)
    return item


def delete_menu_item(db: Session, item_id: int) -> None:
    """Drop wishlist entries and detach order lines (they keep their snapshot) before deleting."""
    item = get_menu_item(db, item_id)

    def _work(session: Session) -> None:
        session.query(WishlistItem).filter(WishlistItem.menu_item_id == item.id).delete(synchronize_session=False)
        session.query(OrderItem).filter(OrderItem.menu_item_id == item.id).update(
            {OrderItem.menu_item_id: None}, synchronize_session=False
        )
        session.delete(item)

    with_transaction(db, _work)
    logger.info("menu item deleted id=%s", item_id)
