from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from coffee_ops.core.database import with_transaction
from coffee_ops.core.errors import ConflictError, NotFoundError
from coffee_ops.models.category import Category
from coffee_ops.models.menu_item import MenuItem
from coffee_ops.services.rules import ensure_required

logger = logging.getLogger(__name__)

DUPLICATE_CATEGORY_MESSAGE = "Category already exists"
CATEGORY_IN_USE_MESSAGE = "Cannot delete category that is being used by menu items"


def list_categories(db: Session, *, include_inactive: bool = False) -> list[Category]:
    query = db.query(Category)
    if not include_inactive:
        query = query.filter(Category.is_active.is_(True))
    return query.order_by(Category.display_order.asc(), Category.name.asc(), Category.id.asc()).all()


def get_category(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise NotFoundError("Category not found")
    return category


def _ensure_unique_name(db: Session, name: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(Category.id).filter(func.lower(Category.name) == name.lower())
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    if query.first():
        raise ConflictError(DUPLICATE_CATEGORY_MESSAGE)


def create_category(
    db: Session,
    *,
    name: str,
    description: Optional[str] = None,
    display_order: Optional[int] = None,
) -> Category:
    name = name.strip()
    _ensure_unique_name(db, name)
    if display_order is None:
        current_max = db.query(func.max(Category.display_order)).scalar()
        display_order = (current_max or 0) + 1

    category = Category(name=name, description=description, display_order=display_order, is_active=True)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def update_category(db: Session, category_id: int, changes: dict) -> Category:
    ensure_required(changes, ("name", "display_order", "is_active"))
    category = get_category(db, category_id)
    new_name = changes.get("name")
    if new_name is not None:
        new_name = new_name.strip()
        _ensure_unique_name(db, new_name, exclude_id=category.id)
        if new_name != category.name:
            # Menu items reference categories by name
            db.query(MenuItem).filter(MenuItem.category == category.name).update(
                {MenuItem.category: new_name}, synchronize_session=False
            )
        category.name = new_name
    for field in ("description", "display_order", "is_active"):
        if field in changes:
            setattr(category, field, changes[field])
    db.commit()
    db.refresh(category)
    return category


def delete_category(db: Session, category_id: int, *, hard: bool = False) -> None:
    category = get_category(db, category_id)
    in_use = db.query(MenuItem.id).filter(MenuItem.category == category.name).first()
    if in_use:
        raise ConflictError(CATEGORY_IN_USE_MESSAGE)

    if hard:
        db.delete(category)
    else:
        category.is_active = False
    db.commit()
    logger.info("category deleted id=%s hard=%s", category_id, hard)


def reorder_categories(db: Session, positions: list[tuple[int, int]]) -> list[Category]:
    def _work(session: Session) -> None:
        for category_id, display_order in positions:
            updated = (
                session.query(Category)
                .filter(Category.id == category_id)
                .update({Category.display_order: display_order}, synchronize_session=False)
            )
            if not updated:
                raise NotFoundError(f"Category not found: {category_id}")

    with_transaction(db, _work)
    db.expire_all()
    return list_categories(db, include_inactive=True)
