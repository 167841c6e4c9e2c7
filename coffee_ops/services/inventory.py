from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from coffee_ops.core.database import with_transaction
from coffee_ops.core.errors import ConflictError, NotFoundError
from coffee_ops.models.inventory import InventoryItem, InventoryTransaction
from coffee_ops.services.rules import ensure_required, stock_delta, to_money

logger = logging.getLogger(__name__)

DUPLICATE_SKU_MESSAGE = "An inventory item with this SKU already exists"

_EDITABLE_FIELDS = (
    "name",
    "sku",
    "category",
    "current_stock",
    "minimum_stock",
    "unit",
    "cost_per_unit",
    "supplier",
    "expiry_date",
)
_REQUIRED_FIELDS = ("name", "sku", "category", "current_stock", "minimum_stock", "unit", "cost_per_unit")


def list_inventory_items(
    db: Session,
    *,
    category: Optional[str] = None,
    low_stock: bool = False,
) -> list[InventoryItem]:
    query = db.query(InventoryItem)
    if category:
        query = query.filter(InventoryItem.category == category)
    if low_stock:
        query = query.filter(InventoryItem.current_stock <= InventoryItem.minimum_stock)
    return query.order_by(InventoryItem.category.asc(), InventoryItem.name.asc(), InventoryItem.id.asc()).all()


def list_inventory_categories(db: Session) -> list[str]:
    rows = db.query(InventoryItem.category).distinct().order_by(InventoryItem.category.asc()).all()
    return [row[0] for row in rows]


def get_inventory_item(db: Session, item_id: int) -> InventoryItem:
    item = db.query(InventoryItem).filter(InventoryItem.id == item_id).first()
    if not item:
        raise NotFoundError("Inventory item not found")
    return item


def _ensure_unique_sku(db: Session, sku: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(InventoryItem.id).filter(InventoryItem.sku == sku)
    if exclude_id is not None:
        query = query.filter(InventoryItem.id != exclude_id)
    if query.first():
        raise ConflictError(DUPLICATE_SKU_MESSAGE)


def create_inventory_item(db: Session, data: dict) -> InventoryItem:
    _ensure_unique_sku(db, data["sku"])
    item = InventoryItem(**{field: data.get(field) for field in _EDITABLE_FIELDS})
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


def update_inventory_item(db: Session, item_id: int, changes: dict) -> InventoryItem:
    ensure_required(changes, _REQUIRED_FIELDS)
    item = get_inventory_item(db, item_id)
    if changes.get("sku"):
        _ensure_unique_sku(db, changes["sku"], exclude_id=item.id)
    for field, value in changes.items():
        if field in _EDITABLE_FIELDS:
            setattr(item, field, value)
    db.commit()
    db.refresh(item)
    return item


def delete_inventory_item(db: Session, item_id: int) -> None:
    item = get_inventory_item(db, item_id)
    has_history = (
        db.query(InventoryTransaction.id).filter(InventoryTransaction.inventory_item_id == item.id).first()
    )
    if has_history:
        raise ConflictError("Cannot delete inventory item with recorded transactions")
    db.delete(item)
    db.commit()


def list_transactions(db: Session, item_id: int) -> list[InventoryTransaction]:
    return (
        db.query(InventoryTransaction)
        .filter(InventoryTransaction.inventory_item_id == item_id)
        .order_by(InventoryTransaction.created_at.desc(), InventoryTransaction.id.desc())
        .all()
    )


def _apply_stock_delta(db: Session, item_id: int, delta: Decimal, *, restock: bool) -> None:
    query = db.query(InventoryItem).filter(InventoryItem.id == item_id)
    values = {InventoryItem.current_stock: InventoryItem.current_stock + delta}
    if restock:
        values[InventoryItem.last_restock_date] = datetime.now(timezone.utc)
    else:
        # Stock never goes below zero
        query = query.filter(InventoryItem.current_stock >= -delta)
    updated = query.update(values)
    if not updated:
        logger.warning("stock decrement rejected", extra={"inventory_item_id": item_id})
        raise ConflictError("Insufficient stock")


def record_transaction(
    db: Session,
    *,
    item_id: int,
    transaction_type: str,
    quantity: Decimal,
    created_by: str,
    unit_cost: Optional[Decimal] = None,
    total_cost: Optional[Decimal] = None,
    reason: Optional[str] = None,
    reference_id: Optional[str] = None,
) -> InventoryTransaction:
    """Append a ledger row and move ``current_stock`` by the signed quantity, atomically."""
    delta = stock_delta(transaction_type, quantity)
    get_inventory_item(db, item_id)
    if total_cost is None and unit_cost is not None:
        total_cost = to_money(unit_cost * quantity)

    def _work(session: Session) -> InventoryTransaction:
        transaction = InventoryTransaction(
            inventory_item_id=item_id,
            type=transaction_type,
            quantity=quantity,
            unit_cost=unit_cost,
            total_cost=total_cost,
            reason=reason,
            reference_id=reference_id,
            created_by=created_by,
        )
        session.add(transaction)
        session.flush()
        _apply_stock_delta(session, item_id, delta, restock=transaction_type == "restock")
        return transaction

    transaction = with_transaction(db, _work)
    db.refresh(transaction)
    logger.info(
        "stock transaction recorded type=%s quantity=%s",
        transaction_type,
        quantity,
        extra={"inventory_item_id": item_id},
    )
    return transaction
