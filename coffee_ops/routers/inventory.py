from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field, model_validator
from sqlalchemy.orm import Session

from coffee_ops.core.database import get_db
from coffee_ops.routers.serializers import inventory_item_to_dict, inventory_transaction_to_dict
from coffee_ops.services import inventory as inventory_service

router = APIRouter(prefix="/api/inventory", tags=["inventory"])

_REQUIRED_ITEM_FIELDS = ("name", "sku", "category", "current_stock", "minimum_stock", "unit", "cost_per_unit")


class InventoryItemCreate(BaseModel):
    name: Optional[str] = None
    sku: Optional[str] = None
    category: Optional[str] = None
    current_stock: Optional[Decimal] = Field(None, ge=0)
    minimum_stock: Optional[Decimal] = Field(None, ge=0)
    unit: Optional[str] = None
    cost_per_unit: Optional[Decimal] = Field(None, ge=0)
    supplier: Optional[str] = None
    expiry_date: Optional[date] = None

    @model_validator(mode="after")
    def require_fields(self):
        for field in _REQUIRED_ITEM_FIELDS:
            value = getattr(self, field)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise ValueError("Missing required fields for inventory item")
        return self


class InventoryItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    sku: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1)
    current_stock: Optional[Decimal] = Field(None, ge=0)
    minimum_stock: Optional[Decimal] = Field(None, ge=0)
    unit: Optional[str] = Field(None, min_length=1)
    cost_per_unit: Optional[Decimal] = Field(None, ge=0)
    supplier: Optional[str] = None
    expiry_date: Optional[date] = None


class InventoryTransactionCreate(BaseModel):
    type: Optional[str] = None
    quantity: Optional[Decimal] = Field(None, gt=0)
    created_by: Optional[str] = None
    unit_cost: Optional[Decimal] = Field(None, ge=0)
    total_cost: Optional[Decimal] = Field(None, ge=0)
    reason: Optional[str] = None
    reference_id: Optional[str] = None

    @model_validator(mode="after")
    def require_fields(self):
        if not self.type or self.quantity is None or not (self.created_by or "").strip():
            raise ValueError("Type, quantity, and created_by are required fields")
        return self


@router.get("")
def list_inventory_items(
    category: Optional[str] = Query(None),
    low_stock: bool = Query(False, alias="lowStock"),
    db: Session = Depends(get_db),
):
    items = inventory_service.list_inventory_items(db, category=category, low_stock=low_stock)
    return [inventory_item_to_dict(item) for item in items]


@router.get("/categories")
def list_inventory_categories(db: Session = Depends(get_db)):
    return inventory_service.list_inventory_categories(db)


@router.get("/{item_id}")
def get_inventory_item(item_id: int, db: Session = Depends(get_db)):
    item = inventory_service.get_inventory_item(db, item_id)
    payload = inventory_item_to_dict(item)
    payload["transactions"] = [
        inventory_transaction_to_dict(transaction)
        for transaction in inventory_service.list_transactions(db, item.id)
    ]
    return payload


@router.post("", status_code=status.HTTP_201_CREATED)
def create_inventory_item(payload: InventoryItemCreate, db: Session = Depends(get_db)):
    item = inventory_service.create_inventory_item(db, payload.model_dump())
    return inventory_item_to_dict(item)


@router.put("/{item_id}")
def update_inventory_item(item_id: int, payload: InventoryItemUpdate, db: Session = Depends(get_db)):
    item = inventory_service.update_inventory_item(db, item_id, payload.model_dump(exclude_unset=True))
    return inventory_item_to_dict(item)


@router.delete("/{item_id}")
def delete_inventory_item(item_id: int, db: Session = Depends(get_db)):
    inventory_service.delete_inventory_item(db, item_id)
    return {"success": True}


@router.get("/{item_id}/transactions")
def list_inventory_transactions(item_id: int, db: Session = Depends(get_db)):
    inventory_service.get_inventory_item(db, item_id)
    return [
        inventory_transaction_to_dict(transaction)
        for transaction in inventory_service.list_transactions(db, item_id)
    ]


@router.post("/{item_id}/transactions", status_code=status.HTTP_201_CREATED)
def create_inventory_transaction(
    item_id: int,
    payload: InventoryTransactionCreate,
    db: Session = Depends(get_db),
):
    transaction = inventory_service.record_transaction(
        db,
        item_id=item_id,
        transaction_type=payload.type,
        quantity=payload.quantity,
        created_by=payload.created_by.strip(),
        unit_cost=payload.unit_cost,
        total_cost=payload.total_cost,
        reason=payload.reason,
        reference_id=payload.reference_id,
    )
    return inventory_transaction_to_dict(transaction)
