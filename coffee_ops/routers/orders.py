from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import AliasChoices, BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from coffee_ops.core.database import get_db
from coffee_ops.routers.serializers import order_to_dict
from coffee_ops.services import orders as order_service
from coffee_ops.services.rules import ORDER_TYPES, PAYMENT_METHODS

router = APIRouter(prefix="/api/orders", tags=["orders"])


class OrderItemIn(BaseModel):
    menu_item_id: Optional[int] = Field(None, validation_alias=AliasChoices("menu_item_id", "menuItemId"))
    name: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, validation_alias=AliasChoices("price", "unit_price"))
    quantity: int = Field(1, ge=1, validation_alias=AliasChoices("quantity", "qty"))
    customizations: Optional[str] = None


class OrderCreate(BaseModel):
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    member_id: Optional[int] = Field(None, validation_alias=AliasChoices("member_id", "memberId"))
    order_type: str = "dine-in"
    payment_method: str = "cash"
    points_used: int = Field(0, ge=0)
    notes: Optional[str] = None
    items: List[OrderItemIn] = Field(default_factory=list)

    @field_validator("order_type")
    @classmethod
    def validate_order_type(cls, value: str) -> str:
        if value not in ORDER_TYPES:
            raise ValueError(f"Invalid order type. Must be one of: {', '.join(ORDER_TYPES)}")
        return value

    @field_validator("payment_method")
    @classmethod
    def validate_payment_method(cls, value: str) -> str:
        if value not in PAYMENT_METHODS:
            raise ValueError(f"Invalid payment method. Must be one of: {', '.join(PAYMENT_METHODS)}")
        return value

    @field_validator("items")
    @classmethod
    def validate_items(cls, value: List[OrderItemIn]) -> List[OrderItemIn]:
        if not value:
            raise ValueError("Order must contain at least one item")
        return value


class OrderStatusUpdate(BaseModel):
    status: str = Field(..., min_length=1)


@router.get("")
def list_orders(
    status_filter: Optional[str] = Query(None, alias="status"),
    order_type: Optional[str] = Query(None, alias="orderType"),
    member_id: Optional[int] = Query(None, alias="memberId"),
    db: Session = Depends(get_db),
):
    orders = order_service.list_orders(db, status=status_filter, order_type=order_type, member_id=member_id)
    return [order_to_dict(order) for order in orders]


@router.get("/stats")
def order_status_counts(db: Session = Depends(get_db)):
    return order_service.count_by_status(db)


@router.get("/member")
def list_member_orders(
    member_id: Optional[int] = Query(None, alias="memberId"),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    if member_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Member ID is required")
    orders = order_service.list_orders(db, member_id=member_id, limit=limit)
    return [order_to_dict(order) for order in orders]


@router.get("/{order_id}")
def get_order(order_id: int, db: Session = Depends(get_db)):
    return order_to_dict(order_service.get_order(db, order_id))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_order(payload: OrderCreate, db: Session = Depends(get_db)):
    order = order_service.place_order(
        db,
        items=[item.model_dump() for item in payload.items],
        member_id=payload.member_id,
        customer_name=payload.customer_name,
        customer_email=payload.customer_email,
        customer_phone=payload.customer_phone,
        order_type=payload.order_type,
        payment_method=payload.payment_method,
        points_used=payload.points_used,
        notes=payload.notes,
    )
    return order_to_dict(order)


@router.patch("/{order_id}")
def update_order_status(order_id: int, payload: OrderStatusUpdate, db: Session = Depends(get_db)):
    return order_to_dict(order_service.update_status(db, order_id, payload.status))
