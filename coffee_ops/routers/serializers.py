from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

from coffee_ops.models.category import Category
from coffee_ops.models.inventory import InventoryItem, InventoryTransaction
from coffee_ops.models.member import Member, MemberTransaction
from coffee_ops.models.menu_item import MenuItem
from coffee_ops.models.order import Order
from coffee_ops.models.order_item import OrderItem
from coffee_ops.models.reservation import Reservation
from coffee_ops.models.user import User
from coffee_ops.models.wishlist import WishlistItem


def _number(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def _iso(value: Optional[Union[date, datetime]]) -> Optional[str]:
    return value.isoformat() if value else None


def menu_item_to_dict(item: MenuItem) -> dict:
    return {
        "id": item.id,
        "name": item.name,
        "price": _number(item.price),
        "category": item.category,
        "description": item.description,
        "image_url": item.image_url,
        "is_available": bool(item.is_available),
        "created_at": _iso(item.created_at),
        "updated_at": _iso(item.updated_at),
    }


def category_to_dict(category: Category) -> dict:
    return {
        "id": category.id,
        "name": category.name,
        "description": category.description,
        "display_order": category.display_order,
        "is_active": bool(category.is_active),
        "created_at": _iso(category.created_at),
        "updated_at": _iso(category.updated_at),
    }


def inventory_item_to_dict(item: InventoryItem) -> dict:
    return {
        "id": item.id,
        "name": item.name,
        "sku": item.sku,
        "category": item.category,
        "current_stock": _number(item.current_stock),
        "minimum_stock": _number(item.minimum_stock),
        "unit": item.unit,
        "cost_per_unit": _number(item.cost_per_unit),
        "supplier": item.supplier,
        "last_restock_date": _iso(item.last_restock_date),
        "expiry_date": _iso(item.expiry_date),
        "is_low_stock": item.current_stock <= item.minimum_stock,
        "created_at": _iso(item.created_at),
        "updated_at": _iso(item.updated_at),
    }


def inventory_transaction_to_dict(transaction: InventoryTransaction) -> dict:
    return {
        "id": transaction.id,
        "inventory_item_id": transaction.inventory_item_id,
        "type": transaction.type,
        "quantity": _number(transaction.quantity),
        "unit_cost": _number(transaction.unit_cost),
        "total_cost": _number(transaction.total_cost),
        "reason": transaction.reason,
        "reference_id": transaction.reference_id,
        "created_by": transaction.created_by,
        "created_at": _iso(transaction.created_at),
    }


def order_item_to_dict(item: OrderItem) -> dict:
    return {
        "id": item.id,
        "order_id": item.order_id,
        "menu_item_id": item.menu_item_id,
        "menu_item_name": item.menu_item_name,
        "quantity": item.quantity,
        "unit_price": _number(item.unit_price),
        "subtotal": _number(item.subtotal),
        "customizations": item.customizations,
    }


def order_to_dict(order: Order) -> dict:
    return {
        "id": order.id,
        "member_id": order.member_id,
        "customer_name": order.customer_name,
        "customer_email": order.customer_email,
        "customer_phone": order.customer_phone,
        "total_amount": _number(order.total_amount),
        "status": order.status,
        "order_type": order.order_type,
        "payment_method": order.payment_method,
        "notes": order.notes,
        "points_earned": order.points_earned,
        "points_used": order.points_used,
        "created_at": _iso(order.created_at),
        "updated_at": _iso(order.updated_at),
        "items": [order_item_to_dict(item) for item in order.items],
    }


def member_to_dict(member: Member) -> dict:
    return {
        "id": member.id,
        "name": member.name,
        "email": member.email,
        "phone": member.phone,
        "membership_level": member.membership_level,
        "points": member.points,
        "balance": _number(member.balance),
        "member_since": _iso(member.member_since),
        "created_at": _iso(member.created_at),
        "updated_at": _iso(member.updated_at),
    }


def member_transaction_to_dict(entry: MemberTransaction) -> dict:
    return {
        "id": entry.id,
        "member_id": entry.member_id,
        "order_id": entry.order_id,
        "transaction_type": entry.transaction_type,
        "amount": _number(entry.amount),
        "description": entry.description,
        "balance_after": _number(entry.balance_after),
        "created_at": _iso(entry.created_at),
    }


def reservation_to_dict(reservation: Reservation) -> dict:
    return {
        "id": reservation.id,
        "user_id": reservation.user_id,
        "customer_name": reservation.customer_name,
        "customer_phone": reservation.customer_phone,
        "customer_email": reservation.customer_email,
        "party_size": reservation.party_size,
        "reservation_time": _iso(reservation.reservation_time),
        "status": reservation.status,
        "notes": reservation.notes,
        "created_at": _iso(reservation.created_at),
        "updated_at": _iso(reservation.updated_at),
    }


def wishlist_item_to_dict(entry: WishlistItem) -> dict:
    return {
        "id": entry.id,
        "menu_item_id": entry.menu_item_id,
        "user_id": entry.user_id,
        "guest_id": entry.guest_id,
        "created_at": _iso(entry.created_at),
        "menu_item": menu_item_to_dict(entry.menu_item) if entry.menu_item else None,
    }


def user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "created_at": _iso(user.created_at),
    }
