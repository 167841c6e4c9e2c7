"""Business rules shared by every route that mutates orders, stock, balances or reservations."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal

from coffee_ops.core.errors import BadRequestError, ConflictError

CENTS = Decimal("0.01")

ORDER_STATUS_FLOW = ("pending", "confirmed", "preparing", "ready", "completed")
ORDER_STATUS_CANCELLED = "cancelled"
ORDER_STATUSES = ORDER_STATUS_FLOW + (ORDER_STATUS_CANCELLED,)
TERMINAL_ORDER_STATUSES = {"completed", ORDER_STATUS_CANCELLED}

ORDER_TYPES = ("dine-in", "takeout", "delivery")
PAYMENT_METHODS = ("cash", "card", "wechat_pay", "account_balance")
ACCOUNT_BALANCE = "account_balance"

RESERVATION_STATUSES = ("pending", "confirmed", "cancelled", "completed", "no-show")
# Statuses that hold seats when checking capacity
RESERVATION_ACTIVE_STATUSES = ("pending", "confirmed")

MEMBERSHIP_LEVELS = ("Bronze", "Silver", "Gold", "Platinum")

MEMBER_TRANSACTION_TOPUP = "topup"
MEMBER_TRANSACTION_PURCHASE = "purchase"
MEMBER_TRANSACTION_REFUND = "refund"

# Sign applied to current_stock for each inventory transaction type
INVENTORY_TRANSACTION_SIGNS = {
    "restock": 1,
    "usage": -1,
    "waste": -1,
    "adjustment": -1,
}
INVENTORY_TRANSACTION_TYPES = tuple(INVENTORY_TRANSACTION_SIGNS)


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def order_total(lines: list[tuple[Decimal, int]]) -> Decimal:
    return to_money(sum((Decimal(str(price)) * quantity for price, quantity in lines), Decimal("0")))


def points_for_total(total: Decimal) -> int:
    """One point per whole currency unit spent."""
    return int(math.floor(total))


def validate_order_status(value: str) -> str:
    if value not in ORDER_STATUSES:
        raise BadRequestError(f"Invalid status. Must be one of: {', '.join(ORDER_STATUSES)}")
    return value


def can_transition_order(current: str, target: str) -> bool:
    if current in TERMINAL_ORDER_STATUSES or current == target:
        return False
    if target == ORDER_STATUS_CANCELLED:
        return True
    if current not in ORDER_STATUS_FLOW or target not in ORDER_STATUS_FLOW:
        return False
    return ORDER_STATUS_FLOW.index(target) > ORDER_STATUS_FLOW.index(current)


def ensure_order_transition(current: str, target: str) -> None:
    validate_order_status(target)
    if not can_transition_order(current, target):
        raise ConflictError(f"Cannot change order status from {current} to {target}")


def validate_reservation_status(value: str) -> str:
    if value not in RESERVATION_STATUSES:
        raise BadRequestError(f"Invalid status. Must be one of: {', '.join(RESERVATION_STATUSES)}")
    return value


def validate_inventory_transaction_type(value: str) -> str:
    if value not in INVENTORY_TRANSACTION_SIGNS:
        raise BadRequestError(
            f"Invalid transaction type. Must be one of: {', '.join(INVENTORY_TRANSACTION_TYPES)}"
        )
    return value


def stock_delta(transaction_type: str, quantity: Decimal) -> Decimal:
    return INVENTORY_TRANSACTION_SIGNS[validate_inventory_transaction_type(transaction_type)] * quantity


def validate_membership_level(value: str) -> str:
    if value not in MEMBERSHIP_LEVELS:
        raise BadRequestError(f"Invalid membership level. Must be one of: {', '.join(MEMBERSHIP_LEVELS)}")
    return value


def seats_available(booked: int, requested: int, capacity: int) -> bool:
    return booked + requested <= capacity


def ensure_required(changes: dict, required: tuple[str, ...]) -> None:
    """Nullable columns may be cleared by an update; required ones may not."""
    for field in required:
        if field in changes and changes[field] is None:
            raise BadRequestError(f"{field} cannot be null")
