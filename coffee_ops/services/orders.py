from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from coffee_ops.core.database import with_transaction
from coffee_ops.core.errors import BadRequestError, ConflictError, NotFoundError
from coffee_ops.models.menu_item import MenuItem
from coffee_ops.models.order import Order
from coffee_ops.models.order_item import OrderItem
from coffee_ops.services import members as member_service
from coffee_ops.services.rules import (
    ACCOUNT_BALANCE,
    MEMBER_TRANSACTION_PURCHASE,
    MEMBER_TRANSACTION_REFUND,
    ORDER_STATUS_CANCELLED,
    ORDER_STATUSES,
    ensure_order_transition,
    order_total,
    points_for_total,
    to_money,
)

logger = logging.getLogger(__name__)


@dataclass
class OrderLine:
    name: str
    unit_price: Decimal
    quantity: int
    menu_item_id: Optional[int] = None
    customizations: Optional[str] = None

    @property
    def subtotal(self) -> Decimal:
        return to_money(self.unit_price * self.quantity)


def _resolve_lines(db: Session, items: list[dict]) -> list[OrderLine]:
    """Snapshot name and price for each requested line, filling gaps from the menu."""
    lines: list[OrderLine] = []
    for raw in items:
        menu_item_id = raw.get("menu_item_id")
        name = raw.get("name")
        price = raw.get("price")
        if menu_item_id is not None:
            menu_item = db.query(MenuItem).filter(MenuItem.id == menu_item_id).first()
            if not menu_item:
                raise BadRequestError(f"Unknown menu item: {menu_item_id}")
            if not menu_item.is_available:
                raise ConflictError(f"Menu item is not available: {menu_item.name}")
            name = name or menu_item.name
            price = price if price is not None else menu_item.price
        if price is None:
            raise BadRequestError("Each item needs a price or a menu item ID")
        lines.append(
            OrderLine(
                name=name or "Item",
                unit_price=to_money(price),
                quantity=int(raw.get("quantity") or 1),
                menu_item_id=menu_item_id,
                customizations=raw.get("customizations"),
            )
        )
    return lines


def place_order(
    db: Session,
    *,
    items: list[dict],
    member_id: Optional[int] = None,
    customer_name: Optional[str] = None,
    customer_email: Optional[str] = None,
    customer_phone: Optional[str] = None,
    order_type: str = "dine-in",
    payment_method: str = "cash",
    points_used: int = 0,
    notes: Optional[str] = None,
) -> Order:
    if not items:
        raise BadRequestError("Order must contain at least one item")
    if payment_method == ACCOUNT_BALANCE and member_id is None:
        raise BadRequestError("Account balance payments require a member ID")
    if points_used and member_id is None:
        raise BadRequestError("Redeeming points requires a member ID")

    member = member_service.get_member(db, member_id) if member_id is not None else None
    lines = _resolve_lines(db, items)
    total = order_total([(line.unit_price, line.quantity) for line in lines])
    points_earned = points_for_total(total) if member else 0

    def _work(session: Session) -> Order:
        order = Order(
            member_id=member.id if member else None,
            customer_name=customer_name or (member.name if member else None),
            customer_email=customer_email or (member.email if member else None),
            customer_phone=customer_phone or (member.phone if member else None),
            total_amount=total,
            status="pending",
            order_type=order_type,
            payment_method=payment_method,
            notes=notes,
            points_earned=points_earned,
            points_used=points_used,
        )
        session.add(order)

        for line in lines:
            order.items.append(
                OrderItem(
                    menu_item_id=line.menu_item_id,
                    menu_item_name=line.name,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    subtotal=line.subtotal,
                    customizations=line.customizations,
                )
            )
        session.flush()

        if member is not None:
            # Redemption is checked against points already held, before this order earns any
            if points_used:
                member_service.adjust_points(session, member.id, -points_used)
            if points_earned:
                member_service.adjust_points(session, member.id, points_earned)
            if payment_method == ACCOUNT_BALANCE:
                balance_after = member_service.adjust_balance(session, member.id, -total)
                member_service.record_ledger_entry(
                    session,
                    member_id=member.id,
                    order_id=order.id,
                    transaction_type=MEMBER_TRANSACTION_PURCHASE,
                    amount=total,
                    balance_after=balance_after,
                    description=f"Order #{order.id}",
                )
        session.flush()
        return order

    order = with_transaction(db, _work)
    logger.info(
        "order placed total=%s items=%s payment=%s",
        total,
        len(lines),
        payment_method,
        extra={"order_id": order.id, "member_id": member_id},
    )
    return get_order(db, order.id)


def _orders_query(db: Session):
    return db.query(Order).options(selectinload(Order.items))


def get_order(db: Session, order_id: int) -> Order:
    order = _orders_query(db).filter(Order.id == order_id).first()
    if not order:
        raise NotFoundError("Order not found")
    return order


def list_orders(
    db: Session,
    *,
    status: Optional[str] = None,
    order_type: Optional[str] = None,
    member_id: Optional[int] = None,
    limit: Optional[int] = None,
) -> list[Order]:
    query = _orders_query(db)
    if status:
        query = query.filter(Order.status == status)
    if order_type:
        query = query.filter(Order.order_type == order_type)
    if member_id is not None:
        query = query.filter(Order.member_id == member_id)
    query = query.order_by(Order.created_at.desc(), Order.id.desc())
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def count_by_status(db: Session) -> dict[str, int]:
    rows = db.query(Order.status, func.count(Order.id)).group_by(Order.status).all()
    counts = {status: 0 for status in ORDER_STATUSES}
    for status, count in rows:
        counts[status] = int(count)
    return counts


def update_status(db: Session, order_id: int, new_status: str) -> Order:
    order = get_order(db, order_id)
    previous = order.status
    ensure_order_transition(previous, new_status)

    def _work(session: Session) -> None:
        # Only the request that still sees the previous status wins the transition
        updated = (
            session.query(Order)
            .filter(Order.id == order_id, Order.status == previous)
            .update({Order.status: new_status}, synchronize_session=False)
        )
        if not updated:
            logger.warning("order status changed concurrently", extra={"order_id": order_id})
            raise ConflictError(f"Cannot change order status from {previous} to {new_status}")
        refund_due = (
            new_status == ORDER_STATUS_CANCELLED
            and order.payment_method == ACCOUNT_BALANCE
            and order.member_id is not None
        )
        if refund_due:
            amount = to_money(order.total_amount)
            balance_after = member_service.adjust_balance(session, order.member_id, amount)
            member_service.record_ledger_entry(
                session,
                member_id=order.member_id,
                order_id=order.id,
                transaction_type=MEMBER_TRANSACTION_REFUND,
                amount=amount,
                balance_after=balance_after,
                description=f"Refund for order #{order.id}",
            )
        session.flush()

    with_transaction(db, _work)
    logger.info("order status changed %s -> %s", previous, new_status, extra={"order_id": order_id})
    db.refresh(order)
    return order
