from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from coffee_ops.core.database import with_transaction
from coffee_ops.core.errors import BadRequestError, ConflictError, NotFoundError
from coffee_ops.models.member import Member, MemberTransaction
from coffee_ops.services.rules import (
    MEMBER_TRANSACTION_TOPUP,
    ensure_required,
    to_money,
    validate_membership_level,
)

logger = logging.getLogger(__name__)

DEFAULT_TOPUP_DESCRIPTION = "Balance top-up"
DUPLICATE_MEMBER_MESSAGE = "Member with this email or phone already exists"


def get_member(db: Session, member_id: int) -> Member:
    member = db.query(Member).filter(Member.id == member_id).first()
    if not member:
        raise NotFoundError("Member not found")
    return member


def find_member(
    db: Session,
    *,
    member_id: Optional[int] = None,
    email: Optional[str] = None,
    phone: Optional[str] = None,
) -> Member:
    query = db.query(Member)
    if member_id is not None:
        query = query.filter(Member.id == member_id)
    if email:
        query = query.filter(Member.email == email.strip().lower())
    if phone:
        query = query.filter(Member.phone == phone.strip())
    member = query.first()
    if not member:
        raise NotFoundError("Member not found")
    return member


def list_members(db: Session) -> list[Member]:
    return db.query(Member).order_by(Member.created_at.desc(), Member.id.desc()).all()


def _ensure_unique_contact(db: Session, email: Optional[str], phone: Optional[str], exclude_id: Optional[int] = None) -> None:
    clauses = []
    if email:
        clauses.append(Member.email == email)
    if phone:
        clauses.append(Member.phone == phone)
    if not clauses:
        return
    query = db.query(Member.id).filter(or_(*clauses))
    if exclude_id is not None:
        query = query.filter(Member.id != exclude_id)
    if query.first():
        raise ConflictError(DUPLICATE_MEMBER_MESSAGE)


def create_member(
    db: Session,
    *,
    name: str,
    email: str,
    phone: Optional[str] = None,
    membership_level: str = "Bronze",
) -> Member:
    email = email.strip().lower()
    phone = phone.strip() if phone else None
    validate_membership_level(membership_level)
    _ensure_unique_contact(db, email, phone)

    member = Member(
        name=name.strip(),
        email=email,
        phone=phone,
        membership_level=membership_level,
        points=0,
        balance=Decimal("0.00"),
    )
    db.add(member)
    db.commit()
    db.refresh(member)
    logger.info("member registered", extra={"member_id": member.id})
    return member


def update_member(db: Session, member_id: int, changes: dict) -> Member:
    ensure_required(changes, ("name", "email", "membership_level"))
    member = get_member(db, member_id)
    if "email" in changes and changes["email"]:
        changes["email"] = changes["email"].strip().lower()
    if "phone" in changes and changes["phone"]:
        changes["phone"] = changes["phone"].strip()
    if changes.get("membership_level") is not None:
        validate_membership_level(changes["membership_level"])
    _ensure_unique_contact(db, changes.get("email"), changes.get("phone"), exclude_id=member.id)

    for field in ("name", "email", "phone", "membership_level"):
        if field in changes:
            setattr(member, field, changes[field])

    db.commit()
    db.refresh(member)
    return member


def adjust_balance(db: Session, member_id: int, amount: Decimal) -> Decimal:
    """Add ``amount`` (negative to debit) in one UPDATE and return the resulting balance.

    Debits only apply when the balance covers them; the caller gets
    ``ConflictError`` otherwise.
    """
    query = db.query(Member).filter(Member.id == member_id)
    if amount < 0:
        query = query.filter(Member.balance >= -amount)
    updated = query.update({Member.balance: Member.balance + amount})
    if not updated:
        get_member(db, member_id)
        logger.warning("balance debit rejected", extra={"member_id": member_id})
        raise ConflictError("Insufficient balance")
    return to_money(db.query(Member.balance).filter(Member.id == member_id).scalar())


def adjust_points(db: Session, member_id: int, delta: int) -> None:
    query = db.query(Member).filter(Member.id == member_id)
    if delta < 0:
        query = query.filter(Member.points >= -delta)
    updated = query.update({Member.points: Member.points + delta})
    if not updated:
        get_member(db, member_id)
        raise ConflictError("Insufficient points")


def record_ledger_entry(
    db: Session,
    *,
    member_id: int,
    transaction_type: str,
    amount: Decimal,
    balance_after: Decimal,
    description: Optional[str] = None,
    order_id: Optional[int] = None,
) -> MemberTransaction:
    entry = MemberTransaction(
        member_id=member_id,
        order_id=order_id,
        transaction_type=transaction_type,
        amount=amount,
        description=description,
        balance_after=balance_after,
    )
    db.add(entry)
    db.flush()
    return entry


def top_up(db: Session, *, member_id: int, amount: Decimal, description: Optional[str] = None) -> Decimal:
    amount = to_money(amount)
    if amount <= 0:
        raise BadRequestError("Top-up amount must be at least 0.01")
    get_member(db, member_id)

    def _work(session: Session) -> Decimal:
        new_balance = adjust_balance(session, member_id, amount)
        record_ledger_entry(
            session,
            member_id=member_id,
            transaction_type=MEMBER_TRANSACTION_TOPUP,
            amount=amount,
            balance_after=new_balance,
            description=description or DEFAULT_TOPUP_DESCRIPTION,
        )
        return new_balance

    new_balance = with_transaction(db, _work)
    logger.info("balance top-up applied amount=%s", amount, extra={"member_id": member_id})
    return new_balance


def list_transactions(db: Session, member_id: int, *, limit: int = 50, offset: int = 0) -> list[MemberTransaction]:
    return (
        db.query(MemberTransaction)
        .filter(MemberTransaction.member_id == member_id)
        .order_by(MemberTransaction.created_at.desc(), MemberTransaction.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
