from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from coffee_ops.core.config import RESERVATION_CAPACITY, RESERVATION_WINDOW_MINUTES
from coffee_ops.core.errors import ConflictError, NotFoundError
from coffee_ops.models.reservation import Reservation
from coffee_ops.services.rules import (
    RESERVATION_ACTIVE_STATUSES,
    ensure_required,
    seats_available,
    validate_reservation_status,
)

logger = logging.getLogger(__name__)

SLOT_UNAVAILABLE_MESSAGE = "Time slot is not available"

_EDITABLE_FIELDS = (
    "user_id",
    "customer_name",
    "customer_phone",
    "customer_email",
    "party_size",
    "reservation_time",
    "notes",
)
_REQUIRED_FIELDS = ("customer_name", "customer_phone", "party_size", "reservation_time")


def normalize_time(value: datetime) -> datetime:
    """Store reservation times as naive UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def list_reservations(
    db: Session,
    *,
    status: Optional[str] = None,
    on_date: Optional[date] = None,
) -> list[Reservation]:
    query = db.query(Reservation)
    if status:
        query = query.filter(Reservation.status == status)
    if on_date is not None:
        day_start = datetime.combine(on_date, time.min)
        query = query.filter(
            Reservation.reservation_time >= day_start,
            Reservation.reservation_time < day_start + timedelta(days=1),
        )
    return query.order_by(Reservation.reservation_time.asc(), Reservation.id.asc()).all()


def get_reservation(db: Session, reservation_id: int) -> Reservation:
    reservation = db.query(Reservation).filter(Reservation.id == reservation_id).first()
    if not reservation:
        raise NotFoundError("Reservation not found")
    return reservation


def booked_seats(db: Session, at: datetime, *, exclude_id: Optional[int] = None) -> int:
    at = normalize_time(at)
    window = timedelta(minutes=RESERVATION_WINDOW_MINUTES)
    query = db.query(func.coalesce(func.sum(Reservation.party_size), 0)).filter(
        Reservation.status.in_(RESERVATION_ACTIVE_STATUSES),
        Reservation.reservation_time >= at - window,
        Reservation.reservation_time <= at + window,
    )
    if exclude_id is not None:
        query = query.filter(Reservation.id != exclude_id)
    return int(query.scalar() or 0)


def is_time_slot_available(
    db: Session,
    at: datetime,
    party_size: int,
    *,
    exclude_id: Optional[int] = None,
) -> bool:
    return seats_available(booked_seats(db, at, exclude_id=exclude_id), party_size, RESERVATION_CAPACITY)


def create_reservation(db: Session, data: dict) -> Reservation:
    data = dict(data)
    data["reservation_time"] = normalize_time(data["reservation_time"])
    if not is_time_slot_available(db, data["reservation_time"], data["party_size"]):
        logger.warning("reservation rejected: slot full at %s", data["reservation_time"].isoformat())
        raise ConflictError(SLOT_UNAVAILABLE_MESSAGE)

    status = validate_reservation_status(data.get("status") or "pending")
    reservation = Reservation(status=status, **{field: data.get(field) for field in _EDITABLE_FIELDS})
    db.add(reservation)
    db.commit()
    db.refresh(reservation)
    return reservation


def update_reservation(db: Session, reservation_id: int, changes: dict) -> Reservation:
    ensure_required(changes, _REQUIRED_FIELDS)
    reservation = get_reservation(db, reservation_id)
    if changes.get("reservation_time") is not None:
        changes["reservation_time"] = normalize_time(changes["reservation_time"])

    new_time = changes.get("reservation_time") or reservation.reservation_time
    new_size = changes.get("party_size") or reservation.party_size
    moved = new_time != reservation.reservation_time or new_size != reservation.party_size
    if moved and reservation.status in RESERVATION_ACTIVE_STATUSES:
        if not is_time_slot_available(db, new_time, new_size, exclude_id=reservation.id):
            raise ConflictError(SLOT_UNAVAILABLE_MESSAGE)

    for field, value in changes.items():
        if field in _EDITABLE_FIELDS:
            setattr(reservation, field, value)
    db.commit()
    db.refresh(reservation)
    return reservation


def update_reservation_status(db: Session, reservation_id: int, status: str) -> Reservation:
    validate_reservation_status(status)
    reservation = get_reservation(db, reservation_id)
    reactivated = status in RESERVATION_ACTIVE_STATUSES and reservation.status not in RESERVATION_ACTIVE_STATUSES
    if reactivated and not is_time_slot_available(
        db, reservation.reservation_time, reservation.party_size, exclude_id=reservation.id
    ):
        raise ConflictError(SLOT_UNAVAILABLE_MESSAGE)
    reservation.status = status
    db.commit()
    db.refresh(reservation)
    logger.info("reservation %s marked %s", reservation_id, status)
    return reservation


def delete_reservation(db: Session, reservation_id: int) -> None:
    reservation = get_reservation(db, reservation_id)
    db.delete(reservation)
    db.commit()
