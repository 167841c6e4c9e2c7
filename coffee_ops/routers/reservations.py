from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field, field_validator, model_validator
from sqlalchemy.orm import Session

from coffee_ops.core.database import get_db
from coffee_ops.routers.serializers import reservation_to_dict
from coffee_ops.services import reservations as reservation_service

router = APIRouter(prefix="/api/reservations", tags=["reservations"])

INVALID_TIME_MESSAGE = "Invalid reservation time format"


def _parse_time(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, str) and value.strip():
        candidate = value.strip()
        if candidate.endswith("Z"):
            candidate = candidate[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(candidate)
        except ValueError:
            pass
    raise ValueError(INVALID_TIME_MESSAGE)


class ReservationCreate(BaseModel):
    user_id: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    party_size: Optional[int] = Field(None, ge=1)
    reservation_time: Optional[datetime] = None
    notes: Optional[str] = None

    @field_validator("reservation_time", mode="before")
    @classmethod
    def parse_reservation_time(cls, value: Any) -> Optional[datetime]:
        return _parse_time(value)

    @model_validator(mode="after")
    def require_fields(self):
        missing = (
            not (self.customer_name or "").strip()
            or not (self.customer_phone or "").strip()
            or self.party_size is None
            or self.reservation_time is None
        )
        if missing:
            raise ValueError("Customer name, phone, party size, and reservation time are required")
        return self


class ReservationUpdate(BaseModel):
    customer_name: Optional[str] = Field(None, min_length=1)
    customer_phone: Optional[str] = Field(None, min_length=1)
    customer_email: Optional[str] = None
    party_size: Optional[int] = Field(None, ge=1)
    reservation_time: Optional[datetime] = None
    notes: Optional[str] = None

    @field_validator("reservation_time", mode="before")
    @classmethod
    def parse_reservation_time(cls, value: Any) -> Optional[datetime]:
        return _parse_time(value)


class ReservationStatusUpdate(BaseModel):
    status: str = Field(..., min_length=1)


@router.get("")
def list_reservations(
    status_filter: Optional[str] = Query(None, alias="status"),
    on_date: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
):
    reservations = reservation_service.list_reservations(db, status=status_filter, on_date=on_date)
    return [reservation_to_dict(reservation) for reservation in reservations]


@router.get("/availability")
def check_availability(
    time: str = Query(...),
    party_size: int = Query(..., ge=1),
    db: Session = Depends(get_db),
):
    try:
        at = _parse_time(time)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_TIME_MESSAGE) from exc
    return {"available": reservation_service.is_time_slot_available(db, at, party_size)}


@router.get("/{reservation_id}")
def get_reservation(reservation_id: int, db: Session = Depends(get_db)):
    return reservation_to_dict(reservation_service.get_reservation(db, reservation_id))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_reservation(payload: ReservationCreate, db: Session = Depends(get_db)):
    reservation = reservation_service.create_reservation(db, payload.model_dump())
    return reservation_to_dict(reservation)


@router.put("/{reservation_id}")
def update_reservation(reservation_id: int, payload: ReservationUpdate, db: Session = Depends(get_db)):
    reservation = reservation_service.update_reservation(
        db, reservation_id, payload.model_dump(exclude_unset=True)
    )
    return reservation_to_dict(reservation)


@router.patch("/{reservation_id}/status")
def update_reservation_status(
    reservation_id: int,
    payload: ReservationStatusUpdate,
    db: Session = Depends(get_db),
):
    reservation = reservation_service.update_reservation_status(db, reservation_id, payload.status)
    return reservation_to_dict(reservation)


@router.delete("/{reservation_id}")
def delete_reservation(reservation_id: int, db: Session = Depends(get_db)):
    reservation_service.delete_reservation(db, reservation_id)
    return {"success": True}
