from __future__ import annotations

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import AliasChoices, BaseModel, Field, model_validator
from sqlalchemy.orm import Session

from coffee_ops.core.database import get_db
from coffee_ops.routers.serializers import member_to_dict, member_transaction_to_dict
from coffee_ops.services import members as member_service
from coffee_ops.services.rules import to_money

router = APIRouter(prefix="/api/members", tags=["members"])


class MemberCreate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    membership_level: str = Field("Bronze", validation_alias=AliasChoices("membership_level", "membershipLevel"))

    @model_validator(mode="after")
    def require_contact(self):
        if not (self.name or "").strip() or not (self.email or "").strip():
            raise ValueError("Name and email are required")
        return self


class MemberUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = Field(None, min_length=3)
    phone: Optional[str] = None
    membership_level: Optional[str] = Field(
        None, validation_alias=AliasChoices("membership_level", "membershipLevel")
    )


class TopUpRequest(BaseModel):
    member_id: Optional[int] = Field(None, validation_alias=AliasChoices("memberId", "member_id"))
    amount: Optional[Decimal] = None
    description: Optional[str] = None

    @model_validator(mode="after")
    def require_positive_amount(self):
        if self.member_id is None or self.amount is None or to_money(self.amount) <= 0:
            raise ValueError("Member ID and positive amount are required")
        return self


@router.get("")
def get_members(
    member_id: Optional[int] = Query(None, alias="id"),
    email: Optional[str] = Query(None),
    phone: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    if member_id is not None or email or phone:
        member = member_service.find_member(db, member_id=member_id, email=email, phone=phone)
        return member_to_dict(member)
    return [member_to_dict(member) for member in member_service.list_members(db)]


@router.post("", status_code=status.HTTP_201_CREATED)
def register_member(payload: MemberCreate, db: Session = Depends(get_db)):
    member = member_service.create_member(
        db,
        name=payload.name,
        email=payload.email,
        phone=payload.phone,
        membership_level=payload.membership_level,
    )
    return member_to_dict(member)


@router.post("/topup")
def top_up_balance(payload: TopUpRequest, db: Session = Depends(get_db)):
    new_balance = member_service.top_up(
        db,
        member_id=payload.member_id,
        amount=payload.amount,
        description=payload.description,
    )
    return {
        "success": True,
        "newBalance": float(new_balance),
        "message": f"Successfully added ${to_money(payload.amount):.2f} to your account",
    }


@router.get("/transactions")
def list_member_transactions(
    member_id: Optional[int] = Query(None, alias="memberId"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    if member_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Member ID is required")
    entries = member_service.list_transactions(db, member_id, limit=limit, offset=offset)
    return [member_transaction_to_dict(entry) for entry in entries]


@router.get("/{member_id}")
def get_member(member_id: int, db: Session = Depends(get_db)):
    return member_to_dict(member_service.get_member(db, member_id))


@router.put("/{member_id}")
def update_member(member_id: int, payload: MemberUpdate, db: Session = Depends(get_db)):
    member = member_service.update_member(db, member_id, payload.model_dump(exclude_unset=True))
    return member_to_dict(member)
