from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel, EmailStr, model_validator
from sqlalchemy.orm import Session

from coffee_ops.core.database import get_db
from coffee_ops.deps import get_current_user
from coffee_ops.models.user import User
from coffee_ops.routers.serializers import user_to_dict
from coffee_ops.services import auth as auth_service

router = APIRouter(prefix="/api/auth", tags=["auth"])

MIN_PASSWORD_LENGTH = 6


class RegisterPayload(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    name: Optional[str] = None

    @model_validator(mode="after")
    def require_fields(self):
        if not self.email or not self.password or not (self.name or "").strip():
            raise ValueError("Email, password, and name are required")
        if len(self.password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return self


class LoginPayload(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None

    @model_validator(mode="after")
    def require_fields(self):
        if not (self.email or "").strip() or not self.password:
            raise ValueError("Email and password are required")
        return self


def _session_payload(user: User) -> dict:
    return {
        "success": True,
        "user": user_to_dict(user),
        "token": auth_service.create_access_token(user),
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(payload: RegisterPayload, db: Session = Depends(get_db)):
    user = auth_service.register_user(db, email=payload.email, password=payload.password, name=payload.name)
    return _session_payload(user)


@router.post("/login")
def login(payload: LoginPayload, db: Session = Depends(get_db)):
    user = auth_service.authenticate(db, email=payload.email, password=payload.password)
    return _session_payload(user)


@router.post("/token")
def token(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    """Password-form login used by the Swagger UI Authorize button."""
    user = auth_service.authenticate(db, email=form_data.username, password=form_data.password)
    return {"access_token": auth_service.create_access_token(user), "token_type": "bearer"}


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return {"success": True, "user": user_to_dict(user)}
