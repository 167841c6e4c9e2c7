from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from coffee_ops.core import config
from coffee_ops.core.errors import ConflictError, NotFoundError, UnauthorizedError
from coffee_ops.models.user import User

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
INVALID_TOKEN_MESSAGE = "Invalid token"


def _password_bytes(password: str) -> bytes:
    # bcrypt only reads the first 72 bytes
    return (password or "").encode("utf-8")[:72]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(user: User, *, expires_minutes: Optional[int] = None) -> str:
    """JWT with ``sub`` set to the user id as a string."""
    now = datetime.now(timezone.utc)
    expires = now + timedelta(minutes=expires_minutes or config.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload: Dict[str, Any] = {
        "sub": str(user.id),
        "email": user.email,
        "iat": int(now.timestamp()),
        "exp": int(expires.timestamp()),
    }
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except JWTError as exc:
        raise UnauthorizedError(INVALID_TOKEN_MESSAGE) from exc


def register_user(db: Session, *, email: str, password: str, name: str) -> User:
    email = email.strip().lower()
    if db.query(User.id).filter(User.email == email).first():
        raise ConflictError("User already exists with this email")

    user = User(email=email, name=name.strip(), password_hash=hash_password(password))
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("user registered id=%s", user.id)
    return user


def authenticate(db: Session, *, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if not user or not verify_password(password, user.password_hash):
        logger.warning("login rejected")
        raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)
    return user


def user_from_token(db: Session, token: str) -> User:
    payload = decode_access_token(token)
    raw_id = str(payload.get("sub") or "").strip()
    if not raw_id.isdigit():
        raise UnauthorizedError(INVALID_TOKEN_MESSAGE)
    user = db.query(User).filter(User.id == int(raw_id)).first()
    if not user:
        raise NotFoundError("User not found")
    return user
