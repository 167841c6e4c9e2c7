from __future__ import annotations

from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from coffee_ops.core.database import get_db
from coffee_ops.core.errors import UnauthorizedError
from coffee_ops.models.user import User
from coffee_ops.services.auth import user_from_token

# Swagger "Authorize" posts the password form to this endpoint
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    if not token:
        raise UnauthorizedError("No token provided")
    return user_from_token(db, token)
