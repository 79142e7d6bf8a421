"""
Credentials for the acting user.
The bearer token's subject is the user id written to every activity record.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from activitylog.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

TOKEN_TYPE = "access"


def hash_password(plain_password: str) -> str:
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: uuid.UUID | str) -> str:
    issued_at = datetime.now(timezone.utc)
    claims: dict[str, Any] = {
        "sub": str(user_id),
        "type": TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> uuid.UUID:
    """
    Validate ``token`` and return the user id it was issued for.
    Raises JWTError for bad signatures, expired tokens and malformed subjects.
    """
    claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    if claims.get("type") != TOKEN_TYPE:
        raise JWTError("Invalid token type")
    try:
        return uuid.UUID(str(claims.get("sub")))
    except ValueError as exc:
        raise JWTError("Invalid token subject") from exc
