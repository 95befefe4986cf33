"""Bearer-token authentication.

Tokens are HS256 JWTs carrying ``userId``, ``email`` and ``username``. Routes
depend on :func:`authenticate`; anything else about accounts lives elsewhere.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Header, HTTPException
from jose import JWTError, jwt
from pydantic import ValidationError

from ..settings import get_settings
from .entries import Document


class TokenPayload(Document):
    user_id: str
    email: str
    username: str


def create_access_token(payload: TokenPayload) -> str:
    settings = get_settings()
    claims = payload.model_dump(by_alias=True)
    claims["exp"] = datetime.now(timezone.utc) + timedelta(days=settings.jwt_expire_days)
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> Optional[TokenPayload]:
    settings = get_settings()
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return TokenPayload.model_validate(claims)
    except (JWTError, ValidationError):
        return None


async def authenticate(authorization: Optional[str] = Header(default=None)) -> TokenPayload:
    token = authorization.split(" ")[1] if authorization and " " in authorization else None
    if not token:
        raise HTTPException(status_code=401, detail="Access token required")

    payload = verify_token(token)
    if payload is None:
        raise HTTPException(status_code=403, detail="Invalid or expired token")
    return payload
