from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import JWTError, jwt

from calshare.core.config import settings


def create_token(
    subject: str | Any,
    expires_delta: timedelta,
    token_type: str,
) -> str:
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "exp": now + expires_delta,
        "iat": now,
        "sub": str(subject),
        "type": token_type,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(subject: str | Any) -> str:
    """Issue an access token; identity issuance proper lives outside this service."""
    return create_token(
        subject,
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        "access",
    )


def verify_token(token: str, token_type: str = "access") -> dict[str, Any]:
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
        if payload.get("type") != token_type:
            raise JWTError("Invalid token type")
        return payload
    except JWTError as exc:
        raise ValueError("Invalid token") from exc


def generate_invitation_token(nbytes: int | None = None) -> str:
    """Return a URL-safe invitation token with ``nbytes`` bytes of entropy."""
    return secrets.token_urlsafe(nbytes or settings.INVITATION_TOKEN_BYTES)


def mask_token(token: str) -> str:
    """Shorten a token for display so the full value is never re-exposed."""
    if len(token) <= 10:
        return f"{token[:3]}..."
    return f"{token[:5]}...{token[-3:]}"
