"""
JWT Token Handler for the exam platform.
Handles session token creation and verification.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel

from exam_platform.settings import settings

logger = logging.getLogger(__name__)


class TokenPayload(BaseModel):
    """JWT Token payload schema."""
    user_id: str
    email: str
    role: str
    exp: Optional[datetime] = None
    iat: Optional[datetime] = None


def token_lifetime_seconds() -> int:
    return settings.jwt_expire_minutes * 60


def create_access_token(
    user_id: str,
    email: str,
    role: str,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a signed, time-limited session token.

    Args:
        user_id: User's unique identifier
        email: User's email
        role: User's role (student, teacher, admin)
        expires_delta: Optional custom expiration time

    Returns:
        JWT token string
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta if expires_delta is not None else timedelta(minutes=settings.jwt_expire_minutes))

    payload = {
        "user_id": user_id,
        "email": email,
        "role": role,
        "exp": expire,
        "iat": now
    }

    token = jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    logger.info(f"Created access token for user: {email}")
    return token


def verify_token(token: str) -> Optional[TokenPayload]:
    """
    Verify and decode a JWT token.

    Returns:
        TokenPayload if the signature is valid and the token has not expired, None otherwise
    """
    try:
        # jose rejects expired tokens with ExpiredSignatureError (a JWTError)
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.warning(f"Token verification failed: {str(e)}")
        return None

    if not payload.get("user_id") or not payload.get("role"):
        logger.warning("Token is missing user_id or role")
        return None

    return TokenPayload(
        user_id=payload["user_id"],
        email=payload.get("email", ""),
        role=payload["role"],
        exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc) if payload.get("exp") else None,
        iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc) if payload.get("iat") else None
    )
